"""Ordered rule table resolving template expressions against a document.

The UPD template was designed for a reporting engine that evaluates its own
expression language.  We do not evaluate it: every expression the template
uses is recognised by one of the rules below and mapped onto
:class:`~upd_render.context.DocumentContext` fields.  Rules are tried in the
order of :data:`RULES` and the first match wins:

1. exact expressions (document number, order, currency, status, titles);
2. prefixes: date formatting and formatting helpers whose side effects are
   not reproduced and which therefore resolve to an empty string;
3. combinations of party field fragments (INN/KPP, addresses, signatories);
4. line-item fields and money formulas, only when a position is in scope;
5. country and traceability fields the CRM does not track.

Whatever is left is :data:`UNRESOLVED`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from . import vat
from .context import DocumentContext, LineItem, Party
from .formatting import format_date_long_ru, join_tax_ids

KIND_EXACT = "exact"
KIND_PREFIX = "prefix"
KIND_CONTAINS = "contains"
KIND_ITEM = "item"
KIND_COUNTRY = "country"

Handler = Callable[[DocumentContext, Optional[LineItem]], Any]


class _Unresolved:
    """Marker returned when no rule matches an expression."""

    _instance: Optional["_Unresolved"] = None

    def __new__(cls) -> "_Unresolved":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED = _Unresolved()


@dataclass(frozen=True)
class Rule:
    name: str
    kind: str
    matches: Callable[[str], bool]
    handler: Handler
    needs_item: bool = False

    def applies(self, expression: str, item: Optional[LineItem]) -> bool:
        if self.needs_item and item is None:
            return False
        return self.matches(expression)

    def __call__(self, context: DocumentContext, item: Optional[LineItem] = None) -> Any:
        return self.handler(context, item)


def exact(name: str, literal: str, handler: Handler, *, kind: str = KIND_EXACT, needs_item: bool = False) -> Rule:
    return Rule(name, kind, lambda expr: expr == literal, handler, needs_item)


def prefix(name: str, start: str, handler: Handler, *, kind: str = KIND_PREFIX, needs_item: bool = False) -> Rule:
    return Rule(name, kind, lambda expr: expr.startswith(start), handler, needs_item)


def contains_all(
    name: str,
    fragments: Sequence[str],
    handler: Handler,
    *,
    kind: str = KIND_CONTAINS,
    needs_item: bool = False,
) -> Rule:
    parts = tuple(fragments)
    return Rule(name, kind, lambda expr: all(p in expr for p in parts), handler, needs_item)


def contains_any_of_all(
    name: str,
    required: Sequence[str],
    alternatives: Sequence[str],
    handler: Handler,
    *,
    kind: str = KIND_ITEM,
    needs_item: bool = False,
) -> Rule:
    """Match when every *required* fragment and at least one alternative is present."""
    req = tuple(required)
    alt = tuple(alternatives)

    def _matches(expr: str) -> bool:
        return all(p in expr for p in req) and any(a in expr for a in alt)

    return Rule(name, kind, _matches, handler, needs_item)


def _const(value: Any) -> Handler:
    return lambda ctx, item: value


# ----------------------------- ВЫРАЖЕНИЯ ШАБЛОНА -----------------------------

SOURCE_REQ = "o.sourceAgentRequisite"
TARGET_REQ = "o.targetAgentRequisite"

EXPR_DOCUMENT_NUMBER = "${o.name}"
EXPR_ORDER_NUMBER = "${formatter.getDemandsDocumentNumber(o)}"
EXPR_ORDER_DATE = "${formatter.getDemandsDocumentDate(o)}"
EXPR_CURRENCY_CODE = "${formatter.getCurrency(o).code}"
EXPR_CURRENCY_NAME = "${formatter.getCurrency(o).description}"
EXPR_UPD_STATUS = "${formatter.getUpdStatus(o)}"
EXPR_ISSUER_TITLE = (
    "${formatter.printIfElse(empty(o.sourceAgentRequisite.legalTitle), "
    "o.sourceAgentRequisite.agent.name, o.sourceAgentRequisite.legalTitle)}"
)
EXPR_CUSTOMER_TITLE = (
    "${formatter.printIfElse(empty(o.targetAgentRequisite.legalTitle), "
    "o.targetAgentRequisite.agent.name, o.targetAgentRequisite.legalTitle)}"
)

PREFIX_DATE = '${formatter.format("%1$td %1$tB %1$tY"'
PREFIX_NUMBERED_DATE = '${formatter.format("№'

NEUTRALIZED_PREFIXES = (
    "${formatter.adjustRowHeight",
    "${formatter.mergeByTraceable",
    "${formatter.sumByColumn",
    "${formatter.tableDivisionByPage",
    "${formatter.formatRelatedPaymentsToString",
    "${o.positions}",
    "${o.contract",
    "${o.idStateContract",
)

EXPR_POSITION_NAME = "${position.printName}"
EXPR_POSITION_QUANTITY = "${position.quantity}"
EXPR_POSITION_UOM_CODE = "${position.good.uom.code}"
EXPR_POSITION_UOM_NAME = "${position.good.uom.name}"
EXPR_POSITION_SKU = (
    '${formatter.printIfElse(empty(position.good.code), "----", '
    "position.consignment.feature.effectiveCode)}"
)
# the double space after payerVat is how the template spells it
EXPR_POSITION_UNIT_PRICE = (
    "${formatter.printIfElse(o.sourceAgentRequisite.agent.payerVat  || o.hasReturns(), "
    "(position.price.sumInCurrency /(100+ position.vat) ),"
    "(position.price.sumInCurrency / 100))}"
)
EXPR_POSITION_COST_WITHOUT_VAT = "${formatter.getPositionCostWithoutVatForUpd(position)}"
EXPR_POSITION_SUM_VAT = "${formatter.getPositionSumVatForUpd(position)}"
EXPR_POSITION_COST_WITH_VAT = "${formatter.getPositionCostWithVatForUpd(position)}"

NO_SKU = "----"
NO_COUNTRY_CODE = "-"
NO_COUNTRY_NAME = "----"
NO_TRACEABILITY = "----"


# ----------------------------- ОБРАБОТЧИКИ -----------------------------


def _order_date(ctx: DocumentContext, item: Optional[LineItem]) -> str:
    return format_date_long_ru(ctx.order_date)


def _invoice_date(ctx: DocumentContext, item: Optional[LineItem]) -> str:
    return format_date_long_ru(ctx.invoice_date)


def _numbered_invoice_date(ctx: DocumentContext, item: Optional[LineItem]) -> str:
    return f"№ {format_date_long_ru(ctx.invoice_date)}"


def _tax_ids(party: Callable[[DocumentContext], Party]) -> Handler:
    def handler(ctx: DocumentContext, item: Optional[LineItem]) -> str:
        p = party(ctx)
        return join_tax_ids(p.inn, p.kpp)

    return handler


def _legal_address(party: Callable[[DocumentContext], Party]) -> Handler:
    return lambda ctx, item: party(ctx).effective_legal_address


def _title(party: Callable[[DocumentContext], Party]) -> Handler:
    return lambda ctx, item: party(ctx).display_title


def _issuer(ctx: DocumentContext) -> Party:
    return ctx.issuer


def _customer(ctx: DocumentContext) -> Party:
    return ctx.customer


def _unit_price(ctx: DocumentContext, item: LineItem) -> float:
    return vat.unit_net_price(item.price_gross, item.vat_rate.fraction)


def _cost_without_vat(ctx: DocumentContext, item: LineItem) -> float:
    return vat.net_total(item.price_gross, item.quantity, item.vat_rate.fraction)


def _sum_vat(ctx: DocumentContext, item: LineItem) -> float:
    return vat.vat_total(item.price_gross, item.quantity, item.vat_rate.fraction)


def _cost_with_vat(ctx: DocumentContext, item: LineItem) -> float:
    return vat.gross_total(item.price_gross, item.quantity)


def _vat_label(ctx: DocumentContext, item: LineItem) -> str:
    return vat.vat_label(item.vat_rate, ctx.issuer.payer_vat)


# ----------------------------- ТАБЛИЦА ПРАВИЛ -----------------------------

EXACT_RULES = (
    exact("document-number", EXPR_DOCUMENT_NUMBER, lambda ctx, item: ctx.invoice_number),
    exact("order-number", EXPR_ORDER_NUMBER, lambda ctx, item: ctx.order_number or ""),
    exact("order-date", EXPR_ORDER_DATE, _order_date),
    exact("currency-code", EXPR_CURRENCY_CODE, lambda ctx, item: ctx.currency_code),
    exact("currency-name", EXPR_CURRENCY_NAME, lambda ctx, item: ctx.currency_description),
    exact("upd-status", EXPR_UPD_STATUS, _const("1")),
    exact("issuer-title", EXPR_ISSUER_TITLE, _title(_issuer)),
    exact("customer-title", EXPR_CUSTOMER_TITLE, _title(_customer)),
)

PREFIX_RULES = (
    prefix("invoice-date", PREFIX_DATE, _invoice_date),
    prefix("numbered-invoice-date", PREFIX_NUMBERED_DATE, _numbered_invoice_date),
) + tuple(
    prefix(f"neutralize:{start[2:]}", start, _const("")) for start in NEUTRALIZED_PREFIXES
)

CONTAINS_RULES = (
    contains_all("issuer-tax-ids", (f"{SOURCE_REQ}.INN", f"{SOURCE_REQ}.KPP"), _tax_ids(_issuer)),
    contains_all("customer-tax-ids", (f"{TARGET_REQ}.INN", f"{TARGET_REQ}.KPP"), _tax_ids(_customer)),
    contains_all("issuer-legal-address", (f"{SOURCE_REQ}.legalAddress",), _legal_address(_issuer)),
    contains_all("customer-legal-address", (f"{TARGET_REQ}.legalAddress",), _legal_address(_customer)),
    contains_all("issuer-director", ("o.sourceAgent.director",), lambda ctx, item: ctx.issuer.director or ""),
    contains_all(
        "issuer-chief-accountant",
        ("o.sourceAgent.chiefAccountant",),
        lambda ctx, item: ctx.issuer.chief_accountant or "",
    ),
)

ITEM_RULES = (
    exact("position-name", EXPR_POSITION_NAME, lambda ctx, item: item.name, kind=KIND_ITEM, needs_item=True),
    exact(
        "position-quantity",
        EXPR_POSITION_QUANTITY,
        lambda ctx, item: vat.round_money(item.quantity),
        kind=KIND_ITEM,
        needs_item=True,
    ),
    exact("position-unit-code", EXPR_POSITION_UOM_CODE, lambda ctx, item: item.unit or "", kind=KIND_ITEM, needs_item=True),
    exact("position-unit-name", EXPR_POSITION_UOM_NAME, lambda ctx, item: item.unit or "", kind=KIND_ITEM, needs_item=True),
    exact("position-sku", EXPR_POSITION_SKU, lambda ctx, item: item.sku or NO_SKU, kind=KIND_ITEM, needs_item=True),
    exact("position-unit-price", EXPR_POSITION_UNIT_PRICE, _unit_price, kind=KIND_ITEM, needs_item=True),
    exact("position-cost-without-vat", EXPR_POSITION_COST_WITHOUT_VAT, _cost_without_vat, kind=KIND_ITEM, needs_item=True),
    exact("position-sum-vat", EXPR_POSITION_SUM_VAT, _sum_vat, kind=KIND_ITEM, needs_item=True),
    exact("position-cost-with-vat", EXPR_POSITION_COST_WITH_VAT, _cost_with_vat, kind=KIND_ITEM, needs_item=True),
    # the label text itself is Cyrillic in the template, avoid full-string equality
    contains_any_of_all(
        "position-vat-label",
        ("position.nullableVat", "payerVat"),
        (vat.NO_VAT_LABEL, "Bez NDS"),
        _vat_label,
        needs_item=True,
    ),
)

COUNTRY_RULES = (
    contains_all("country-code", ("position.country.code",), _const(NO_COUNTRY_CODE), kind=KIND_COUNTRY, needs_item=True),
    contains_all("country-name", ("position.country.name",), _const(NO_COUNTRY_NAME), kind=KIND_COUNTRY, needs_item=True),
    prefix(
        "traceability",
        "${formatter.printTraceableIfElse",
        _const(NO_TRACEABILITY),
        kind=KIND_COUNTRY,
        needs_item=True,
    ),
)

RULES = EXACT_RULES + PREFIX_RULES + CONTAINS_RULES + ITEM_RULES + COUNTRY_RULES


def find_rule(
    expression: str,
    item: Optional[LineItem] = None,
    rules: Iterable[Rule] = RULES,
) -> Optional[Rule]:
    """Return the first rule applicable to *expression*, or ``None``."""
    for rule in rules:
        if rule.applies(expression, item):
            return rule
    return None


def resolve(
    expression: str,
    context: DocumentContext,
    item: Optional[LineItem] = None,
    rules: Iterable[Rule] = RULES,
) -> Any:
    """Resolve *expression* or return :data:`UNRESOLVED`.

    Position-bound expressions evaluated without *item* stay unresolved so a
    later pass with the position in scope can pick them up.
    """
    rule = find_rule(expression, item, rules)
    if rule is None:
        return UNRESOLVED
    return rule(context, item)
