"""Data structures describing one UPD document to render."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import ContextError
from .number_format import parse_number

DEFAULT_CURRENCY_CODE = "RUB"
DEFAULT_CURRENCY_DESCRIPTION = "Российский рубль"


class VatRate(Enum):
    """VAT category of a line item; the value is the rate fraction."""

    NONE = 0.0
    VAT_5 = 0.05
    VAT_7 = 0.07
    VAT_10 = 0.10
    VAT_20 = 0.20
    VAT_22 = 0.22

    @property
    def fraction(self) -> float:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> "VatRate":
        """Return the category for *value*; anything unknown is ``NONE``.

        Accepts members, names (``"VAT_20"``), percentages (``"20%"``, ``20``)
        and fractions (``0.2``).
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, str):
            text = value.strip().upper()
            if text in cls.__members__:
                return cls[text]
            text = text.rstrip("%").strip()
            if not text:
                return cls.NONE
            number = parse_number(text, default=-1.0)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            number = float(value)
        else:
            return cls.NONE
        if number > 1:
            number = number / 100
        for member in cls:
            if abs(member.value - number) < 1e-9:
                return member
        return cls.NONE


@dataclass(frozen=True)
class LineItem:
    """One billed position; printed rows follow the order of these items."""

    name: str
    quantity: float
    price_gross: float
    vat_rate: VatRate = VatRate.NONE
    unit: Optional[str] = None
    sku: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.vat_rate, VatRate):
            object.__setattr__(self, "vat_rate", VatRate.parse(self.vat_rate))
        if self.quantity < 0:
            raise ContextError(
                f"Quantity must be non-negative, got {self.quantity} for {self.name!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LineItem":
        if not isinstance(data, Mapping):
            raise ContextError(f"Position must be a mapping, got {type(data).__name__}")
        name = str(data.get("name") or "")
        return cls(
            name=name,
            quantity=_parse_amount(data.get("quantity"), "quantity", name),
            price_gross=_parse_amount(
                data.get("price_gross", data.get("price")), "price_gross", name
            ),
            vat_rate=VatRate.parse(data.get("vat_rate")),
            unit=_optional_text(data.get("unit")),
            sku=_optional_text(data.get("sku")),
        )


@dataclass(frozen=True)
class Party:
    name: str = ""
    legal_title: str = ""
    inn: Optional[str] = None
    kpp: Optional[str] = None
    address: Optional[str] = None
    legal_address: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.legal_title or self.name

    @property
    def effective_legal_address(self) -> str:
        return self.legal_address or self.address or ""

    @classmethod
    def _fields_from_mapping(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        name = str(data.get("name") or "")
        address = _optional_text(data.get("address"))
        return {
            "name": name,
            "legal_title": str(data.get("legal_title") or name),
            "inn": _optional_text(data.get("inn")),
            "kpp": _optional_text(data.get("kpp")),
            "address": address,
            "legal_address": _optional_text(data.get("legal_address")) or address,
        }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Party":
        return cls(**cls._fields_from_mapping(data or {}))


@dataclass(frozen=True)
class Issuer(Party):
    director: Optional[str] = None
    chief_accountant: Optional[str] = None
    payer_vat: bool = True

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Issuer":
        data = data or {}
        return cls(
            **cls._fields_from_mapping(data),
            director=_optional_text(data.get("director")),
            chief_accountant=_optional_text(data.get("chief_accountant")),
            payer_vat=_parse_flag(data.get("payer_vat"), "payer_vat", default=True),
        )


@dataclass(frozen=True)
class DocumentContext:
    """Whole-document facts for one render; immutable while rendering."""

    invoice_number: str
    invoice_date: date
    issuer: Issuer = field(default_factory=Issuer)
    customer: Party = field(default_factory=Party)
    positions: Tuple[LineItem, ...] = ()
    order_number: Optional[str] = None
    order_date: Optional[date] = None
    currency_code: str = DEFAULT_CURRENCY_CODE
    currency_description: str = DEFAULT_CURRENCY_DESCRIPTION

    def __post_init__(self) -> None:
        # lists passed by callers are frozen so the context cannot change mid-render
        if not isinstance(self.positions, tuple):
            object.__setattr__(self, "positions", tuple(self.positions))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DocumentContext":
        """Build a context from the JSON shape produced by data assembly."""

        if not isinstance(data, Mapping):
            raise ContextError("Document context must be a mapping")
        number = data.get("invoice_number")
        if not number:
            raise ContextError("invoice_number is required")
        invoice_date = _parse_date(data.get("invoice_date"), "invoice_date")
        if invoice_date is None:
            raise ContextError("invoice_date is required")

        positions = data.get("positions") or []
        if not isinstance(positions, Iterable) or isinstance(positions, (str, bytes)):
            raise ContextError("positions must be a list")

        return cls(
            invoice_number=str(number),
            invoice_date=invoice_date,
            issuer=Issuer.from_mapping(data.get("issuer")),
            customer=Party.from_mapping(data.get("customer")),
            positions=tuple(LineItem.from_mapping(p) for p in positions),
            order_number=_optional_text(data.get("order_number")),
            order_date=_parse_date(data.get("order_date"), "order_date"),
            currency_code=str(data.get("currency_code") or DEFAULT_CURRENCY_CODE),
            currency_description=str(
                data.get("currency_description") or DEFAULT_CURRENCY_DESCRIPTION
            ),
        )


_TRUE_WORDS = {"true", "1", "yes", "да"}
_FALSE_WORDS = {"false", "0", "no", "нет"}


def _parse_amount(value: Any, field_name: str, item_name: str) -> float:
    """Parse a position amount; a missing value is zero, unreadable text is an error."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    number = parse_number(value, default=None)
    if number is None:
        raise ContextError(f"{field_name} of {item_name!r} is not a number: {value!r}")
    return number


def _parse_flag(value: Any, field_name: str, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ContextError(f"{field_name} is not a boolean: {value!r}")


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ContextError(f"{field_name} is not an ISO date: {value!r}")
