"""Pure rendering of a single template cell value.

Nothing here knows about openpyxl: a value goes in, a value comes out.  The
rendering pipeline owns the workbook and decides where the results are written.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from .context import DocumentContext, LineItem
from .number_format import is_number, number_to_text
from .rules import RULES, UNRESOLVED, Rule, resolve
from .tokenizer import find_expressions


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if is_number(value):
        return number_to_text(value)
    return str(value)


def render_value(
    value: Any,
    context: DocumentContext,
    item: Optional[LineItem] = None,
    rules: Iterable[Rule] = RULES,
) -> Any:
    """Return *value* with every resolvable expression substituted.

    A cell holding exactly one expression that resolves to a number becomes
    that number, so the cell keeps its numeric format.  Otherwise resolved
    values are substituted into the surrounding text and unresolved
    expressions are left untouched for a later pass.
    """
    expressions = find_expressions(value)
    if not expressions:
        return value

    rules = tuple(rules)
    whole = value.strip()
    out = value
    for expression in expressions:
        resolved = resolve(expression, context, item, rules)
        if resolved is UNRESOLVED:
            continue
        if whole == expression and is_number(resolved):
            return resolved
        out = out.replace(expression, _stringify(resolved))
    return out
