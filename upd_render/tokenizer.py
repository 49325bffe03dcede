"""Scanning of template cell text for embedded ``${...}`` expressions."""

from __future__ import annotations

import re
from typing import Any, List

EXPRESSION_RE = re.compile(r"\$\{[\s\S]*?\}")
EXPRESSION_START = "${"


def find_expressions(value: Any) -> List[str]:
    """Return the expressions found in *value*, in order of appearance.

    Only strings are scanned; numbers, dates, booleans and empty cells yield an
    empty list so they pass through rendering unchanged.
    """
    if not isinstance(value, str) or EXPRESSION_START not in value:
        return []
    return EXPRESSION_RE.findall(value)


def has_expression(value: Any) -> bool:
    return isinstance(value, str) and EXPRESSION_START in value
