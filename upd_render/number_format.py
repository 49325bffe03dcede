"""Utilities for converting and formatting numeric values consistently.

Context mappings arrive from the data-assembly side as JSON, where amounts may
be numbers or strings written the Russian way (``"1 200,50"``).  The template
renderer, on the other hand, needs a stable textual form when a number is
substituted into surrounding cell text.  Both directions live here so the
context model and the renderer do not keep local copies of the helpers.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

NumberLike = Union[int, float, str, Decimal, None]


def parse_number(value: NumberLike, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert *value* to ``float`` in a tolerant manner.

    ``None``, empty strings and unparsable text yield *default*; pass
    ``default=None`` to tell unreadable input apart from zero.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if not isinstance(value, str):
        return default
    text = value.strip()
    if not text:
        return default
    # allow grouping spaces (including NBSP) before converting
    text = text.replace(" ", "").replace(" ", "")
    try:
        return float(text.replace(",", "."))
    except ValueError:
        return default


def number_to_text(value: Union[int, float]) -> str:
    """Return *value* as cell text, dropping a trailing ``.0`` on integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_number(value: object) -> bool:
    """Return ``True`` for ints and floats but not for booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)
