"""Text formatting used when substituting context values into the template."""

from __future__ import annotations

from datetime import date
from typing import Optional

# Родительный падеж: "05 марта 2024 г."
MONTHS_GENITIVE = (
    "января",
    "февраля",
    "марта",
    "апреля",
    "мая",
    "июня",
    "июля",
    "августа",
    "сентября",
    "октября",
    "ноября",
    "декабря",
)


def format_date_long_ru(value: Optional[date]) -> str:
    """Return *value* as a long Russian date, e.g. ``05 марта 2024 г.``."""
    if value is None:
        return ""
    return f"{value.day:02d} {MONTHS_GENITIVE[value.month - 1]} {value.year} г."


def join_tax_ids(inn: Optional[str], kpp: Optional[str]) -> str:
    """Combine INN and KPP the way the UPD prints them.

    Both present gives ``"INN / KPP"``, a single one is printed alone and
    neither gives an empty string.
    """
    i = inn or ""
    k = kpp or ""
    if i and k:
        return f"{i} / {k}"
    return i or k
