"""Money and VAT helpers for UPD line items.

All stored unit prices are gross (VAT included).  The functions below take the
gross amount, the quantity and the VAT fraction and return values already
rounded to kopecks, so they can be written straight into numeric cells.
"""

from __future__ import annotations

import math
import sys
from typing import Union

from .context import VatRate

Number = Union[int, float]

NO_VAT_LABEL = "Без НДС"

_EPSILON = sys.float_info.epsilon


def rate_fraction(rate: Union[VatRate, float, None]) -> float:
    """Return the VAT fraction for *rate*; unknown values count as no VAT."""
    if isinstance(rate, VatRate):
        return rate.fraction
    if rate is None:
        return 0.0
    return VatRate.parse(rate).fraction


def round_money(value: Number) -> float:
    """Round to 2 decimals, half away from zero.

    Epsilon is added before scaling so that values such as ``1.005`` do not end
    up one kopeck short because of their binary representation.
    """
    value = float(value)
    sign = -1.0 if value < 0 else 1.0
    scaled = (abs(value) + _EPSILON) * 100
    return sign * math.floor(scaled + 0.5) / 100


def _vat_part(gross: Number, r: float) -> float:
    if r <= 0:
        return 0.0
    return float(gross) * r / (1 + r)


def net_amount(gross: Number, r: float) -> float:
    """Amount without VAT contained in *gross*."""
    if r <= 0:
        return round_money(gross)
    return round_money(float(gross) / (1 + r))


def vat_amount(gross: Number, r: float) -> float:
    """VAT contained in *gross*."""
    return round_money(_vat_part(gross, r))


def unit_net_price(price_gross: Number, r: float) -> float:
    """Unit price without VAT."""
    return net_amount(price_gross, r)


def gross_total(price_gross: Number, quantity: Number) -> float:
    """Position cost including VAT."""
    return round_money(float(price_gross) * float(quantity))


def vat_total(price_gross: Number, quantity: Number, r: float) -> float:
    """VAT sum of a position."""
    return round_money(_vat_part(float(price_gross) * float(quantity), r))


def net_total(price_gross: Number, quantity: Number, r: float) -> float:
    """Position cost without VAT (gross total minus its VAT part)."""
    gross = float(price_gross) * float(quantity)
    return round_money(gross - _vat_part(gross, r))


def vat_label(rate: Union[VatRate, float, None], payer_vat: bool) -> str:
    """Text for the VAT rate column."""
    r = rate_fraction(rate)
    if not payer_vat or r <= 0:
        return NO_VAT_LABEL
    return f"{round(r * 100)}%"
