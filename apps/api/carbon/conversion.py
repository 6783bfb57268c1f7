"""
Conversion of a consumption record into emissions and credits.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from config import settings
from errors import InvalidInputError

from .factors import resolve_factor
from .models import ConversionResult


Number = Union[int, float, Decimal]

# Largest value a 64-bit signed INTEGER column holds.
MAX_CREDIT_VALUE = 2**63 - 1


def _to_decimal(value: Number) -> Decimal:
    # str() keeps 0.4 as 0.4 instead of its binary expansion.
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """Round half away from zero to `places` decimals (2.5 -> 3, 3.5 -> 4)."""
    exponent = Decimal(1).scaleb(-places)
    return _to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def validate_quantity(quantity) -> float:
    """Return `quantity` as a float, raising InvalidInputError unless finite, > 0 and <= MAX_QUANTITY."""
    if isinstance(quantity, bool):
        raise InvalidInputError("quantity must be a number")
    try:
        value = float(quantity)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("quantity must be a number") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError("quantity must be greater than 0")
    if value > float(settings.MAX_QUANTITY):
        raise InvalidInputError(f"quantity must not exceed {settings.MAX_QUANTITY:g}")
    return value


def convert(category: str, quantity: Number, credits_per_kg: Optional[int] = None) -> ConversionResult:
    """
    Convert `quantity` units of `category` into emissions and credits.

    carbon_emissions = quantity * factor
    credits_earned   = round_half_up(carbon_emissions * credits_per_kg)

    Args:
        category: Emission factor table key; unknown keys use the default factor
        quantity: Units consumed or recycled, must be > 0
        credits_per_kg: Override for CREDITS_PER_KG_CO2

    Returns:
        ConversionResult
    """
    value = validate_quantity(quantity)
    factor, used_fallback = resolve_factor(category)
    rate = int(settings.CREDITS_PER_KG_CO2 if credits_per_kg is None else credits_per_kg)

    emissions = _to_decimal(value) * _to_decimal(factor)
    raw_credits = emissions * rate
    # Checked before quantize(), which fails past the decimal context's precision.
    if raw_credits >= MAX_CREDIT_VALUE:
        raise InvalidInputError("quantity earns more credits than a balance can hold")
    credits = round_half_up(raw_credits)

    return ConversionResult(
        carbon_emissions=float(emissions),
        credits_earned=max(int(credits), 0),
        emission_factor=factor,
        used_fallback_factor=used_fallback,
    )
