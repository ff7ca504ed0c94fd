"""Gold collateral valuation - pure arithmetic, no I/O"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.models import VALID_PURITIES, Valuation

Number = Union[Decimal, int, float, str]

# Grams to troy ounces
GRAMS_TO_TROY_OUNCES = Decimal("0.03215")
SEN = Decimal("0.01")


def to_decimal(value: Number, field_name: str) -> Decimal:
    """Convert to Decimal, rejecting NaN and infinities"""
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"{field_name} must be a number", [field_name]) from e
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite", [field_name])
    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round to the sen using half-up rounding"""
    return amount.quantize(SEN, rounding=ROUND_HALF_UP)


def validate_purity(purity_karat: int) -> int:
    if isinstance(purity_karat, bool) or purity_karat not in VALID_PURITIES:
        raise ValidationError(
            f"purity must be one of {', '.join(str(p) for p in VALID_PURITIES)} karat",
            ["purity"],
        )
    return int(purity_karat)


def validate_financing_ratio(financing_ratio: Number) -> Decimal:
    ratio = to_decimal(financing_ratio, "financing_ratio")
    if ratio <= 0 or ratio > 1:
        raise ValidationError("financing_ratio must be in (0, 1]", ["financing_ratio"])
    return ratio


def compute_valuation(
    weight_grams: Number,
    purity_karat: int,
    price_per_ounce: Number,
    financing_ratio: Number,
) -> Valuation:
    """
    Value pledged gold and the financing it supports.

    Formula:
    - purity_ratio = karat / 24
    - ounces = grams * 0.03215
    - gold_value = ounces * price_per_ounce * purity_ratio
    - financing_amount = gold_value * financing_ratio

    Values are returned unrounded; use quantize_money for display or storage.
    The business-policy ratio set is enforced by callers, any ratio in (0, 1]
    is accepted here.

    Raises:
        ValidationError: On non-positive weight or price, unknown purity,
            ratio outside (0, 1], or non-finite input
    """
    weight = to_decimal(weight_grams, "weight")
    if weight <= 0:
        raise ValidationError("weight must be greater than zero", ["weight"])

    price = to_decimal(price_per_ounce, "price_per_ounce")
    if price <= 0:
        raise ValidationError("price_per_ounce must be greater than zero", ["price_per_ounce"])

    purity = validate_purity(purity_karat)
    ratio = validate_financing_ratio(financing_ratio)

    purity_ratio = Decimal(purity) / Decimal(24)
    weight_ounces = weight * GRAMS_TO_TROY_OUNCES
    gold_value = weight_ounces * price * purity_ratio

    return Valuation(gold_value=gold_value, financing_amount=gold_value * ratio)


def ensure_financing_consistent(
    total_gold_value: Decimal,
    financing_ratio: Decimal,
    financing_amount: Decimal,
) -> None:
    """
    Check financing_amount == total_gold_value * financing_ratio within one sen.

    Raises:
        ValidationError: When either amount is non-positive or they drift apart
    """
    if total_gold_value <= 0:
        raise ValidationError("total_gold_value must be greater than zero", ["total_gold_value"])
    if financing_amount <= 0:
        raise ValidationError("financing_amount must be greater than zero", ["financing_amount"])
    expected = total_gold_value * financing_ratio
    if abs(financing_amount - expected) > SEN:
        raise ValidationError(
            f"financing_amount {financing_amount} does not match "
            f"total_gold_value x financing_ratio = {quantize_money(expected)}",
            ["financing_amount"],
        )
