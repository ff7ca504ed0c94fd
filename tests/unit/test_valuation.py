"""Unit tests for gold valuation"""

from decimal import Decimal

import pytest

from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.valuation import (
    compute_valuation,
    ensure_financing_consistent,
    quantize_money,
    to_decimal,
)


def test_valuation_pure_gold():
    """100g of 24K at RM 8889.25/oz financed at 65%"""
    valuation = compute_valuation(Decimal("100"), 24, Decimal("8889.25"), Decimal("0.65"))

    assert valuation.gold_value == Decimal("28578.93875")
    assert valuation.financing_amount == Decimal("18576.3101875")
    assert quantize_money(valuation.gold_value) == Decimal("28578.94")
    assert quantize_money(valuation.financing_amount) == Decimal("18576.31")


def test_valuation_scales_with_purity():
    """22K gold is worth 22/24 of pure gold"""
    pure = compute_valuation(50, 24, 8000, "0.70")
    alloy = compute_valuation(50, 22, 8000, "0.70")

    assert quantize_money(alloy.gold_value) == quantize_money(pure.gold_value * 22 / 24)
    assert alloy.financing_amount == alloy.gold_value * Decimal("0.70")


@pytest.mark.parametrize("purity", [24, 22, 18, 14])
def test_valuation_identities(purity):
    valuation = compute_valuation("12.5", purity, "9000", "0.8")

    expected_value = Decimal("12.5") * Decimal("0.03215") * Decimal("9000") * (Decimal(purity) / Decimal(24))
    assert valuation.gold_value == expected_value
    assert valuation.financing_amount == expected_value * Decimal("0.8")
    assert valuation.financing_amount >= 0


@pytest.mark.parametrize("purity", [0, 10, 21, 25, True])
def test_valuation_rejects_unknown_purity(purity):
    with pytest.raises(ValidationError) as exc_info:
        compute_valuation(10, purity, 8000, "0.7")
    assert exc_info.value.fields == ["purity"]


@pytest.mark.parametrize(
    "weight,price,ratio,field",
    [
        (0, 8000, "0.7", "weight"),
        (-5, 8000, "0.7", "weight"),
        (10, 0, "0.7", "price_per_ounce"),
        (10, 8000, "0", "financing_ratio"),
        (10, 8000, "1.2", "financing_ratio"),
        ("NaN", 8000, "0.7", "weight"),
        (10, "Infinity", "0.7", "price_per_ounce"),
        ("heavy", 8000, "0.7", "weight"),
    ],
)
def test_valuation_rejects_bad_inputs(weight, price, ratio, field):
    with pytest.raises(ValidationError) as exc_info:
        compute_valuation(weight, 24, price, ratio)
    assert exc_info.value.fields == [field]


def test_ratio_outside_policy_set_is_accepted_by_calculator():
    """Only the API restricts ratios to the configured policy set"""
    valuation = compute_valuation(10, 24, 8000, "0.5")
    assert valuation.financing_amount == valuation.gold_value * Decimal("0.5")


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("10.005")) == Decimal("10.01")
    assert quantize_money(Decimal("10.004")) == Decimal("10.00")


def test_to_decimal_accepts_floats_via_str():
    assert to_decimal(0.7, "financing_ratio") == Decimal("0.7")


def test_financing_consistency_within_one_sen():
    ensure_financing_consistent(Decimal("5000.00"), Decimal("0.70"), Decimal("3500.01"))


def test_financing_consistency_rejects_drift():
    with pytest.raises(ValidationError) as exc_info:
        ensure_financing_consistent(Decimal("5000.00"), Decimal("0.70"), Decimal("3600.00"))
    assert exc_info.value.fields == ["financing_amount"]


def test_financing_consistency_rejects_non_positive_amounts():
    with pytest.raises(ValidationError):
        ensure_financing_consistent(Decimal("0"), Decimal("0.70"), Decimal("0"))
    with pytest.raises(ValidationError):
        ensure_financing_consistent(Decimal("100"), Decimal("0.70"), Decimal("-70"))
