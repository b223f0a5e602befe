"""Tests for money arithmetic and tender parsing"""
from decimal import Decimal

import pytest

from pos_terminal.core.domain.model.money import Money, fold_money, parse_amount, round2
from pos_terminal.core.domain.model.payment import compute_change


def test_round2_is_half_up():
    assert round2(Decimal("0.005")) == Decimal("0.01")
    assert round2(Decimal("2.345")) == Decimal("2.35")
    assert round2(Decimal("2.344")) == Decimal("2.34")


def test_money_of_quantizes_to_cents():
    assert Money.of("10").amount == Decimal("10.00")
    assert Money.of(Decimal("19.999")).amount == Decimal("20.00")


def test_multiplication_by_quantity():
    assert (Money.of("33.33") * 3).amount == Decimal("99.99")


def test_scaled_rounds_tax():
    assert Money.of("250.00").scaled(Decimal("0.16")).amount == Decimal("40.00")
    assert Money.of("0.03").scaled(Decimal("0.16")).amount == Decimal("0.00")
    assert Money.of("0.04").scaled(Decimal("0.16")).amount == Decimal("0.01")


def test_currency_mismatch_is_rejected():
    with pytest.raises(ValueError):
        Money.of("1", "KES") + Money.of("1", "USD")


def test_fold_money_of_nothing_is_zero():
    assert fold_money([]) == Money.zero()


def test_format_uses_two_decimals():
    assert Money.of("10").format() == "KES 10.00"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("300", Decimal("300")),
        (" 300.50 ", Decimal("300.50")),
        ("1,000", Decimal("1000")),
        ("", Decimal("0")),
        ("   ", Decimal("0")),
        (None, Decimal("0")),
        ("abc", Decimal("0")),
        ("12abc", Decimal("0")),
        ("NaN", Decimal("0")),
        ("Infinity", Decimal("0")),
    ],
)
def test_parse_amount_is_lenient(raw, expected):
    assert parse_amount(raw) == expected


def test_compute_change():
    total = Money.of("290.00")
    assert compute_change(Money.of("300.00"), total) == Money.of("10.00")
    assert compute_change(Money.of("290.00"), total).is_zero()
    assert compute_change(Money.of("200.00"), total).is_zero()
