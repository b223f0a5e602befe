from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

DEFAULT_CURRENCY = "KES"
CENTS = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | str | float, currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money(round2(Decimal(str(amount))), currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money(Decimal("0.00"), currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(round2(self.amount * Decimal(n)), self.currency)

    def __lt__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __ge__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def scaled(self, rate: Decimal) -> "Money":
        """Multiply by a fractional rate, rounding half-up to cents."""
        return Money(round2(self.amount * rate), self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def format(self) -> str:
        return f"{self.currency} {round2(self.amount):.2f}"

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


def fold_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total


def parse_amount(raw: str | None) -> Decimal:
    """
    Lenient parse of cashier-entered text.
    Anything that is not a finite decimal counts as zero.
    """
    if raw is None:
        return Decimal("0")
    text = raw.strip().replace(",", "")
    if not text:
        return Decimal("0")
    try:
        value = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value
