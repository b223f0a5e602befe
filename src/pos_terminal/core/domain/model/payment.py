from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence

from pos_terminal.core.domain.model.cart import CartLine
from pos_terminal.core.domain.model.money import Money, round2


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT = "awaiting_payment"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class PaymentSelection:
    method: PaymentMethod = PaymentMethod.CASH
    amount_tendered: str = ""  # raw cashier input, cash only


@dataclass(frozen=True)
class TransactionLine:
    product_id: int
    quantity: int
    unit_price: Money
    discount: Money

    @staticmethod
    def from_cart_line(line: CartLine) -> "TransactionLine":
        return TransactionLine(
            product_id=line.product_id.value,
            quantity=line.quantity,
            unit_price=line.product.price,
            discount=line.discount,
        )


@dataclass(frozen=True)
class TransactionRequest:
    items: tuple[TransactionLine, ...]
    subtotal: Money
    tax_amount: Money
    discount_amount: Money
    total_amount: Money
    payment_method: PaymentMethod
    amount_tendered: Money

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [
                {
                    "product_id": it.product_id,
                    "quantity": it.quantity,
                    "unit_price": _num(it.unit_price),
                    "discount": _num(it.discount),
                }
                for it in self.items
            ],
            "subtotal": _num(self.subtotal),
            "tax_amount": _num(self.tax_amount),
            "discount_amount": _num(self.discount_amount),
            "total_amount": _num(self.total_amount),
            "payment_method": self.payment_method.value,
            "amount_tendered": _num(self.amount_tendered),
        }


@dataclass(frozen=True)
class CommittedTransaction:
    transaction_id: int | None
    transaction_code: str | None
    total_amount: Money
    change: Money
    created_at: datetime | None = None


@dataclass(frozen=True)
class Settlement:
    transaction: CommittedTransaction
    payment_method: PaymentMethod
    amount_tendered: Money
    change: Money
    settled_at: datetime
    cashier_name: str = ""


@dataclass(frozen=True)
class TransactionItemView:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    subtotal: Money
    discount: Money


@dataclass(frozen=True)
class TransactionSummary:
    transaction_id: int
    transaction_code: str
    subtotal: Money
    tax_amount: Money
    discount_amount: Money
    total_amount: Money
    status: str
    created_at: str
    cashier_name: str | None = None
    customer_name: str | None = None
    items: Sequence[TransactionItemView] = ()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _num(m: Money) -> float:
    return float(round2(m.amount))


def compute_change(tendered: Money, total: Money) -> Money:
    if tendered < total:
        return Money.zero(total.currency)
    return tendered - total
