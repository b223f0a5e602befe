from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import CheckoutState, PaymentMethod


@dataclass(frozen=True)
class CartChanged:
    line_count: int
    item_count: int
    total: Money


@dataclass(frozen=True)
class CheckoutStateChanged:
    previous: CheckoutState
    current: CheckoutState


@dataclass(frozen=True)
class TransactionSettled:
    transaction_code: str | None
    payment_method: PaymentMethod
    total: Money
    change: Money


@dataclass(frozen=True)
class CheckoutRejected:
    reason: str
    message: str


PosEvent = Union[CartChanged, CheckoutStateChanged, TransactionSettled, CheckoutRejected]


class EventPublisher(Protocol):
    def publish(self, event: PosEvent) -> None: ...


class NullEventPublisher:
    def publish(self, event: PosEvent) -> None:
        return None
