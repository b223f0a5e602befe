from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import (
    CheckoutState,
    PaymentMethod,
    PaymentSelection,
    Settlement,
)


@dataclass(frozen=True)
class CheckoutView:
    state: CheckoutState
    selection: PaymentSelection | None
    total: Money
    change_preview: Money | None
    in_flight: bool


class CheckoutUseCase(Protocol):
    @property
    def state(self) -> CheckoutState: ...

    def begin_checkout(self) -> Result[PaymentSelection, PosError]: ...

    def select_method(self, method: PaymentMethod) -> Result[PaymentSelection, PosError]: ...

    def enter_tender(self, amount_tendered: str) -> Result[PaymentSelection, PosError]: ...

    def cancel(self) -> Result[None, PosError]: ...

    def change_preview(self) -> Money | None: ...

    def ensure_cart_editable(self) -> Result[None, PosError]: ...

    async def confirm(self) -> Result[Settlement, PosError]: ...

    def view(self) -> CheckoutView: ...
