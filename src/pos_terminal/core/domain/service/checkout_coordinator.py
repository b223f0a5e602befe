from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable

import structlog
from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import (
    CheckoutNotActive,
    EmptyCart,
    InsufficientTender,
    NotAuthenticated,
    PosError,
    SessionExpired,
    SubmissionInFlight,
)
from pos_terminal.core.domain.model.money import Money, parse_amount
from pos_terminal.core.domain.model.payment import (
    CheckoutState,
    CommittedTransaction,
    PaymentMethod,
    PaymentSelection,
    Settlement,
    TransactionLine,
    TransactionRequest,
    now_utc,
)
from pos_terminal.core.domain.model.session import SessionContext
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.ports.inbound.checkout import CheckoutUseCase, CheckoutView
from pos_terminal.core.ports.outbound.events import (
    CheckoutRejected,
    CheckoutStateChanged,
    EventPublisher,
    NullEventPublisher,
    TransactionSettled,
)
from pos_terminal.core.ports.outbound.transactions import TransactionGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutDeps:
    cart: CartEngine
    transactions: TransactionGateway
    session: SessionContext
    events: EventPublisher = field(default_factory=NullEventPublisher)


@dataclass
class CheckoutCoordinator(CheckoutUseCase):
    """
    Payment sub-flow on top of a CartEngine.

    idle -> awaiting_payment -> submitting -> idle (settled)
                                           -> awaiting_payment (failed)

    Reads cart totals but only mutates the cart once, clearing it after the
    backend accepted the transaction.
    """

    deps: CheckoutDeps
    _state: CheckoutState = CheckoutState.IDLE
    _selection: PaymentSelection | None = None
    _in_flight: bool = False

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def selection(self) -> PaymentSelection | None:
        return self._selection

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # ---- payment modal -----------------------------------------------------

    def begin_checkout(self) -> Result[PaymentSelection, PosError]:
        if self._state is CheckoutState.SUBMITTING:
            return Failure(SubmissionInFlight("payment is already being submitted"))
        if self._state is CheckoutState.AWAITING_PAYMENT and self._selection is not None:
            return Success(self._selection)
        if self.deps.cart.is_empty:
            return self._reject(EmptyCart("Cart is empty"))

        self._selection = PaymentSelection()
        self._transition(CheckoutState.AWAITING_PAYMENT)
        logger.info("checkout_started", total=self.deps.cart.total().format())
        return Success(self._selection)

    def select_method(self, method: PaymentMethod) -> Result[PaymentSelection, PosError]:
        return self._update_selection(lambda s: replace(s, method=PaymentMethod(method)))

    def enter_tender(self, amount_tendered: str) -> Result[PaymentSelection, PosError]:
        return self._update_selection(lambda s: replace(s, amount_tendered=amount_tendered))

    def cancel(self) -> Result[None, PosError]:
        if self._state is CheckoutState.SUBMITTING:
            return Failure(
                SubmissionInFlight("cannot cancel while payment is being submitted")
            )
        if self._state is CheckoutState.IDLE:
            return Success(None)
        self._selection = None
        self._transition(CheckoutState.IDLE)
        logger.info("checkout_cancelled")
        return Success(None)

    def change_preview(self) -> Money | None:
        sel = self._selection
        if self._state is CheckoutState.IDLE or sel is None:
            return None
        if sel.method is not PaymentMethod.CASH or not sel.amount_tendered.strip():
            return None
        total = self.deps.cart.total()
        return Money(parse_amount(sel.amount_tendered) - total.amount, total.currency)

    def ensure_cart_editable(self) -> Result[None, PosError]:
        """The cart is frozen from the moment a payment is submitted until it resolves."""
        if self._in_flight or self._state is CheckoutState.SUBMITTING:
            return Failure(
                SubmissionInFlight("cart cannot change while payment is being submitted")
            )
        return Success(None)

    # ---- commit ------------------------------------------------------------

    async def confirm(self) -> Result[Settlement, PosError]:
        if self._in_flight or self._state is CheckoutState.SUBMITTING:
            return Failure(SubmissionInFlight("payment is already being submitted"))
        sel = self._selection
        if self._state is not CheckoutState.AWAITING_PAYMENT or sel is None:
            return Failure(CheckoutNotActive("checkout has not been started"))

        session = self.deps.session
        if session.expired:
            return Failure(SessionExpired("session expired, please sign in again"))
        if not session.is_authenticated:
            return Failure(NotAuthenticated("no cashier is signed in"))
        if self.deps.cart.is_empty:
            return self._reject(EmptyCart("Cart is empty"))

        total = self.deps.cart.total()
        if sel.method is PaymentMethod.CASH:
            tendered = parse_amount(sel.amount_tendered)
            if tendered < total.amount:
                return self._reject(
                    InsufficientTender(
                        "Amount tendered is less than total",
                        tendered=f"{tendered}",
                        total=f"{total.amount}",
                    )
                )
            amount_tendered = Money.of(tendered, total.currency)
        else:
            amount_tendered = total

        request = self._build_request(sel.method, amount_tendered)

        self._in_flight = True
        self._transition(CheckoutState.SUBMITTING)
        logger.info(
            "checkout_submitted",
            method=sel.method.value,
            lines=len(request.items),
            total=total.format(),
        )
        try:
            result = await self.deps.transactions.submit(request)
        except BaseException:
            self._in_flight = False
            self._transition(CheckoutState.AWAITING_PAYMENT)
            raise
        self._in_flight = False

        if isinstance(result, Success):
            return Success(self._settle(request, result.unwrap()))

        err = result.failure()
        self._transition(CheckoutState.AWAITING_PAYMENT)
        logger.warning(
            "checkout_submission_failed", error_type=type(err).__name__, error=str(err)
        )
        return Failure(err)

    def view(self) -> CheckoutView:
        return CheckoutView(
            state=self._state,
            selection=self._selection,
            total=self.deps.cart.total(),
            change_preview=self.change_preview(),
            in_flight=self._in_flight,
        )

    # ---- internals ---------------------------------------------------------

    def _update_selection(
        self, change: Callable[[PaymentSelection], PaymentSelection]
    ) -> Result[PaymentSelection, PosError]:
        if self._state is CheckoutState.SUBMITTING:
            return Failure(SubmissionInFlight("payment is already being submitted"))
        if self._state is not CheckoutState.AWAITING_PAYMENT or self._selection is None:
            return Failure(CheckoutNotActive("checkout has not been started"))
        self._selection = change(self._selection)
        return Success(self._selection)

    def _build_request(
        self, method: PaymentMethod, amount_tendered: Money
    ) -> TransactionRequest:
        cart = self.deps.cart
        subtotal = cart.subtotal()
        tax = cart.tax()
        return TransactionRequest(
            items=tuple(TransactionLine.from_cart_line(ln) for ln in cart.lines),
            subtotal=subtotal,
            tax_amount=tax,
            discount_amount=Money.zero(subtotal.currency),
            total_amount=subtotal + tax,
            payment_method=method,
            amount_tendered=amount_tendered,
        )

    def _settle(
        self, request: TransactionRequest, committed: CommittedTransaction
    ) -> Settlement:
        if request.payment_method is PaymentMethod.CASH:
            change = committed.change
        else:
            change = Money.zero(request.total_amount.currency)

        settlement = Settlement(
            transaction=committed,
            payment_method=request.payment_method,
            amount_tendered=request.amount_tendered,
            change=change,
            settled_at=now_utc(),
            cashier_name=self.deps.session.display_name,
        )

        # state is reset before anything is published
        previous = self._state
        self._selection = None
        self._state = CheckoutState.IDLE
        self.deps.cart.clear()

        logger.info(
            "transaction_settled",
            transaction_code=committed.transaction_code,
            method=request.payment_method.value,
            total=request.total_amount.format(),
            change=change.format(),
        )
        self.deps.events.publish(
            CheckoutStateChanged(previous=previous, current=CheckoutState.IDLE)
        )
        self.deps.events.publish(
            TransactionSettled(
                transaction_code=committed.transaction_code,
                payment_method=request.payment_method,
                total=request.total_amount,
                change=change,
            )
        )
        return settlement

    def _reject(self, err: PosError) -> Result:
        logger.info("checkout_rejected", reason=type(err).__name__, error=str(err))
        self.deps.events.publish(
            CheckoutRejected(reason=type(err).__name__, message=err.message)
        )
        return Failure(err)

    def _transition(self, new_state: CheckoutState) -> None:
        previous = self._state
        if previous is new_state:
            return
        self._state = new_state
        self.deps.events.publish(CheckoutStateChanged(previous=previous, current=new_state))
