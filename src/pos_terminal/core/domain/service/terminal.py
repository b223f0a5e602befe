from __future__ import annotations

from dataclasses import dataclass

import structlog
from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import PosError, SubmissionInFlight
from pos_terminal.core.domain.model.payment import CheckoutState, Settlement
from pos_terminal.core.domain.model.product import Product, ProductId
from pos_terminal.core.domain.model.session import CashierUser, SessionContext
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.domain.service.catalog_browser import CatalogBrowser
from pos_terminal.core.domain.service.checkout_coordinator import CheckoutCoordinator
from pos_terminal.core.domain.service.transaction_history import (
    TransactionHistoryService,
)
from pos_terminal.core.ports.outbound.auth import AuthGateway, Credentials

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PosTerminal:
    """One cashier session: cart, checkout, product list and history."""

    session: SessionContext
    auth: AuthGateway
    cart: CartEngine
    checkout: CheckoutCoordinator
    catalog: CatalogBrowser
    history: TransactionHistoryService

    async def login(self, credentials: Credentials) -> Result[CashierUser, PosError]:
        result = await self.auth.login(credentials)
        if isinstance(result, Failure):
            logger.info("login_failed", username=credentials.username)
            return result

        issued = result.unwrap()
        self.session.open(issued.token, issued.user)
        logger.info("login_succeeded", username=issued.user.username)

        loaded = await self.catalog.load_all()
        if isinstance(loaded, Failure):
            logger.warning("product_load_failed", error=str(loaded.failure()))
        return Success(issued.user)

    async def refresh_user(self) -> Result[CashierUser, PosError]:
        result = await self.auth.current_user()
        if isinstance(result, Success) and self.session.token is not None:
            self.session.open(self.session.token, result.unwrap())
        return result

    def logout(self) -> Result[None, PosError]:
        if self.checkout.state is CheckoutState.SUBMITTING:
            return Failure(SubmissionInFlight("cannot sign out while payment is being submitted"))
        self.checkout.cancel()
        self.cart.clear()
        name = self.session.display_name
        self.session.close()
        logger.info("logout", cashier=name)
        return Success(None)

    # ---- cart edits, refused while a payment is being submitted -----------

    def add_to_cart(self, product_id: ProductId) -> Result[Product, PosError]:
        return self.checkout.ensure_cart_editable().bind(
            lambda _: self.catalog.add_to_cart(product_id)
        )

    async def scan(self, barcode: str) -> Result[Product, PosError]:
        guard = self.checkout.ensure_cart_editable()
        if isinstance(guard, Failure):
            return guard
        found = await self.catalog.lookup(barcode)
        # confirm may have started while the lookup was awaited
        return found.bind(
            lambda product: self.checkout.ensure_cart_editable().map(
                lambda _: self.catalog.add_product(product)
            )
        )

    def set_quantity(self, product_id: ProductId, quantity: int) -> Result[None, PosError]:
        return self.checkout.ensure_cart_editable().map(
            lambda _: self.cart.set_quantity(product_id, quantity)
        )

    def remove_item(self, product_id: ProductId) -> Result[None, PosError]:
        return self.checkout.ensure_cart_editable().map(
            lambda _: self.cart.remove_item(product_id)
        )

    def clear_cart(self) -> Result[None, PosError]:
        return self.checkout.ensure_cart_editable().map(lambda _: self.cart.clear())

    async def confirm_payment(self) -> Result[Settlement, PosError]:
        result = await self.checkout.confirm()
        if isinstance(result, Success):
            # stock levels moved; refresh what the cashier sees
            reloaded = await self.catalog.load_all()
            if isinstance(reloaded, Failure):
                logger.warning("product_reload_failed", error=str(reloaded.failure()))
        return result
