"""Pytest configuration and fixtures"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from pos_terminal.adapters.outbound.in_memory_catalog import InMemoryCatalog
from pos_terminal.adapters.outbound.in_memory_transactions import (
    InMemoryTransactionLedger,
)
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.product import Category, Product, ProductId
from pos_terminal.core.domain.model.session import CashierUser, Role, SessionContext
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.domain.service.catalog_browser import CatalogBrowser, CatalogDeps
from pos_terminal.core.domain.service.checkout_coordinator import (
    CheckoutCoordinator,
    CheckoutDeps,
)
from pos_terminal.core.ports.outbound.events import PosEvent


def make_product(
    pid: int,
    name: str,
    price: str,
    barcode: str = "",
    stock: int = 100,
    category: Category | None = None,
) -> Product:
    return Product(
        product_id=ProductId(pid),
        name=name,
        price=Money.of(Decimal(price)),
        stock_quantity=stock,
        sku=f"SKU-{pid}",
        barcode=barcode,
        category_id=category.category_id if category else None,
        category_name=category.name if category else None,
    )


@dataclass
class BlockingGateway:
    """Holds submit() open until release is set."""

    inner: object
    release: asyncio.Event = field(default_factory=asyncio.Event)
    entered: asyncio.Event = field(default_factory=asyncio.Event)
    calls: int = 0

    async def submit(self, request):
        self.calls += 1
        self.entered.set()
        await self.release.wait()
        return await self.inner.submit(request)


@dataclass
class RecordingPublisher:
    events: list[PosEvent] = field(default_factory=list)

    def publish(self, event: PosEvent) -> None:
        self.events.append(event)

    def of_type(self, kind: type) -> list:
        return [e for e in self.events if isinstance(e, kind)]


@pytest.fixture
def groceries() -> Category:
    return Category(1, "Groceries")


@pytest.fixture
def rice(groceries) -> Product:
    return make_product(1, "Rice 1kg", "100.00", barcode="6001000000011", category=groceries)


@pytest.fixture
def beans(groceries) -> Product:
    return make_product(2, "Beans 500g", "50.00", barcode="6001000000028", category=groceries)


@pytest.fixture
def cashier() -> CashierUser:
    return CashierUser(user_id=7, username="jane", full_name="Jane Wanjiku", role=Role.CASHIER)


@pytest.fixture
def session(cashier) -> SessionContext:
    s = SessionContext()
    s.open("token-abc", cashier)
    return s


@pytest.fixture
def recorder() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def catalog(rice, beans, groceries) -> InMemoryCatalog:
    return InMemoryCatalog.of([rice, beans], [groceries])


@pytest.fixture
def ledger(catalog) -> InMemoryTransactionLedger:
    return InMemoryTransactionLedger(catalog=catalog, cashier_name="Jane Wanjiku")


@pytest.fixture
def cart(recorder) -> CartEngine:
    return CartEngine(events=recorder)


@pytest.fixture
def checkout(cart, ledger, session, recorder) -> CheckoutCoordinator:
    return CheckoutCoordinator(
        CheckoutDeps(cart=cart, transactions=ledger, session=session, events=recorder)
    )


@pytest.fixture
def browser(catalog, cart) -> CatalogBrowser:
    return CatalogBrowser(CatalogDeps(catalog=catalog, cart=cart))


@pytest.fixture
def filled_cart(cart, rice, beans) -> CartEngine:
    """100.00 x 2 + 50.00 x 1: subtotal 250.00, tax 40.00, total 290.00"""
    cart.add_item(rice)
    cart.add_item(rice)
    cart.add_item(beans)
    return cart
