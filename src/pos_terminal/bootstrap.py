from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable

import structlog
from fastapi import FastAPI

from pos_terminal.adapters.inbound.web.fastapi_app import create_app
from pos_terminal.adapters.outbound.http.auth import HttpAuthGateway
from pos_terminal.adapters.outbound.http.catalog import HttpCatalogGateway
from pos_terminal.adapters.outbound.http.client import BackendClient
from pos_terminal.adapters.outbound.http.transactions import HttpTransactionGateway
from pos_terminal.adapters.outbound.in_memory_auth import InMemoryAuth
from pos_terminal.adapters.outbound.in_memory_catalog import InMemoryCatalog
from pos_terminal.adapters.outbound.in_memory_transactions import (
    InMemoryTransactionLedger,
)
from pos_terminal.adapters.outbound.log_events import LogEventPublisher
from pos_terminal.adapters.outbound.subscribers import FanoutEventPublisher
from pos_terminal.config import Settings, load_settings
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.product import Category, Product, ProductId
from pos_terminal.core.domain.model.session import CashierUser, Role, SessionContext
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.domain.service.catalog_browser import (
    CatalogBrowser,
    CatalogDeps,
)
from pos_terminal.core.domain.service.checkout_coordinator import (
    CheckoutCoordinator,
    CheckoutDeps,
)
from pos_terminal.core.domain.service.terminal import PosTerminal
from pos_terminal.core.domain.service.transaction_history import (
    HistoryDeps,
    TransactionHistoryService,
)
from pos_terminal.core.ports.outbound.auth import AuthGateway
from pos_terminal.core.ports.outbound.catalog import CatalogGateway
from pos_terminal.core.ports.outbound.transactions import TransactionGateway
from pos_terminal.log_config import configure_logging

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Runtime:
    terminal: PosTerminal
    events: FanoutEventPublisher
    shutdown: Callable[[], Awaitable[None]]


def assemble_terminal(
    settings: Settings,
    session: SessionContext,
    auth: AuthGateway,
    catalog: CatalogGateway,
    transactions: TransactionGateway,
    events: FanoutEventPublisher,
) -> PosTerminal:
    cart = CartEngine(tax_rate=settings.tax_rate, currency=settings.currency, events=events)
    checkout = CheckoutCoordinator(
        CheckoutDeps(cart=cart, transactions=transactions, session=session, events=events)
    )
    browser = CatalogBrowser(CatalogDeps(catalog=catalog, cart=cart))
    history = TransactionHistoryService(HistoryDeps(transactions=transactions))
    return PosTerminal(
        session=session,
        auth=auth,
        cart=cart,
        checkout=checkout,
        catalog=browser,
        history=history,
    )


def build_http_runtime(settings: Settings) -> Runtime:
    session = SessionContext()
    session.on_expired(lambda s: logger.warning("session_marked_expired", cashier=s.display_name))
    events = FanoutEventPublisher(publishers=[LogEventPublisher()])
    client = BackendClient(settings.api_url, session, timeout=settings.http_timeout)

    terminal = assemble_terminal(
        settings,
        session=session,
        auth=HttpAuthGateway(client),
        catalog=HttpCatalogGateway(client, currency=settings.currency),
        transactions=HttpTransactionGateway(client, currency=settings.currency),
        events=events,
    )
    return Runtime(terminal=terminal, events=events, shutdown=client.aclose)


def build_memory_runtime(settings: Settings) -> Runtime:
    session = SessionContext()
    events = FanoutEventPublisher(publishers=[LogEventPublisher()])
    catalog = _demo_catalog(settings.currency)
    auth = InMemoryAuth(session=session)
    auth.register(
        CashierUser(user_id=1, username="cashier", full_name="Demo Cashier", role=Role.CASHIER),
        password="cashier",
    )
    transactions = InMemoryTransactionLedger(catalog=catalog, cashier_name="Demo Cashier")

    terminal = assemble_terminal(
        settings,
        session=session,
        auth=auth,
        catalog=catalog,
        transactions=transactions,
        events=events,
    )
    return Runtime(terminal=terminal, events=events, shutdown=_noop)


def build_runtime(settings: Settings) -> Runtime:
    if settings.backend == "memory":
        return build_memory_runtime(settings)
    return build_http_runtime(settings)


def build_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)
    runtime = build_runtime(settings)
    logger.info(
        "terminal_started",
        backend=settings.backend,
        api_url=settings.api_url if settings.backend == "http" else None,
        tax_rate=str(settings.tax_rate),
        currency=settings.currency,
    )
    return create_app(runtime.terminal, on_shutdown=runtime.shutdown)


def create_asgi_app() -> FastAPI:
    return build_app()


async def _noop() -> None:
    return None


def _demo_catalog(currency: str) -> InMemoryCatalog:
    def product(pid: int, name: str, price: str, barcode: str, category: Category, stock: int) -> Product:
        return Product(
            product_id=ProductId(pid),
            name=name,
            price=Money.of(Decimal(price), currency),
            stock_quantity=stock,
            sku=f"SKU-{pid:04d}",
            barcode=barcode,
            category_id=category.category_id,
            category_name=category.name,
            reorder_level=5,
        )

    dairy = Category(1, "Dairy")
    bakery = Category(2, "Bakery")
    household = Category(3, "Household")
    return InMemoryCatalog.of(
        [
            product(1, "Fresh Milk 500ml", "65.00", "6001000000011", dairy, 40),
            product(2, "White Bread 600g", "70.00", "6001000000028", bakery, 25),
            product(3, "Cooking Oil 1L", "320.00", "6001000000035", household, 12),
            product(4, "Sugar 2kg", "250.00", "6001000000042", household, 30),
            product(5, "Yoghurt 250ml", "55.00", "6001000000059", dairy, 4),
        ],
        [dairy, bakery, household],
    )
