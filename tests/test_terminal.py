"""Tests for the terminal session flow and transaction history"""
import asyncio

import pytest
from returns.result import Failure, Success

from conftest import BlockingGateway
from pos_terminal.adapters.outbound.in_memory_auth import InMemoryAuth
from pos_terminal.core.domain.model.errors import (
    NotAuthenticated,
    SubmissionInFlight,
    TransactionNotFound,
    ValidationError,
)
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import CheckoutState
from pos_terminal.core.domain.model.session import SessionContext
from pos_terminal.core.domain.service.checkout_coordinator import (
    CheckoutCoordinator,
    CheckoutDeps,
)
from pos_terminal.core.domain.service.terminal import PosTerminal
from pos_terminal.core.domain.service.transaction_history import (
    HistoryDeps,
    TransactionHistoryService,
)
from pos_terminal.core.ports.inbound.history import ListTransactionsQuery
from pos_terminal.core.ports.outbound.auth import Credentials


@pytest.fixture
def history(ledger):
    return TransactionHistoryService(HistoryDeps(transactions=ledger))


@pytest.fixture
def terminal(cart, checkout, browser, history, session, cashier):
    session.close()
    auth = InMemoryAuth(session=session)
    auth.register(cashier, password="secret")
    return PosTerminal(
        session=session,
        auth=auth,
        cart=cart,
        checkout=checkout,
        catalog=browser,
        history=history,
    )


@pytest.mark.asyncio
async def test_login_opens_session_and_loads_products(terminal):
    result = await terminal.login(Credentials("jane", "secret"))

    assert result.unwrap().username == "jane"
    assert terminal.session.is_authenticated
    assert terminal.session.display_name == "Jane Wanjiku"
    assert len(terminal.catalog.products) == 2


@pytest.mark.asyncio
async def test_login_with_wrong_password(terminal):
    result = await terminal.login(Credentials("jane", "nope"))

    assert isinstance(result.failure(), NotAuthenticated)
    assert not terminal.session.is_authenticated


@pytest.mark.asyncio
async def test_refresh_user(terminal):
    await terminal.login(Credentials("jane", "secret"))
    result = await terminal.refresh_user()
    assert result.unwrap().full_name == "Jane Wanjiku"


@pytest.mark.asyncio
async def test_confirm_payment_reloads_stock(terminal, rice):
    await terminal.login(Credentials("jane", "secret"))
    terminal.catalog.add_to_cart(rice.product_id)
    terminal.cart.set_quantity(rice.product_id, 4)
    terminal.checkout.begin_checkout()
    terminal.checkout.enter_tender("500")

    result = await terminal.confirm_payment()

    assert isinstance(result, Success)
    shown = {p.product_id: p.stock_quantity for p in terminal.catalog.products}
    assert shown[rice.product_id] == 96


@pytest.mark.asyncio
async def test_logout_clears_cart_and_checkout(terminal, rice):
    await terminal.login(Credentials("jane", "secret"))
    terminal.catalog.add_to_cart(rice.product_id)
    terminal.checkout.begin_checkout()

    assert isinstance(terminal.logout(), Success)

    assert terminal.cart.is_empty
    assert terminal.checkout.state is CheckoutState.IDLE
    assert not terminal.session.is_authenticated


@pytest.mark.asyncio
async def test_logout_blocked_while_submitting(terminal, rice, monkeypatch):
    await terminal.login(Credentials("jane", "secret"))
    monkeypatch.setattr(terminal.checkout, "_state", CheckoutState.SUBMITTING)

    result = terminal.logout()

    assert isinstance(result.failure(), SubmissionInFlight)
    assert terminal.session.is_authenticated


@pytest.fixture
def gateway(ledger):
    return BlockingGateway(inner=ledger)


@pytest.fixture
def blocked_terminal(cart, browser, history, session, cashier, gateway, recorder):
    session.close()
    auth = InMemoryAuth(session=session)
    auth.register(cashier, password="secret")
    checkout = CheckoutCoordinator(
        CheckoutDeps(cart=cart, transactions=gateway, session=session, events=recorder)
    )
    return PosTerminal(
        session=session,
        auth=auth,
        cart=cart,
        checkout=checkout,
        catalog=browser,
        history=history,
    )


async def _start_submission(terminal, gateway, rice, beans):
    await terminal.login(Credentials("jane", "secret"))
    terminal.add_to_cart(rice.product_id)
    terminal.add_to_cart(rice.product_id)
    terminal.add_to_cart(beans.product_id)
    terminal.checkout.begin_checkout()
    terminal.checkout.enter_tender("300")
    pending = asyncio.create_task(terminal.confirm_payment())
    await gateway.entered.wait()
    return pending


@pytest.mark.asyncio
async def test_cart_edits_refused_while_submitting(blocked_terminal, gateway, rice, beans):
    terminal = blocked_terminal
    pending = await _start_submission(terminal, gateway, rice, beans)

    attempts = [
        terminal.add_to_cart(beans.product_id),
        terminal.set_quantity(rice.product_id, 9),
        terminal.remove_item(beans.product_id),
        terminal.clear_cart(),
        await terminal.scan(beans.barcode),
    ]

    assert all(isinstance(r.failure(), SubmissionInFlight) for r in attempts)
    assert terminal.cart.item_count == 3
    assert terminal.cart.total() == Money.of("290.00")

    gateway.release.set()
    result = await pending

    assert isinstance(result, Success)
    assert gateway.inner.submitted[0].total_amount == Money.of("290.00")
    assert terminal.cart.is_empty


@pytest.mark.asyncio
async def test_cart_edits_allowed_after_failed_submission(
    blocked_terminal, gateway, ledger, rice, beans
):
    ledger.fail_with = "Database unavailable"
    terminal = blocked_terminal
    pending = await _start_submission(terminal, gateway, rice, beans)

    gateway.release.set()
    result = await pending

    assert isinstance(result, Failure)
    assert terminal.cart.item_count == 3
    assert isinstance(terminal.remove_item(beans.product_id), Success)
    assert terminal.cart.item_count == 2


@pytest.mark.asyncio
async def test_scan_adds_product_when_idle(terminal, rice):
    await terminal.login(Credentials("jane", "secret"))

    result = await terminal.scan(rice.barcode)

    assert result.unwrap() == rice
    assert terminal.cart.item_count == 1


@pytest.mark.asyncio
async def test_history_lists_newest_first(terminal, rice, beans):
    await terminal.login(Credentials("jane", "secret"))
    for product in (rice, beans):
        terminal.catalog.add_to_cart(product.product_id)
        terminal.checkout.begin_checkout()
        terminal.checkout.enter_tender("1000")
        await terminal.confirm_payment()

    result = await terminal.history.recent(ListTransactionsQuery())

    codes = [t.transaction_code for t in result.unwrap()]
    assert codes == ["TXN-000002", "TXN-000001"]
    detail = (await terminal.history.get(2)).unwrap()
    assert detail.items[0].product_name == "Beans 500g"
    assert detail.cashier_name == "Jane Wanjiku"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "query",
    [
        ListTransactionsQuery(offset=-1),
        ListTransactionsQuery(limit=0),
        ListTransactionsQuery(limit=101),
    ],
)
async def test_history_validates_paging(history, query):
    result = await history.recent(query)
    assert isinstance(result.failure(), ValidationError)


@pytest.mark.asyncio
async def test_history_unknown_transaction(history):
    assert isinstance((await history.get(404)).failure(), TransactionNotFound)
    assert isinstance((await history.get(0)).failure(), ValidationError)


def test_session_expiry_notifies_once(cashier):
    session = SessionContext()
    seen = []
    session.on_expired(seen.append)
    session.open("t", cashier)

    session.expire()
    session.expire()

    assert seen == [session]
    assert session.expired
    assert session.auth_headers() == {}


def test_session_expire_without_token_is_noop():
    session = SessionContext()
    session.expire()
    assert not session.expired
