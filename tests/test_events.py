"""Tests for event fan-out and log rendering"""
from structlog.testing import capture_logs

from pos_terminal.adapters.outbound.log_events import LogEventPublisher, event_name
from pos_terminal.adapters.outbound.subscribers import FanoutEventPublisher
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import CheckoutState, PaymentMethod
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.ports.outbound.events import (
    CartChanged,
    CheckoutStateChanged,
    TransactionSettled,
)


def test_event_name_is_snake_case():
    assert event_name(CartChanged(1, 1, Money.zero())) == "cart_changed"
    assert (
        event_name(CheckoutStateChanged(CheckoutState.IDLE, CheckoutState.AWAITING_PAYMENT))
        == "checkout_state_changed"
    )


def test_log_publisher_flattens_fields():
    settled = TransactionSettled(
        transaction_code="TXN-000001",
        payment_method=PaymentMethod.CASH,
        total=Money.of("290.00"),
        change=Money.of("10.00"),
    )
    with capture_logs() as logs:
        LogEventPublisher().publish(settled)

    assert logs == [
        {
            "event": "transaction_settled",
            "log_level": "debug",
            "transaction_code": "TXN-000001",
            "payment_method": "cash",
            "total": "KES 290.00",
            "change": "KES 10.00",
        }
    ]


def test_fanout_delivers_to_publishers_and_subscribers(recorder):
    fanout = FanoutEventPublisher(publishers=[recorder])
    seen = []
    unsubscribe = fanout.subscribe(seen.append)
    event = CartChanged(1, 2, Money.of("116.00"))

    fanout.publish(event)
    unsubscribe()
    fanout.publish(event)

    assert recorder.events == [event, event]
    assert seen == [event]


def test_failing_subscriber_does_not_block_others(recorder):
    fanout = FanoutEventPublisher(publishers=[recorder])
    seen = []

    def broken(_event):
        raise RuntimeError("render failed")

    fanout.subscribe(broken)
    fanout.subscribe(seen.append)

    with capture_logs() as logs:
        fanout.publish(CartChanged(0, 0, Money.zero()))

    assert len(seen) == 1
    assert logs[0]["event"] == "subscriber_failed"
    assert logs[0]["log_level"] == "error"
    assert logs[0]["event_type"] == "CartChanged"


def test_cart_engine_wired_to_fanout(recorder, rice):
    fanout = FanoutEventPublisher(publishers=[recorder])
    totals = []
    fanout.subscribe(lambda e: totals.append(e.total.format()))
    cart = CartEngine(events=fanout)

    cart.add_item(rice)

    assert totals == ["KES 116.00"]
