from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import structlog

from pos_terminal.core.ports.outbound.events import EventPublisher, PosEvent

logger = structlog.get_logger(__name__)

Subscriber = Callable[[PosEvent], None]


@dataclass
class FanoutEventPublisher(EventPublisher):
    """
    Delivers every event to the wrapped publishers, then to UI subscribers.
    A subscriber that raises is logged and skipped.
    """

    publishers: list[EventPublisher] = field(default_factory=list)
    _subscribers: list[Subscriber] = field(default_factory=list)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, event: PosEvent) -> None:
        for p in self.publishers:
            p.publish(event)
        for s in list(self._subscribers):
            try:
                s(event)
            except Exception:  # noqa: BLE001
                logger.exception("subscriber_failed", event_type=type(event).__name__)
