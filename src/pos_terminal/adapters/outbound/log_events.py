from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum

import structlog

from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.ports.outbound.events import EventPublisher, PosEvent

logger = structlog.get_logger("pos_terminal.events")

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def event_name(event: PosEvent) -> str:
    return _CAMEL.sub("_", type(event).__name__).lower()


def _flatten(value):
    if isinstance(value, Money):
        return value.format()
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class LogEventPublisher(EventPublisher):
    def publish(self, event: PosEvent) -> None:
        payload = {f.name: _flatten(getattr(event, f.name)) for f in fields(event)}
        logger.debug(event_name(event), **payload)
