from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"


@dataclass(frozen=True)
class CashierUser:
    user_id: int
    username: str
    full_name: str
    role: Role = Role.CASHIER


@dataclass
class SessionContext:
    """
    Credentials of the cashier signed in on this terminal.

    Handed to the backend gateways at construction time; gateways read the
    token from here on every request and call expire() when the backend
    rejects it.
    """

    token: str | None = None
    user: CashierUser | None = None
    expired: bool = False
    _listeners: list[Callable[[SessionContext], None]] = field(default_factory=list, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and not self.expired

    @property
    def display_name(self) -> str:
        if self.user is None:
            return ""
        return self.user.full_name or self.user.username

    def open(self, token: str, user: CashierUser) -> None:
        self.token = token
        self.user = user
        self.expired = False

    def close(self) -> None:
        self.token = None
        self.user = None
        self.expired = False

    def expire(self) -> None:
        if self.token is None or self.expired:
            return
        self.expired = True
        for callback in list(self._listeners):
            callback(self)

    def on_expired(self, callback: Callable[[SessionContext], None]) -> None:
        self._listeners.append(callback)

    def auth_headers(self) -> dict[str, str]:
        if not self.is_authenticated:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
