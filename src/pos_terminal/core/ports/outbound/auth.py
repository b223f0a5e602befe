from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.session import CashierUser


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


@dataclass(frozen=True)
class IssuedToken:
    token: str
    user: CashierUser


class AuthGateway(Protocol):
    async def login(self, credentials: Credentials) -> Result[IssuedToken, PosError]: ...

    async def current_user(self) -> Result[CashierUser, PosError]: ...
