from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Dict

from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import NotAuthenticated, PosError
from pos_terminal.core.domain.model.session import CashierUser, SessionContext
from pos_terminal.core.ports.outbound.auth import AuthGateway, Credentials, IssuedToken


@dataclass
class InMemoryAuth(AuthGateway):
    session: SessionContext
    users: Dict[str, tuple[str, CashierUser]] = field(default_factory=dict)

    def register(self, user: CashierUser, password: str) -> None:
        self.users[user.username] = (password, user)

    async def login(self, credentials: Credentials) -> Result[IssuedToken, PosError]:
        entry = self.users.get(credentials.username)
        if entry is None or entry[0] != credentials.password:
            return Failure(NotAuthenticated(message="Invalid credentials"))
        return Success(IssuedToken(token=secrets.token_hex(16), user=entry[1]))

    async def current_user(self) -> Result[CashierUser, PosError]:
        if not self.session.is_authenticated or self.session.user is None:
            return Failure(NotAuthenticated(message="no cashier is signed in"))
        return Success(self.session.user)
