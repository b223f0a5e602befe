from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result

from pos_terminal.adapters.outbound.http.client import BackendClient
from pos_terminal.adapters.outbound.http.mapping import decode, to_user
from pos_terminal.core.domain.model.errors import NotAuthenticated, PosError
from pos_terminal.core.domain.model.session import CashierUser
from pos_terminal.core.ports.outbound.auth import AuthGateway, Credentials, IssuedToken


@dataclass
class HttpAuthGateway(AuthGateway):
    client: BackendClient

    async def login(self, credentials: Credentials) -> Result[IssuedToken, PosError]:
        result = await self.client.post(
            "/auth/login",
            json={"username": credentials.username, "password": credentials.password},
            authenticated=False,
        )
        return result.bind(
            lambda body: decode(
                lambda: IssuedToken(token=str(body["token"]), user=to_user(body["user"]))
            )
        )

    async def current_user(self) -> Result[CashierUser, PosError]:
        if not self.client.session.is_authenticated:
            return Failure(NotAuthenticated(message="no cashier is signed in"))
        result = await self.client.get("/auth/me")
        return result.bind(lambda body: decode(lambda: to_user(body["user"])))
