from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import httpx
import structlog
from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import (
    BackendError,
    BackendUnavailable,
    NotAuthenticated,
    PosError,
    SessionExpired,
)
from pos_terminal.core.domain.model.session import SessionContext

logger = structlog.get_logger(__name__)

UNKNOWN_ERROR = "Unknown error"

ErrorFactory = Callable[..., BackendError]


def error_message(response: httpx.Response) -> str:
    """Human-readable message from an error payload, verbatim when present."""
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return UNKNOWN_ERROR


class BackendClient:
    """
    Thin JSON client for the POS backend.

    Attaches the bearer token of the explicitly passed session, and turns
    every outcome into a Result: transport problems, 401 (session expired),
    non-2xx responses and malformed bodies all become Failure values.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._timeout = timeout
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout, connect=min(self._timeout, 5.0)),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def get(self, path: str, **kwargs: Any) -> Result[dict, PosError]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Result[dict, PosError]:
        return await self.request("POST", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
        authenticated: bool = True,
        error_factory: ErrorFactory = BackendError,
    ) -> Result[dict, PosError]:
        headers = self.session.auth_headers() if authenticated else {}
        try:
            response = await self._get_http_client().request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as e:
            logger.warning(
                "backend_request_failed",
                method=method,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            return Failure(BackendUnavailable(message="Backend is unreachable"))

        if response.status_code == 401:
            if not authenticated:
                return Failure(NotAuthenticated(message=error_message(response)))
            logger.info("session_expired", method=method, path=path)
            self.session.expire()
            return Failure(SessionExpired(message="session expired, please sign in again"))

        if response.is_error:
            message = error_message(response)
            logger.info(
                "backend_rejected",
                method=method,
                path=path,
                status=response.status_code,
                error=message,
            )
            return Failure(error_factory(message=message, status_code=response.status_code))

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return Failure(
                BackendError(
                    message="malformed response from backend",
                    status_code=response.status_code,
                )
            )
        return Success(body)
