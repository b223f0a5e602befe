from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.payment import (
    CommittedTransaction,
    TransactionRequest,
    TransactionSummary,
)


class TransactionGateway(Protocol):
    async def submit(
        self, request: TransactionRequest
    ) -> Result[CommittedTransaction, PosError]:
        """
        Called exactly once per confirmed checkout.
        Failures carry the backend's human-readable message when it sent one.
        """
        ...

    async def list_transactions(
        self, limit: int, offset: int
    ) -> Result[Sequence[TransactionSummary], PosError]: ...

    async def get_transaction(
        self, transaction_id: int
    ) -> Result[TransactionSummary, PosError]: ...
