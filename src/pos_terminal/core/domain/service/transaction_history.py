from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result

from pos_terminal.core.domain.model.errors import PosError, ValidationError
from pos_terminal.core.domain.model.payment import TransactionSummary
from pos_terminal.core.ports.inbound.history import (
    ListTransactionsQuery,
    TransactionHistoryUseCase,
)
from pos_terminal.core.ports.outbound.transactions import TransactionGateway


@dataclass(frozen=True)
class HistoryDeps:
    transactions: TransactionGateway


@dataclass(frozen=True)
class TransactionHistoryService(TransactionHistoryUseCase):
    deps: HistoryDeps

    async def recent(
        self, query: ListTransactionsQuery
    ) -> Result[Sequence[TransactionSummary], PosError]:
        if query.offset < 0:
            return Failure(ValidationError(message="offset must be >= 0"))
        if query.limit <= 0:
            return Failure(ValidationError(message="limit must be > 0"))
        if query.limit > 100:
            return Failure(ValidationError(message="limit must be <= 100"))

        return await self.deps.transactions.list_transactions(query.limit, query.offset)

    async def get(self, transaction_id: int) -> Result[TransactionSummary, PosError]:
        if transaction_id <= 0:
            return Failure(ValidationError(message="transaction_id must be > 0"))
        return await self.deps.transactions.get_transaction(transaction_id)
