from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.payment import TransactionSummary


@dataclass(frozen=True)
class ListTransactionsQuery:
    offset: int = 0
    limit: int = 50


class TransactionHistoryUseCase(Protocol):
    async def recent(
        self, query: ListTransactionsQuery
    ) -> Result[Sequence[TransactionSummary], PosError]: ...

    async def get(self, transaction_id: int) -> Result[TransactionSummary, PosError]: ...
