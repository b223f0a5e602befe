from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result

from pos_terminal.adapters.outbound.http.client import BackendClient
from pos_terminal.adapters.outbound.http.mapping import (
    decode,
    parse_timestamp,
    to_transaction,
)
from pos_terminal.core.domain.model.errors import (
    BackendError,
    PosError,
    SubmissionFailed,
    TransactionNotFound,
)
from pos_terminal.core.domain.model.money import DEFAULT_CURRENCY, Money
from pos_terminal.core.domain.model.payment import (
    CommittedTransaction,
    PaymentMethod,
    TransactionRequest,
    TransactionSummary,
    compute_change,
)
from pos_terminal.core.ports.outbound.transactions import TransactionGateway


@dataclass
class HttpTransactionGateway(TransactionGateway):
    client: BackendClient
    currency: str = DEFAULT_CURRENCY

    async def submit(
        self, request: TransactionRequest
    ) -> Result[CommittedTransaction, PosError]:
        result = await self.client.post(
            "/transactions",
            json=request.to_payload(),
            error_factory=SubmissionFailed,
        )
        return result.bind(lambda body: decode(lambda: self._committed(request, body)))

    async def list_transactions(
        self, limit: int, offset: int
    ) -> Result[Sequence[TransactionSummary], PosError]:
        result = await self.client.get(
            "/transactions", params={"limit": limit, "offset": offset}
        )
        return result.bind(
            lambda body: decode(
                lambda: tuple(
                    to_transaction(t, self.currency) for t in body.get("transactions") or ()
                )
            )
        )

    async def get_transaction(
        self, transaction_id: int
    ) -> Result[TransactionSummary, PosError]:
        result = await self.client.get(f"/transactions/{transaction_id}")

        def not_found(err: PosError) -> PosError:
            if isinstance(err, BackendError) and err.status_code == 404:
                return TransactionNotFound(
                    message="Transaction not found", transaction_id=transaction_id
                )
            return err

        def transaction(body: dict) -> Result[TransactionSummary, PosError]:
            if not body.get("transaction"):
                return Failure(
                    TransactionNotFound(
                        message="Transaction not found", transaction_id=transaction_id
                    )
                )
            return decode(lambda: to_transaction(body["transaction"], self.currency))

        return result.alt(not_found).bind(transaction)

    def _committed(self, request: TransactionRequest, body: dict) -> CommittedTransaction:
        txn = body.get("transaction") or {}
        currency = request.total_amount.currency

        if request.payment_method is not PaymentMethod.CASH:
            change = Money.zero(currency)
        elif body.get("change") is not None:
            change = Money.of(str(body["change"]), currency)
        else:
            change = compute_change(request.amount_tendered, request.total_amount)

        total = txn.get("total_amount")
        return CommittedTransaction(
            transaction_id=int(txn["id"]) if txn.get("id") is not None else None,
            transaction_code=txn.get("transaction_code"),
            total_amount=Money.of(str(total), currency) if total is not None else request.total_amount,
            change=change,
            created_at=parse_timestamp(txn.get("created_at")),
        )
