from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence

from returns.result import Failure, Result, Success

from pos_terminal.adapters.outbound.in_memory_catalog import InMemoryCatalog
from pos_terminal.core.domain.model.errors import (
    PosError,
    SubmissionFailed,
    TransactionNotFound,
)
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import (
    CommittedTransaction,
    PaymentMethod,
    TransactionItemView,
    TransactionRequest,
    TransactionSummary,
    compute_change,
    now_utc,
)
from pos_terminal.core.domain.model.product import ProductId
from pos_terminal.core.ports.outbound.transactions import TransactionGateway


@dataclass
class InMemoryTransactionLedger(TransactionGateway):
    catalog: InMemoryCatalog | None = None
    cashier_name: str | None = None
    fail_with: str | None = None
    submitted: list[TransactionRequest] = field(default_factory=list)
    _store: Dict[int, TransactionSummary] = field(default_factory=dict)

    async def submit(
        self, request: TransactionRequest
    ) -> Result[CommittedTransaction, PosError]:
        self.submitted.append(request)
        if self.fail_with is not None:
            return Failure(SubmissionFailed(message=self.fail_with, status_code=500))

        if self.catalog is not None:
            # validate first (no partial stock movement)
            for it in request.items:
                pid = ProductId(it.product_id)
                if self.catalog.stock_of(pid) < it.quantity:
                    return Failure(
                        SubmissionFailed(
                            message=f"Insufficient stock for product {it.product_id}",
                            status_code=400,
                        )
                    )
            for it in request.items:
                self.catalog.take_stock(ProductId(it.product_id), it.quantity)

        transaction_id = len(self._store) + 1
        code = f"TXN-{transaction_id:06d}"
        created = now_utc()
        if request.payment_method is PaymentMethod.CASH:
            change = compute_change(request.amount_tendered, request.total_amount)
        else:
            change = Money.zero(request.total_amount.currency)

        self._store[transaction_id] = TransactionSummary(
            transaction_id=transaction_id,
            transaction_code=code,
            subtotal=request.subtotal,
            tax_amount=request.tax_amount,
            discount_amount=request.discount_amount,
            total_amount=request.total_amount,
            status="completed",
            created_at=created.isoformat(),
            cashier_name=self.cashier_name,
            items=tuple(self._item_views(request)),
        )
        return Success(
            CommittedTransaction(
                transaction_id=transaction_id,
                transaction_code=code,
                total_amount=request.total_amount,
                change=change,
                created_at=created,
            )
        )

    async def list_transactions(
        self, limit: int, offset: int
    ) -> Result[Sequence[TransactionSummary], PosError]:
        newest_first = sorted(self._store.values(), key=lambda t: t.transaction_id, reverse=True)
        return Success(tuple(newest_first[offset : offset + limit]))

    async def get_transaction(
        self, transaction_id: int
    ) -> Result[TransactionSummary, PosError]:
        found = self._store.get(transaction_id)
        if found is None:
            return Failure(
                TransactionNotFound(message="Transaction not found", transaction_id=transaction_id)
            )
        return Success(found)

    def _item_views(self, request: TransactionRequest):
        for it in request.items:
            name = ""
            if self.catalog is not None:
                p = self.catalog.products_by_id.get(it.product_id)
                name = p.name if p is not None else ""
            yield TransactionItemView(
                product_id=it.product_id,
                product_name=name,
                quantity=it.quantity,
                unit_price=it.unit_price,
                subtotal=it.unit_price * it.quantity,
                discount=it.discount,
            )
