from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Sequence

from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import PosError, ProductNotFound
from pos_terminal.core.domain.model.product import Category, Product, ProductId
from pos_terminal.core.ports.outbound.catalog import CatalogGateway


@dataclass
class InMemoryCatalog(CatalogGateway):
    products_by_id: Dict[int, Product] = field(default_factory=dict)
    categories_by_id: Dict[int, Category] = field(default_factory=dict)

    @staticmethod
    def of(products: Sequence[Product], categories: Sequence[Category] = ()) -> "InMemoryCatalog":
        return InMemoryCatalog(
            products_by_id={p.product_id.value: p for p in products},
            categories_by_id={c.category_id: c for c in categories},
        )

    async def list_products(self) -> Result[Sequence[Product], PosError]:
        return Success(self._active())

    async def search_products(self, query: str) -> Result[Sequence[Product], PosError]:
        q = query.strip().lower()
        return Success(
            tuple(
                p
                for p in self._active()
                if q in p.name.lower()
                or q in p.sku.lower()
                or q == p.barcode.lower()
                or q in (p.category_name or "").lower()
            )
        )

    async def get_by_barcode(self, barcode: str) -> Result[Product, PosError]:
        for p in self._active():
            if p.barcode and p.barcode == barcode:
                return Success(p)
        return Failure(ProductNotFound(message="Product not found", lookup=barcode))

    async def list_categories(self) -> Result[Sequence[Category], PosError]:
        return Success(tuple(sorted(self.categories_by_id.values(), key=lambda c: c.name)))

    # ---- stock bookkeeping used by the in-memory ledger --------------------

    def stock_of(self, product_id: ProductId) -> int:
        p = self.products_by_id.get(product_id.value)
        return p.stock_quantity if p is not None else 0

    def take_stock(self, product_id: ProductId, quantity: int) -> None:
        p = self.products_by_id[product_id.value]
        self.products_by_id[product_id.value] = replace(
            p, stock_quantity=p.stock_quantity - quantity
        )

    def _active(self) -> tuple[Product, ...]:
        return tuple(
            sorted(
                (p for p in self.products_by_id.values() if p.is_active),
                key=lambda p: p.name,
            )
        )
