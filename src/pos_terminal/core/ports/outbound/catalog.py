from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.product import Category, Product


class CatalogGateway(Protocol):
    async def list_products(self) -> Result[Sequence[Product], PosError]: ...

    async def search_products(self, query: str) -> Result[Sequence[Product], PosError]: ...

    async def get_by_barcode(self, barcode: str) -> Result[Product, PosError]:
        """Failure(ProductNotFound) when nothing carries this barcode."""
        ...

    async def list_categories(self) -> Result[Sequence[Category], PosError]: ...
