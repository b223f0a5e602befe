from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pos_terminal.core.domain.model.errors import PosError
from pos_terminal.core.domain.model.product import Category, Product, ProductId


class BrowseCatalogUseCase(Protocol):
    @property
    def products(self) -> Sequence[Product]: ...

    async def load_all(self) -> Result[Sequence[Product], PosError]: ...

    async def search(self, query: str) -> Result[Sequence[Product], PosError]: ...

    async def lookup(self, barcode: str) -> Result[Product, PosError]: ...

    async def scan(self, barcode: str) -> Result[Product, PosError]: ...

    def find(self, product_id: ProductId) -> Result[Product, PosError]: ...

    async def categories(self) -> Result[Sequence[Category], PosError]: ...
