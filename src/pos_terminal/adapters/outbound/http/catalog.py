from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
from urllib.parse import quote

from returns.result import Failure, Result

from pos_terminal.adapters.outbound.http.client import BackendClient
from pos_terminal.adapters.outbound.http.mapping import (
    decode,
    to_category,
    to_product,
)
from pos_terminal.core.domain.model.errors import (
    BackendError,
    PosError,
    ProductNotFound,
)
from pos_terminal.core.domain.model.money import DEFAULT_CURRENCY
from pos_terminal.core.domain.model.product import Category, Product
from pos_terminal.core.ports.outbound.catalog import CatalogGateway


@dataclass
class HttpCatalogGateway(CatalogGateway):
    client: BackendClient
    currency: str = DEFAULT_CURRENCY

    async def list_products(self) -> Result[Sequence[Product], PosError]:
        result = await self.client.get("/products")
        return result.bind(self._products)

    async def search_products(self, query: str) -> Result[Sequence[Product], PosError]:
        result = await self.client.get("/products/search", params={"query": query})
        return result.bind(self._products)

    async def get_by_barcode(self, barcode: str) -> Result[Product, PosError]:
        result = await self.client.get(f"/products/barcode/{quote(barcode, safe='')}")

        def not_found(err: PosError) -> PosError:
            if isinstance(err, BackendError) and err.status_code == 404:
                return ProductNotFound(message="Product not found", lookup=barcode)
            return err

        def product(body: dict) -> Result[Product, PosError]:
            if not body.get("product"):
                return Failure(ProductNotFound(message="Product not found", lookup=barcode))
            return decode(lambda: to_product(body["product"], self.currency))

        return result.alt(not_found).bind(product)

    async def list_categories(self) -> Result[Sequence[Category], PosError]:
        result = await self.client.get("/categories")
        return result.bind(
            lambda body: decode(
                lambda: tuple(to_category(c) for c in body.get("categories") or ())
            )
        )

    def _products(self, body: dict) -> Result[Sequence[Product], PosError]:
        return decode(
            lambda: tuple(to_product(p, self.currency) for p in body.get("products") or ())
        )
