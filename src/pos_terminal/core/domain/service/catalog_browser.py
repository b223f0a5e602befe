from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import structlog
from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import (
    PosError,
    ProductNotFound,
    ValidationError,
)
from pos_terminal.core.domain.model.product import Category, Product, ProductId
from pos_terminal.core.domain.service.cart_engine import CartEngine
from pos_terminal.core.ports.inbound.catalog import BrowseCatalogUseCase
from pos_terminal.core.ports.outbound.catalog import CatalogGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogDeps:
    catalog: CatalogGateway
    cart: CartEngine


@dataclass
class CatalogBrowser(BrowseCatalogUseCase):
    """Product list currently shown to the cashier, plus barcode scanning."""

    deps: CatalogDeps
    _products: list[Product] = field(default_factory=list)
    _query: str = ""

    @property
    def products(self) -> Sequence[Product]:
        return tuple(self._products)

    @property
    def query(self) -> str:
        return self._query

    async def load_all(self) -> Result[Sequence[Product], PosError]:
        result = await self.deps.catalog.list_products()
        return result.map(lambda products: self._replace_list(products, query=""))

    async def search(self, query: str) -> Result[Sequence[Product], PosError]:
        if not query.strip():
            return await self.load_all()
        result = await self.deps.catalog.search_products(query.strip())
        return result.map(lambda products: self._replace_list(products, query=query.strip()))

    async def lookup(self, barcode: str) -> Result[Product, PosError]:
        code = barcode.strip()
        if not code:
            return Failure(ValidationError("barcode is required"))

        result = await self.deps.catalog.get_by_barcode(code)
        if isinstance(result, Failure):
            err = result.failure()
            if isinstance(err, ProductNotFound):
                logger.info("barcode_not_found", barcode=code)
            else:
                logger.warning("barcode_lookup_failed", barcode=code, error=str(err))
        return result

    async def scan(self, barcode: str) -> Result[Product, PosError]:
        result = await self.lookup(barcode)
        return result.map(self.add_product)

    def find(self, product_id: ProductId) -> Result[Product, PosError]:
        for p in self._products:
            if p.product_id == product_id:
                return Success(p)
        return Failure(ProductNotFound("Product not found", lookup=str(product_id.value)))

    def add_to_cart(self, product_id: ProductId) -> Result[Product, PosError]:
        return self.find(product_id).map(self.add_product)

    def add_product(self, product: Product) -> Product:
        self.deps.cart.add_item(product)
        logger.info("product_added", product_id=product.product_id.value, barcode=product.barcode)
        return product

    async def categories(self) -> Result[Sequence[Category], PosError]:
        return await self.deps.catalog.list_categories()

    def _replace_list(self, products: Sequence[Product], query: str) -> Sequence[Product]:
        self._products = list(products)
        self._query = query
        return self.products
