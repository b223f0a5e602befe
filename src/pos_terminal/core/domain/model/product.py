from __future__ import annotations

from dataclasses import dataclass

from pos_terminal.core.domain.model.money import Money


@dataclass(frozen=True)
class ProductId:
    value: int


@dataclass(frozen=True)
class Product:
    product_id: ProductId
    name: str
    price: Money
    stock_quantity: int = 0
    sku: str = ""
    barcode: str = ""
    category_id: int | None = None
    category_name: str | None = None
    description: str | None = None
    cost_price: Money | None = None
    reorder_level: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.price.amount < 0:
            raise ValueError(f"price must be >= 0: product_id={self.product_id.value}")

    @property
    def low_stock(self) -> bool:
        return self.stock_quantity <= self.reorder_level


@dataclass(frozen=True)
class Category:
    category_id: int
    name: str
    description: str | None = None
