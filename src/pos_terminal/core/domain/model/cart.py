from __future__ import annotations

from dataclasses import dataclass, field, replace

from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.product import Product, ProductId


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int = 1
    discount: Money = field(default_factory=Money.zero)

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1: {self.quantity}")
        if self.discount.amount < 0:
            raise ValueError("discount must be >= 0")

    @property
    def product_id(self) -> ProductId:
        return self.product.product_id

    def subtotal(self) -> Money:
        # discount is carried to the backend but not applied here
        return self.product.price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)
