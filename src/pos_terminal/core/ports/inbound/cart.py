from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from pos_terminal.core.domain.model.cart import CartLine
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.product import Product, ProductId


@dataclass(frozen=True)
class CartLineView:
    product_id: int
    name: str
    unit_price: Money
    quantity: int
    discount: Money
    subtotal: Money


@dataclass(frozen=True)
class CartView:
    lines: Sequence[CartLineView]
    item_count: int
    subtotal: Money
    tax: Money
    total: Money
    tax_rate: str


class CartUseCase(Protocol):
    @property
    def lines(self) -> Sequence[CartLine]: ...

    def add_item(self, product: Product) -> CartLine: ...

    def remove_item(self, product_id: ProductId) -> None: ...

    def set_quantity(self, product_id: ProductId, quantity: int) -> None: ...

    def clear(self) -> None: ...

    def subtotal(self) -> Money: ...

    def tax(self) -> Money: ...

    def total(self) -> Money: ...

    def view(self) -> CartView: ...
