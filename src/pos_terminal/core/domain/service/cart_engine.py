from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from pos_terminal.core.domain.model.cart import CartLine
from pos_terminal.core.domain.model.money import DEFAULT_CURRENCY, Money, fold_money
from pos_terminal.core.domain.model.product import Product, ProductId
from pos_terminal.core.ports.inbound.cart import CartLineView, CartUseCase, CartView
from pos_terminal.core.ports.outbound.events import (
    CartChanged,
    EventPublisher,
    NullEventPublisher,
)

DEFAULT_TAX_RATE = Decimal("0.16")


@dataclass
class CartEngine(CartUseCase):
    """
    In-memory cart for one checkout cycle.

    Holds at most one line per product id, in the order products were first
    added. Every operation is total: unknown ids are ignored, and a quantity
    that drops to zero removes the line. Totals are derived on each call.
    """

    tax_rate: Decimal = DEFAULT_TAX_RATE
    currency: str = DEFAULT_CURRENCY
    events: EventPublisher = field(default_factory=NullEventPublisher)
    _lines: list[CartLine] = field(default_factory=list)

    @property
    def lines(self) -> Sequence[CartLine]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(ln.quantity for ln in self._lines)

    # ---- mutations ---------------------------------------------------------

    def add_item(self, product: Product) -> CartLine:
        idx = self._index_of(product.product_id)
        if idx is None:
            line = CartLine(product=product, quantity=1, discount=Money.zero(self.currency))
            self._lines.append(line)
        else:
            line = self._lines[idx].with_quantity(self._lines[idx].quantity + 1)
            self._lines[idx] = line
        self._changed()
        return line

    def remove_item(self, product_id: ProductId) -> None:
        idx = self._index_of(product_id)
        if idx is None:
            return
        del self._lines[idx]
        self._changed()

    def set_quantity(self, product_id: ProductId, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        idx = self._index_of(product_id)
        if idx is None:
            return
        self._lines[idx] = self._lines[idx].with_quantity(quantity)
        self._changed()

    def clear(self) -> None:
        self._lines.clear()
        self._changed()

    # ---- totals ------------------------------------------------------------

    def subtotal(self) -> Money:
        return fold_money((ln.subtotal() for ln in self._lines), currency=self.currency)

    def tax(self) -> Money:
        return self.subtotal().scaled(self.tax_rate)

    def total(self) -> Money:
        subtotal = self.subtotal()
        return subtotal + subtotal.scaled(self.tax_rate)

    def view(self) -> CartView:
        subtotal = self.subtotal()
        tax = subtotal.scaled(self.tax_rate)
        return CartView(
            lines=tuple(_to_line_view(ln) for ln in self._lines),
            item_count=self.item_count,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            tax_rate=str(self.tax_rate),
        )

    # ---- internals ---------------------------------------------------------

    def _index_of(self, product_id: ProductId) -> int | None:
        for i, ln in enumerate(self._lines):
            if ln.product_id == product_id:
                return i
        return None

    def _changed(self) -> None:
        self.events.publish(
            CartChanged(
                line_count=len(self._lines),
                item_count=self.item_count,
                total=self.total(),
            )
        )


def _to_line_view(line: CartLine) -> CartLineView:
    return CartLineView(
        product_id=line.product_id.value,
        name=line.product.name,
        unit_price=line.product.price,
        quantity=line.quantity,
        discount=line.discount,
        subtotal=line.subtotal(),
    )
