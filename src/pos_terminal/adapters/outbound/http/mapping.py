from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, TypeVar

from returns.result import Failure, Result, Success

from pos_terminal.core.domain.model.errors import BackendError, PosError
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import (
    TransactionItemView,
    TransactionSummary,
)
from pos_terminal.core.domain.model.product import Category, Product, ProductId
from pos_terminal.core.domain.model.session import CashierUser, Role

T = TypeVar("T")


class MappingError(ValueError):
    pass


def _money(value: Any, currency: str) -> Money:
    if value is None or value == "":
        return Money.zero(currency)
    return Money.of(str(value), currency)


def _require(d: dict, key: str) -> Any:
    if key not in d or d[key] is None:
        raise MappingError(f"missing field: {key}")
    return d[key]


def to_product(d: dict, currency: str) -> Product:
    return Product(
        product_id=ProductId(int(_require(d, "id"))),
        name=str(_require(d, "name")),
        price=_money(_require(d, "price"), currency),
        stock_quantity=int(d.get("stock_quantity") or 0),
        sku=str(d.get("sku") or ""),
        barcode=str(d.get("barcode") or ""),
        category_id=d.get("category_id"),
        category_name=d.get("category_name"),
        description=d.get("description"),
        cost_price=_money(d["cost_price"], currency) if d.get("cost_price") is not None else None,
        reorder_level=int(d.get("reorder_level") or 0),
        is_active=bool(d.get("is_active", True)),
    )


def to_category(d: dict) -> Category:
    return Category(
        category_id=int(_require(d, "id")),
        name=str(_require(d, "name")),
        description=d.get("description"),
    )


def to_user(d: dict) -> CashierUser:
    role = d.get("role") or Role.CASHIER.value
    try:
        parsed_role = Role(role)
    except ValueError as e:
        raise MappingError(f"unknown role: {role}") from e
    return CashierUser(
        user_id=int(_require(d, "id")),
        username=str(_require(d, "username")),
        full_name=str(d.get("full_name") or ""),
        role=parsed_role,
    )


def to_transaction(d: dict, currency: str) -> TransactionSummary:
    return TransactionSummary(
        transaction_id=int(_require(d, "id")),
        transaction_code=str(d.get("transaction_code") or ""),
        subtotal=_money(d.get("subtotal"), currency),
        tax_amount=_money(d.get("tax_amount"), currency),
        discount_amount=_money(d.get("discount_amount"), currency),
        total_amount=_money(d.get("total_amount"), currency),
        status=str(d.get("status") or ""),
        created_at=str(d.get("created_at") or ""),
        cashier_name=d.get("cashier_name"),
        customer_name=d.get("customer_name"),
        items=tuple(
            TransactionItemView(
                product_id=int(_require(it, "product_id")),
                product_name=str(it.get("product_name") or ""),
                quantity=int(_require(it, "quantity")),
                unit_price=_money(it.get("unit_price"), currency),
                subtotal=_money(it.get("subtotal"), currency),
                discount=_money(it.get("discount"), currency),
            )
            for it in d.get("items") or ()
        ),
    )


def parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def decode(build: Callable[[], T]) -> Result[T, PosError]:
    try:
        return Success(build())
    except (MappingError, ArithmeticError, AttributeError, KeyError, TypeError, ValueError) as e:
        return Failure(BackendError(message=f"malformed response from backend: {e}"))
