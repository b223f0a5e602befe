from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from pos_terminal.core.domain.model.payment import PaymentMethod

# ---- requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, examples=["cashier"])
    password: str = Field(min_length=1)


class ScanRequest(BaseModel):
    barcode: str = Field(min_length=1, max_length=64, examples=["6001234567890"])


class AddItemRequest(BaseModel):
    product_id: int = Field(gt=0, examples=[1])


class QuantityRequest(BaseModel):
    # <= 0 removes the line
    quantity: int = Field(examples=[3])


class PaymentRequest(BaseModel):
    method: PaymentMethod | None = Field(default=None, examples=["cash"])
    amount_tendered: str | None = Field(default=None, max_length=32, examples=["300.00"])


# ---- responses -------------------------------------------------------------


class SessionResponse(BaseModel):
    authenticated: bool
    expired: bool
    display_name: str
    username: str | None = None
    role: str | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    barcode: str
    price: str
    stock_quantity: int
    category_name: str | None = None
    low_stock: bool


class ProductListResponse(BaseModel):
    query: str
    items: list[ProductOut]


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None = None


class CartLineOut(BaseModel):
    product_id: int
    name: str
    unit_price: str
    quantity: int
    discount: str
    subtotal: str


class CartResponse(BaseModel):
    lines: list[CartLineOut]
    item_count: int
    subtotal: str
    tax: str
    total: str
    tax_rate: str
    currency: str


class CheckoutResponse(BaseModel):
    state: str
    payment_method: str | None = None
    amount_tendered: str | None = None
    total: str
    change_preview: str | None = None
    in_flight: bool
    currency: str


class SettlementResponse(BaseModel):
    transaction_id: int | None = None
    transaction_code: str | None = None
    payment_method: str
    total: str
    amount_tendered: str
    change: str
    currency: str
    cashier_name: str
    message: str


class TransactionItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: str
    subtotal: str
    discount: str


class TransactionOut(BaseModel):
    id: int
    transaction_code: str
    subtotal: str
    tax_amount: str
    discount_amount: str
    total_amount: str
    status: str
    created_at: str
    cashier_name: str | None = None
    customer_name: str | None = None
    items: list[TransactionItemOut] = Field(default_factory=list)


class TransactionListResponse(BaseModel):
    offset: int
    limit: int
    items: list[TransactionOut]


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None
