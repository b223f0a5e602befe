from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from returns.result import Success

from pos_terminal.adapters.inbound.web.schemas import (
    AddItemRequest,
    CartLineOut,
    CartResponse,
    CategoryOut,
    CheckoutResponse,
    ErrorResponse,
    LoginRequest,
    PaymentRequest,
    ProductListResponse,
    ProductOut,
    QuantityRequest,
    ScanRequest,
    SessionResponse,
    SettlementResponse,
    TransactionItemOut,
    TransactionListResponse,
    TransactionOut,
)
from pos_terminal.core.domain.model.errors import (
    BackendError,
    BackendUnavailable,
    CheckoutNotActive,
    EmptyCart,
    InsufficientTender,
    NotAuthenticated,
    PosError,
    ProductNotFound,
    SessionExpired,
    SubmissionInFlight,
    TransactionNotFound,
    ValidationError,
)
from pos_terminal.core.domain.model.money import Money
from pos_terminal.core.domain.model.payment import Settlement, TransactionSummary
from pos_terminal.core.domain.model.product import Product, ProductId
from pos_terminal.core.domain.service.terminal import PosTerminal
from pos_terminal.core.ports.inbound.history import ListTransactionsQuery
from pos_terminal.core.ports.outbound.auth import Credentials

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _map_error_to_http(err: PosError) -> tuple[int, ErrorResponse]:
    if isinstance(err, (ValidationError, EmptyCart, CheckoutNotActive)):
        return 400, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, NotAuthenticated):
        return 401, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, (ProductNotFound, TransactionNotFound)):
        return 404, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, SubmissionInFlight):
        return 409, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, InsufficientTender):
        return 422, ErrorResponse(type=type(err).__name__, message=err.message)

    if isinstance(err, BackendError):
        return 502, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, BackendUnavailable):
        return 503, ErrorResponse(type=type(err).__name__, message=str(err))

    return 500, ErrorResponse(type=type(err).__name__, message=str(err))


# ---- view mapping ----------------------------------------------------------


def _amount(m: Money) -> str:
    return f"{m.amount:.2f}"


def _product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.product_id.value,
        name=p.name,
        sku=p.sku,
        barcode=p.barcode,
        price=_amount(p.price),
        stock_quantity=p.stock_quantity,
        category_name=p.category_name,
        low_stock=p.low_stock,
    )


def _settlement_out(s: Settlement) -> SettlementResponse:
    return SettlementResponse(
        transaction_id=s.transaction.transaction_id,
        transaction_code=s.transaction.transaction_code,
        payment_method=s.payment_method.value,
        total=_amount(s.transaction.total_amount),
        amount_tendered=_amount(s.amount_tendered),
        change=_amount(s.change),
        currency=s.change.currency,
        cashier_name=s.cashier_name,
        message=f"Transaction completed! Change: {s.change.format()}",
    )


def _transaction_out(t: TransactionSummary) -> TransactionOut:
    return TransactionOut(
        id=t.transaction_id,
        transaction_code=t.transaction_code,
        subtotal=_amount(t.subtotal),
        tax_amount=_amount(t.tax_amount),
        discount_amount=_amount(t.discount_amount),
        total_amount=_amount(t.total_amount),
        status=t.status,
        created_at=t.created_at,
        cashier_name=t.cashier_name,
        customer_name=t.customer_name,
        items=[
            TransactionItemOut(
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                unit_price=_amount(it.unit_price),
                subtotal=_amount(it.subtotal),
                discount=_amount(it.discount),
            )
            for it in t.items
        ],
    )


# ---- app factory -----------------------------------------------------------


def create_app(
    terminal: PosTerminal,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        if on_shutdown is not None:
            await on_shutdown()

    app = FastAPI(title="pos_terminal", lifespan=lifespan)

    # --- exception handlers -------------------------------------------------

    @app.exception_handler(PosError)
    async def handle_domain_error(_: Request, exc: PosError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    async def require_session() -> PosTerminal:
        session = terminal.session
        if session.expired:
            raise SessionExpired("session expired, please sign in again")
        if not session.is_authenticated:
            raise NotAuthenticated("no cashier is signed in")
        return terminal

    def cart_response() -> CartResponse:
        view = terminal.cart.view()
        return CartResponse(
            lines=[
                CartLineOut(
                    product_id=ln.product_id,
                    name=ln.name,
                    unit_price=_amount(ln.unit_price),
                    quantity=ln.quantity,
                    discount=_amount(ln.discount),
                    subtotal=_amount(ln.subtotal),
                )
                for ln in view.lines
            ],
            item_count=view.item_count,
            subtotal=_amount(view.subtotal),
            tax=_amount(view.tax),
            total=_amount(view.total),
            tax_rate=view.tax_rate,
            currency=view.total.currency,
        )

    def checkout_response() -> CheckoutResponse:
        view = terminal.checkout.view()
        sel = view.selection
        preview = view.change_preview
        return CheckoutResponse(
            state=view.state.value,
            payment_method=sel.method.value if sel is not None else None,
            amount_tendered=sel.amount_tendered if sel is not None else None,
            total=_amount(view.total),
            change_preview=str(preview.amount) if preview is not None else None,
            in_flight=view.in_flight,
            currency=view.total.currency,
        )

    # --- routes: session ----------------------------------------------------

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/session/login", response_model=SessionResponse, responses=_ERROR_RESPONSES)
    async def login(req: LoginRequest) -> Any:
        result = await terminal.login(Credentials(req.username, req.password))
        if isinstance(result, Success):
            return session_response()
        raise result.failure()

    @app.post("/session/logout", response_model=SessionResponse, responses=_ERROR_RESPONSES)
    async def logout() -> Any:
        result = terminal.logout()
        if isinstance(result, Success):
            return session_response()
        raise result.failure()

    @app.get("/session", response_model=SessionResponse)
    async def get_session() -> Any:
        return session_response()

    def session_response() -> SessionResponse:
        s = terminal.session
        return SessionResponse(
            authenticated=s.is_authenticated,
            expired=s.expired,
            display_name=s.display_name,
            username=s.user.username if s.user else None,
            role=s.user.role.value if s.user else None,
        )

    # --- routes: catalog ----------------------------------------------------

    @app.get("/products", response_model=ProductListResponse, responses=_ERROR_RESPONSES)
    async def list_products(
        query: str = Query("", max_length=200),
        t: PosTerminal = Depends(require_session),
    ) -> Any:
        result = await t.catalog.search(query)
        if isinstance(result, Success):
            return ProductListResponse(
                query=t.catalog.query, items=[_product_out(p) for p in result.unwrap()]
            )
        raise result.failure()

    @app.get("/categories", response_model=list[CategoryOut], responses=_ERROR_RESPONSES)
    async def list_categories(t: PosTerminal = Depends(require_session)) -> Any:
        result = await t.catalog.categories()
        if isinstance(result, Success):
            return [
                CategoryOut(id=c.category_id, name=c.name, description=c.description)
                for c in result.unwrap()
            ]
        raise result.failure()

    @app.post("/products/scan", response_model=CartResponse, responses=_ERROR_RESPONSES)
    async def scan(req: ScanRequest, t: PosTerminal = Depends(require_session)) -> Any:
        result = await t.scan(req.barcode)
        if isinstance(result, Success):
            return cart_response()
        raise result.failure()

    # --- routes: cart -------------------------------------------------------

    @app.get("/cart", response_model=CartResponse, responses=_ERROR_RESPONSES)
    async def get_cart(_: PosTerminal = Depends(require_session)) -> Any:
        return cart_response()

    @app.post(
        "/cart/items", response_model=CartResponse, status_code=201, responses=_ERROR_RESPONSES
    )
    async def add_item(req: AddItemRequest, t: PosTerminal = Depends(require_session)) -> Any:
        result = t.add_to_cart(ProductId(req.product_id))
        if isinstance(result, Success):
            return cart_response()
        raise result.failure()

    @app.put("/cart/items/{product_id}", response_model=CartResponse, responses=_ERROR_RESPONSES)
    async def set_quantity(
        product_id: int, req: QuantityRequest, t: PosTerminal = Depends(require_session)
    ) -> Any:
        result = t.set_quantity(ProductId(product_id), req.quantity)
        if isinstance(result, Success):
            return cart_response()
        raise result.failure()

    @app.delete(
        "/cart/items/{product_id}", response_model=CartResponse, responses=_ERROR_RESPONSES
    )
    async def remove_item(product_id: int, t: PosTerminal = Depends(require_session)) -> Any:
        result = t.remove_item(ProductId(product_id))
        if isinstance(result, Success):
            return cart_response()
        raise result.failure()

    @app.delete("/cart", response_model=CartResponse, responses=_ERROR_RESPONSES)
    async def clear_cart(t: PosTerminal = Depends(require_session)) -> Any:
        result = t.clear_cart()
        if isinstance(result, Success):
            return cart_response()
        raise result.failure()

    # --- routes: checkout ---------------------------------------------------

    @app.post("/checkout", response_model=CheckoutResponse, responses=_ERROR_RESPONSES)
    async def begin_checkout(t: PosTerminal = Depends(require_session)) -> Any:
        result = t.checkout.begin_checkout()
        if isinstance(result, Success):
            return checkout_response()
        raise result.failure()

    @app.get("/checkout", response_model=CheckoutResponse, responses=_ERROR_RESPONSES)
    async def get_checkout(_: PosTerminal = Depends(require_session)) -> Any:
        return checkout_response()

    @app.put("/checkout/payment", response_model=CheckoutResponse, responses=_ERROR_RESPONSES)
    async def update_payment(req: PaymentRequest, t: PosTerminal = Depends(require_session)) -> Any:
        if req.method is not None:
            result = t.checkout.select_method(req.method)
            if not isinstance(result, Success):
                raise result.failure()
        if req.amount_tendered is not None:
            result = t.checkout.enter_tender(req.amount_tendered)
            if not isinstance(result, Success):
                raise result.failure()
        return checkout_response()

    @app.post(
        "/checkout/confirm", response_model=SettlementResponse, responses=_ERROR_RESPONSES
    )
    async def confirm(t: PosTerminal = Depends(require_session)) -> Any:
        result = await t.confirm_payment()
        if isinstance(result, Success):
            return _settlement_out(result.unwrap())
        raise result.failure()

    @app.post("/checkout/cancel", response_model=CheckoutResponse, responses=_ERROR_RESPONSES)
    async def cancel(t: PosTerminal = Depends(require_session)) -> Any:
        result = t.checkout.cancel()
        if isinstance(result, Success):
            return checkout_response()
        raise result.failure()

    # --- routes: history ----------------------------------------------------

    @app.get("/transactions", response_model=TransactionListResponse, responses=_ERROR_RESPONSES)
    async def list_transactions(
        offset: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        t: PosTerminal = Depends(require_session),
    ) -> Any:
        result = await t.history.recent(ListTransactionsQuery(offset=offset, limit=limit))
        if isinstance(result, Success):
            return TransactionListResponse(
                offset=offset,
                limit=limit,
                items=[_transaction_out(x) for x in result.unwrap()],
            )
        raise result.failure()

    @app.get(
        "/transactions/{transaction_id}",
        response_model=TransactionOut,
        responses=_ERROR_RESPONSES,
    )
    async def get_transaction(
        transaction_id: int, t: PosTerminal = Depends(require_session)
    ) -> Any:
        result = await t.history.get(transaction_id)
        if isinstance(result, Success):
            return _transaction_out(result.unwrap())
        raise result.failure()

    return app
