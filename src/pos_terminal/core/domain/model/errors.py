from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class PosError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class ValidationError(PosError):
    pass


# ---- checkout preconditions ------------------------------------------------


@dataclass(eq=False)
class EmptyCart(PosError):
    pass


@dataclass(eq=False)
class InsufficientTender(PosError):
    tendered: str
    total: str

    def __str__(self) -> str:
        return f"{self.message} (tendered={self.tendered}, total={self.total})"


@dataclass(eq=False)
class CheckoutNotActive(PosError):
    pass


@dataclass(eq=False)
class SubmissionInFlight(PosError):
    pass


# ---- collaborator failures -------------------------------------------------


@dataclass(eq=False)
class ProductNotFound(PosError):
    lookup: str


@dataclass(eq=False)
class TransactionNotFound(PosError):
    transaction_id: int


@dataclass(eq=False)
class BackendError(PosError):
    status_code: int | None = None


@dataclass(eq=False)
class SubmissionFailed(BackendError):
    pass


@dataclass(eq=False)
class BackendUnavailable(PosError):
    pass


@dataclass(eq=False)
class NotAuthenticated(PosError):
    pass


@dataclass(eq=False)
class SessionExpired(NotAuthenticated):
    pass
