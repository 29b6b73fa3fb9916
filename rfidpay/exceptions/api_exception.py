"""API exception module.

Every error carries an explicit ErrorKind so callers branch on the tag,
never on the message text.
"""
import enum

from fastapi import HTTPException, status


class ErrorKind(str, enum.Enum):
    CLIENT_INPUT = "client_input_error"
    INVALID_RFID_UID = "invalid_rfid_uid"
    AUTH = "auth_error"
    NOT_FOUND = "not_found"
    USER_NOT_FOUND = "user_not_found"
    NO_PENDING_WORK = "no_pending_work"
    PRODUCT_NOT_FOUND = "product_not_found"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INFRASTRUCTURE = "infrastructure_failure"
    SETTLEMENT_CONFLICT = "settlement_conflict"


class APIException(HTTPException):
    """Base API exception class."""

    kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        kind: ErrorKind | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        if kind is not None:
            self.kind = kind


class ClientInputError(APIException):
    """Missing or malformed request data."""

    kind = ErrorKind.CLIENT_INPUT

    def __init__(self, detail: str = "Bad request", kind: ErrorKind | None = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, kind=kind)


class AuthError(APIException):
    """Shared hardware key missing or wrong."""

    kind = ErrorKind.AUTH

    def __init__(self, detail: str = "Invalid API key"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(APIException):
    """Resource not found exception."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UserNotFoundError(NotFoundError):
    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, detail: str = "User not found"):
        super().__init__(detail=detail)


class NoPendingWorkError(NotFoundError):
    kind = ErrorKind.NO_PENDING_WORK

    def __init__(self, detail: str = "No pending transactions"):
        super().__init__(detail=detail)


class ProductNotFoundError(NotFoundError):
    kind = ErrorKind.PRODUCT_NOT_FOUND

    def __init__(self, detail: str = "Product not found"):
        super().__init__(detail=detail)


class InsufficientBalanceError(APIException):
    """Balance does not cover the pending total."""

    kind = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, detail: str = "Insufficient balance"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InfrastructureFailure(APIException):
    """Store unreachable or conflicts exceeded the retry budget."""

    kind = ErrorKind.INFRASTRUCTURE

    def __init__(self, detail: str = "Server error", kind: ErrorKind | None = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail, kind=kind
        )
