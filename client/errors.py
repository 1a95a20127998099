from enum import Enum
from typing import Any, Mapping, Optional


class ErrorKind(str, Enum):
    """How the caller should react to a failed operation"""

    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT = "TRANSIENT"
    AUTH_EXPIRED = "AUTH_EXPIRED"
    EMPTY_CART = "EMPTY_CART"


class ClientError(Exception):
    """Base class for errors raised by the client core.

    Attributes:
        kind: error taxonomy entry driving the UI reaction
        message: server envelope message when there was one, a local fallback otherwise
        code: envelope error code (or a local code such as CART_BUSY)
        details: envelope error data
        status_code: HTTP status when the error came from a response
    """

    default_kind = ErrorKind.VALIDATION
    default_message = "Request failed"

    def __init__(
        self,
        kind: Optional[ErrorKind] = None,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.kind = kind or self.default_kind
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.kind.value
        self.details = dict(details) if details else {}
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT

    def __str__(self) -> str:
        return self.message


class CartConflictError(ClientError):
    """The cart holds another merchant's food.

    terminal is set when the server still reported a conflict after a replace;
    such an error is final and must not be retried.
    """

    default_kind = ErrorKind.CONFLICT
    default_message = "Your cart has items from another merchant"

    def __init__(
        self,
        message: Optional[str] = None,
        current_merchant_name: Optional[str] = None,
        requested_merchant_name: Optional[str] = None,
        terminal: bool = False,
        details: Optional[Mapping[str, Any]] = None,
        status_code: Optional[int] = 409,
    ):
        super().__init__(
            ErrorKind.CONFLICT,
            message,
            code="CONFLICT",
            details=details,
            status_code=status_code,
        )
        self.current_merchant_name = current_merchant_name
        self.requested_merchant_name = requested_merchant_name
        self.terminal = terminal

    @classmethod
    def from_error(cls, error: ClientError, terminal: bool = False) -> "CartConflictError":
        details = error.details or {}
        return cls(
            message=error.message,
            current_merchant_name=details.get("current_merchant_name"),
            requested_merchant_name=details.get("requested_merchant_name"),
            terminal=terminal,
            details=details,
            status_code=error.status_code,
        )


class CartBusyError(ClientError):
    """A mutation was attempted while the cart is resolving a conflict or checking out"""

    default_message = "The cart is busy; finish the pending action first"

    def __init__(self, message: Optional[str] = None):
        super().__init__(ErrorKind.VALIDATION, message, code="CART_BUSY")
