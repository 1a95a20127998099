from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, conflicting ids)
        code: machine-readable error code placed in the response envelope
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Service error"
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["data"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Checkout uses code EMPTY_CART when there is nothing to check out.
    """

    http_status = 400
    default_message = "Invalid input"
    default_code = "VALIDATION"


class NotFoundError(ServiceError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Raised when a write would break an invariant of existing state.

    For the cart this is the single-merchant rule; details carry the current
    and requested merchant so the client can prompt the user.
    """

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class UnauthorizedError(ServiceError):
    """Raised when the bearer token is missing, unknown or expired."""

    http_status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"
