"""
Consolidated middleware for the MealBudget API
"""

import time
import logging
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from api.responses import error_response
from app.exceptions import ServiceError

logger = logging.getLogger("mealbudget.middleware")

# HTTP status -> envelope code for errors raised outside the service layer
_HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    409: "CONFLICT",
}


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, tagged with a request id.

    A caller-supplied X-Request-ID is kept so client and server logs of one
    checkout can be matched; otherwise a fresh id is generated.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.error(
                "[%s] %s %s failed after %.1fms",
                request_id,
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                exc_info=True,
            )
            raise

        elapsed = time.perf_counter() - started
        logger.info(
            "[%s] %s %s -> %d in %.1fms",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed * 1000,
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(
        "Validation error on %s %s: %d field(s)",
        request.method,
        request.url.path,
        len(exc.errors()),
    )

    return JSONResponse(
        status_code=422,
        content=error_response(
            "VALIDATION", "Request validation failed", {"errors": exc.errors()}
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(
        "HTTP %s on %s %s: %s", exc.status_code, request.method, request.url.path, exc.detail
    )

    if exc.status_code >= 500:
        code = "INTERNAL_SERVER_ERROR"
    else:
        code = _HTTP_ERROR_CODES.get(exc.status_code, "VALIDATION")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def service_exception_handler(request: Request, exc: ServiceError):
    """Handle every service-layer error; status and code come from the exception class"""
    logger.warning(f"{type(exc).__name__} on {request.url}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_response(exc.code, exc.message, exc.details),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
