"""
MealBudget FastAPI Application
Wires settings, logging, middleware, error handlers and the area routers
"""

import logging
from contextlib import asynccontextmanager

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from api.middleware import (
    RequestLoggingMiddleware,
    general_exception_handler,
    http_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from api.routes import auth, budgets, cart, expenditures, health, merchants
from app.config import settings
from app.exceptions import ServiceError
from domain.models import init_database

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("mealbudget.main")


def _log_init_failure(retry_state) -> None:
    _logger.warning(
        "Database init attempt %d/%d failed: %s",
        retry_state.attempt_number,
        settings.db_init_attempts,
        retry_state.outcome.exception(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup; the database may still be coming up"""
    _logger.info(
        "Starting %s %s (%s)",
        settings.app_name,
        settings.app_version,
        settings.environment.value,
    )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(settings.db_init_attempts),
        wait=wait_fixed(settings.db_init_delay_sec),
        before_sleep=_log_init_failure,
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                await anyio.to_thread.run_sync(init_database)
    except Exception:
        _logger.error("Database initialization gave up after %d attempts", settings.db_init_attempts)
        raise
    _logger.info("Database ready")

    try:
        yield
    finally:
        _logger.info("Shutting down %s", settings.app_name)


_docs_prefix = None if settings.is_production() else settings.api_prefix

app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=f"{_docs_prefix}/openapi.json" if _docs_prefix is not None else None,
    docs_url=f"{_docs_prefix}/docs" if _docs_prefix is not None else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(ServiceError, service_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

for area in (health, auth, merchants, cart, budgets, expenditures):
    app.include_router(area.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
