"""
HTTP transport of the client core.
Unwraps the response envelope and turns failures into ClientError kinds.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.config import settings
from client.errors import ClientError, ErrorKind
from client.session import SessionTokens

logger = logging.getLogger("mealbudget.client.api")

RequestModel = TypeVar("RequestModel", bound=BaseModel)

_FALLBACK_MESSAGES = {
    ErrorKind.VALIDATION: "The request was not accepted",
    ErrorKind.CONFLICT: "The request conflicts with the current state",
    ErrorKind.NOT_FOUND: "The requested item no longer exists",
    ErrorKind.TRANSIENT: "The server is unavailable, please try again",
    ErrorKind.AUTH_EXPIRED: "Your session has expired, please sign in again",
    ErrorKind.EMPTY_CART: "Your cart is empty",
}


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ClientError) and exc.kind == ErrorKind.TRANSIENT


def kind_for_status(status_code: int, code: Optional[str] = None) -> ErrorKind:
    """Map an HTTP status (and envelope code) to the client error taxonomy"""
    if code == "EMPTY_CART":
        return ErrorKind.EMPTY_CART
    if status_code == 401:
        return ErrorKind.AUTH_EXPIRED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code in (408, 429) or status_code >= 500:
        return ErrorKind.TRANSIENT
    return ErrorKind.VALIDATION


def error_from_response(response: httpx.Response) -> ClientError:
    """Build a ClientError, preferring the server's envelope message"""
    try:
        body = response.json()
    except ValueError:
        body = None

    error = body.get("error") if isinstance(body, dict) else None
    error = error if isinstance(error, dict) else {}
    code = error.get("code")
    kind = kind_for_status(response.status_code, code)
    return ClientError(
        kind,
        error.get("message") or _FALLBACK_MESSAGES[kind],
        code=code,
        details=error.get("data") if isinstance(error.get("data"), dict) else None,
        status_code=response.status_code,
    )


class ApiClient:
    """
    Async client for the MealBudget API.

    Only GETs are retried, and only on TRANSIENT errors. A 401 triggers one
    token refresh and a replay; if that fails too the session is logged out and
    AUTH_EXPIRED is raised.
    """

    def __init__(
        self,
        session: SessionTokens,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        get_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        api_prefix: Optional[str] = None,
    ):
        self.session = session
        self.api_prefix = settings.api_prefix if api_prefix is None else api_prefix
        self.get_attempts = get_attempts or settings.client_get_attempts
        self.retry_backoff = (
            settings.client_retry_backoff_sec if retry_backoff is None else retry_backoff
        )
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.client_timeout_sec,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def url(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.get_attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        return await retrying(self._request, "GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self._request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self._request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        token = self.session.access_token
        response = await self._send(method, path, params, json)

        if response.status_code == 401:
            refreshed = await self.session.refresh(
                self._http, self.url("/auth/refresh"), token
            )
            if refreshed:
                response = await self._send(method, path, params, json)
            if not refreshed or response.status_code == 401:
                self.session.logout()
                raise ClientError(
                    ErrorKind.AUTH_EXPIRED,
                    _FALLBACK_MESSAGES[ErrorKind.AUTH_EXPIRED],
                    code="UNAUTHORIZED",
                    status_code=401,
                )

        return self._unwrap(response)

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]],
        json: Any,
    ) -> httpx.Response:
        try:
            return await self._http.request(
                method,
                self.url(path),
                params=params,
                json=json,
                headers=self.session.authorization_header(),
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out: %s", method, path, exc)
            raise ClientError(
                ErrorKind.TRANSIENT, "The request timed out, please try again"
            ) from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ClientError(
                ErrorKind.TRANSIENT, _FALLBACK_MESSAGES[ErrorKind.TRANSIENT]
            ) from exc

    def _unwrap(self, response: httpx.Response) -> Any:
        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                return None
            if isinstance(body, dict) and "result" in body:
                if body["result"] != "SUCCESS":
                    raise error_from_response(response)
                return body.get("data")
            return body

        error = error_from_response(response)
        logger.info(
            "%s %s -> %s %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
            error.code,
        )
        raise error


def build_request(model: Type[RequestModel], **fields) -> RequestModel:
    """Validate a request body locally, raising VALIDATION before any I/O"""
    try:
        return model(**fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first['msg']}" if location else first["msg"]
        raise ClientError(ErrorKind.VALIDATION, message) from exc
