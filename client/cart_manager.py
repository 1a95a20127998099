"""Client mirror of the server cart"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Dict, Optional
from uuid import UUID

from client.api_client import ApiClient, build_request
from client.conflict_resolver import ConflictResolver
from client.errors import CartBusyError, CartConflictError, ClientError, ErrorKind
from domain.enums import MIN_CART_QUANTITY, MAX_CART_QUANTITY
from domain.schemas.cart_schemas import AddCartItemRequest, CartResponse

logger = logging.getLogger("mealbudget.client.cart")


class CartState(str, Enum):
    EMPTY = "EMPTY"
    POPULATED = "POPULATED"
    CONFLICT_PENDING = "CONFLICT_PENDING"
    CHECKING_OUT = "CHECKING_OUT"


class PendingConflict:
    """An add that was rejected because the cart belongs to another merchant"""

    def __init__(self, error: CartConflictError, request: AddCartItemRequest):
        self.error = error
        self.request = request


class CartManager:
    """
    Keeps a local copy of the cart and sends every change to the server.

    The server is the only source of truth: after each successful write the
    whole cart is fetched again and replaces the local copy. Fetches carry a
    sequence number and a response older than the last applied one is dropped.
    Writes on the same cart line run one at a time, in the order issued.

    EMPTY and POPULATED are the idle states. CONFLICT_PENDING and CHECKING_OUT
    must resolve before any other change is accepted (CartBusyError).
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.cart = CartResponse()
        self.pending_conflict: Optional[PendingConflict] = None
        self._checking_out = False
        self._item_locks: Dict[UUID, asyncio.Lock] = {}
        self._lock_users: Dict[UUID, int] = {}
        self._fetch_seq = 0
        self._applied_seq = 0

    @property
    def state(self) -> CartState:
        if self._checking_out:
            return CartState.CHECKING_OUT
        if self.pending_conflict is not None:
            return CartState.CONFLICT_PENDING
        return CartState.EMPTY if self.cart.is_empty else CartState.POPULATED

    @property
    def total_amount(self) -> int:
        return self.cart.total_amount

    def is_item_busy(self, cart_item_id: UUID) -> bool:
        lock = self._item_locks.get(cart_item_id)
        return lock is not None and lock.locked()

    async def refresh(self) -> CartResponse:
        """Fetch the server cart; applied only if no newer fetch has landed meanwhile"""
        self._fetch_seq += 1
        seq = self._fetch_seq
        data = await self.api.get("/cart")
        cart = CartResponse.model_validate(data)
        if seq > self._applied_seq:
            self._applied_seq = seq
            self.cart = cart
        else:
            logger.debug("Dropping stale cart fetch #%d (applied #%d)", seq, self._applied_seq)
        return self.cart

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_item(
        self,
        merchant_id: UUID,
        food_id: UUID,
        quantity: int = 1,
        replace_cart: bool = False,
    ) -> CartResponse:
        """
        Add a food to the cart.

        Raises:
            CartConflictError: the cart holds another merchant's food; the
                manager enters CONFLICT_PENDING until a ConflictResolver
                cancels or replaces
            CartBusyError: a conflict or checkout is in progress
        """
        self._ensure_idle()
        request = build_request(
            AddCartItemRequest,
            merchant_id=merchant_id,
            food_id=food_id,
            quantity=quantity,
            replace_cart=replace_cart,
        )
        try:
            await self.api.post("/cart/items", json=request.model_dump(mode="json"))
        except ClientError as exc:
            if exc.kind != ErrorKind.CONFLICT:
                raise
            conflict = CartConflictError.from_error(exc)
            self.pending_conflict = PendingConflict(conflict, request)
            logger.info(
                "Cart conflict: %s vs %s",
                conflict.current_merchant_name,
                conflict.requested_merchant_name,
            )
            raise conflict
        return await self.refresh()

    async def set_quantity(self, cart_item_id: UUID, quantity: int) -> CartResponse:
        """Set a line's quantity; below 1 removes the line"""
        self._ensure_idle()
        if quantity > MAX_CART_QUANTITY:
            raise ClientError(
                ErrorKind.VALIDATION, f"Quantity cannot exceed {MAX_CART_QUANTITY}"
            )
        if quantity < MIN_CART_QUANTITY:
            return await self.remove_item(cart_item_id)

        async with self._item_guard(cart_item_id):
            # A checkout or conflict may have started while this write was queued
            self._ensure_idle()
            return await self._write_item(
                "PUT", cart_item_id, json={"quantity": quantity}
            )

    async def remove_item(self, cart_item_id: UUID) -> CartResponse:
        self._ensure_idle()
        async with self._item_guard(cart_item_id):
            self._ensure_idle()
            return await self._write_item("DELETE", cart_item_id)

    async def clear(self) -> CartResponse:
        """Empty the cart; a no-op when it is already empty"""
        self._ensure_idle()
        if self.cart.is_empty:
            return self.cart
        await self.api.delete("/cart")
        return await self.refresh()

    # ------------------------------------------------------------------
    # Conflict and checkout hooks
    # ------------------------------------------------------------------

    def conflict_resolver(self) -> ConflictResolver:
        """Decision gate for the pending conflict"""
        if self.pending_conflict is None:
            raise ClientError(ErrorKind.VALIDATION, "There is no cart conflict to resolve")
        return ConflictResolver(self, self.pending_conflict.error)

    def dismiss_conflict(self) -> None:
        self.pending_conflict = None

    async def replace_with_pending(self) -> CartResponse:
        """
        Repeat the rejected add with replace_cart set. Another CONFLICT at this
        point is final: the cart is refetched and the error is raised as terminal.
        """
        pending = self.pending_conflict
        if pending is None:
            raise ClientError(ErrorKind.VALIDATION, "There is no cart conflict to resolve")

        request = pending.request.model_copy(update={"replace_cart": True})
        try:
            await self.api.post("/cart/items", json=request.model_dump(mode="json"))
        except ClientError as exc:
            self.pending_conflict = None
            if exc.kind != ErrorKind.CONFLICT:
                raise
            logger.warning("Cart conflict persisted after replace")
            await self._reconcile()
            raise CartConflictError.from_error(exc, terminal=True) from exc
        self.pending_conflict = None
        return await self.refresh()

    @asynccontextmanager
    async def checking_out(self):
        """
        Hold the CHECKING_OUT state for the duration of the block.

        Refused while any line write is in flight or queued, so no quantity
        change can reach the server alongside the checkout.
        """
        self._ensure_idle()
        if self._lock_users:
            raise CartBusyError("A cart change is still being saved")
        self._checking_out = True
        try:
            yield self
        finally:
            self._checking_out = False

    def mark_checked_out(self) -> None:
        """The server emptied the cart; drop the local copy and any fetch in flight"""
        self.cart = CartResponse()
        self._applied_seq = self._fetch_seq

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_idle(self) -> None:
        if self.state in (CartState.CONFLICT_PENDING, CartState.CHECKING_OUT):
            raise CartBusyError(f"Cart is {self.state.value.lower().replace('_', ' ')}")

    @asynccontextmanager
    async def _item_guard(self, cart_item_id: UUID):
        """
        Serialize writes on one line. The lock entry lives only while some
        write holds or waits for it, so removed lines leave nothing behind.
        """
        lock = self._item_locks.get(cart_item_id)
        if lock is None:
            lock = self._item_locks[cart_item_id] = asyncio.Lock()
        self._lock_users[cart_item_id] = self._lock_users.get(cart_item_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[cart_item_id] -= 1
            if not self._lock_users[cart_item_id]:
                del self._lock_users[cart_item_id]
                del self._item_locks[cart_item_id]

    async def _write_item(self, method: str, cart_item_id: UUID, json=None) -> CartResponse:
        path = f"/cart/items/{cart_item_id}"
        try:
            if method == "PUT":
                await self.api.put(path, json=json)
            else:
                await self.api.delete(path)
        except ClientError as exc:
            if exc.kind != ErrorKind.NOT_FOUND:
                raise
            # Line is gone on the server; adopt the server cart instead of failing
            logger.info("Cart item %s no longer exists, refetching", cart_item_id)
        return await self.refresh()

    async def _reconcile(self) -> None:
        try:
            await self.refresh()
        except ClientError as exc:
            logger.warning("Could not refetch cart after conflict: %s", exc)
