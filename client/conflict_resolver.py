"""Decision gate for adding food from a second merchant"""

from client.errors import CartBusyError, CartConflictError
from domain.schemas.cart_schemas import CartResponse


class ConflictResolver:
    """
    Offers exactly two ways out of a cart conflict: cancel (nothing is sent)
    or replace (the cart is cleared and the new food added). A resolver works
    once.
    """

    def __init__(self, manager, conflict: CartConflictError):
        self._manager = manager
        self.conflict = conflict
        self._resolved = False

    @property
    def current_merchant_name(self) -> str:
        return self.conflict.current_merchant_name or "another merchant"

    @property
    def requested_merchant_name(self) -> str:
        return self.conflict.requested_merchant_name or "this merchant"

    @property
    def message(self) -> str:
        return (
            f"Your cart already has items from {self.current_merchant_name}. "
            f"Clear the cart and add from {self.requested_merchant_name} instead?"
        )

    @property
    def resolved(self) -> bool:
        return self._resolved

    def cancel(self) -> None:
        """Keep the current cart; no request is sent"""
        self._claim()
        self._manager.dismiss_conflict()

    async def replace(self) -> CartResponse:
        """Clear the cart and add the requested food in one server transaction"""
        self._claim()
        return await self._manager.replace_with_pending()

    def _claim(self) -> None:
        if self._resolved:
            raise CartBusyError("This cart conflict has already been resolved")
        self._resolved = True
