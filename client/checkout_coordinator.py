"""Turns the cart into an expenditure"""

import logging
from datetime import date, time
from typing import Callable, Optional

from client.api_client import build_request
from client.budget_ledger import BudgetLedger
from client.budget_projector import BudgetProjection, BudgetProjector
from client.cart_manager import CartManager
from client.errors import ClientError, ErrorKind
from domain.enums import MealType
from domain.schemas.cart_schemas import CheckoutRequest, CheckoutResponse

logger = logging.getLogger("mealbudget.client.checkout")


class CheckoutCoordinator:
    """
    Runs a checkout as one request. Failures leave the local cart as it was and
    are never retried automatically.
    """

    def __init__(
        self,
        cart: CartManager,
        ledger: BudgetLedger,
        clock: Callable[[], date] = date.today,
    ):
        self.cart = cart
        self.ledger = ledger
        self.clock = clock

    async def preview(
        self, meal_type: MealType, on_date: Optional[date] = None
    ) -> Optional[BudgetProjection]:
        """
        Budget left after buying the current cart. The snapshot is fetched
        fresh so changes made from another session are seen.
        """
        snapshot = await self.ledger.get_daily_budget(on_date or self.clock(), refresh=True)
        return BudgetProjector.project(self.cart.total_amount, snapshot, meal_type)

    async def checkout(
        self,
        meal_type: MealType,
        occurred_date: date,
        occurred_time: time,
        discount: int = 0,
        memo: Optional[str] = None,
    ) -> CheckoutResponse:
        """
        Check out the cart.

        Raises:
            CartBusyError: a conflict or another checkout is in progress
            ClientError: EMPTY_CART for an empty cart; VALIDATION for a missing
                or future date, missing time or negative discount; any server
                error unchanged
        """
        if self.cart.cart.is_empty:
            raise ClientError(ErrorKind.EMPTY_CART, "Your cart is empty", code="EMPTY_CART")
        if occurred_date is None or occurred_time is None:
            raise ClientError(ErrorKind.VALIDATION, "Date and time of the meal are required")
        if occurred_date > self.clock():
            raise ClientError(ErrorKind.VALIDATION, "The meal date cannot be in the future")
        if discount < 0:
            raise ClientError(ErrorKind.VALIDATION, "Discount cannot be negative")

        request = build_request(
            CheckoutRequest,
            meal_type=meal_type,
            occurred_date=occurred_date,
            occurred_time=occurred_time,
            discount=discount,
            memo=memo,
        )

        async with self.cart.checking_out():
            data = await self.cart.api.post(
                "/cart/checkout", json=request.model_dump(mode="json")
            )
            result = CheckoutResponse.model_validate(data)
            self.cart.mark_checked_out()

        self.ledger.invalidate(occurred_date)
        logger.info(
            "Checked out %s: %s for %s on %s",
            result.expenditure_id,
            result.final_amount,
            meal_type.value,
            occurred_date,
        )
        return result
