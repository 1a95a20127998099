"""Pre-purchase "remaining after this cart" figures"""

from typing import Optional
from pydantic import BaseModel

from domain.enums import MealType
from domain.schemas.budget_schemas import DailyBudgetResponse


class BudgetProjection(BaseModel):
    meal_type: MealType
    cart_total: int
    remaining_daily_after: int
    remaining_meal_after: int
    is_over_budget: bool


class BudgetProjector:
    """Stateless; the projection is advisory and never blocks a checkout."""

    @staticmethod
    def project(
        cart_total: int,
        daily_snapshot: Optional[DailyBudgetResponse],
        meal_type: MealType,
    ) -> Optional[BudgetProjection]:
        """
        Project the budget left after buying the cart.

        Returns None when the date has no snapshot: no budget is set, so there
        is nothing to warn about. A snapshot without a bucket for meal_type
        counts that bucket as zero.
        """
        if daily_snapshot is None:
            return None

        bucket = daily_snapshot.meal(meal_type)
        meal_remaining = bucket.remaining if bucket is not None else 0
        remaining_daily_after = daily_snapshot.remaining_budget - cart_total
        remaining_meal_after = meal_remaining - cart_total
        return BudgetProjection(
            meal_type=meal_type,
            cart_total=cart_total,
            remaining_daily_after=remaining_daily_after,
            remaining_meal_after=remaining_meal_after,
            is_over_budget=remaining_daily_after < 0 or remaining_meal_after < 0,
        )
