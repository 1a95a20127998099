"""
Budget domain mappers.
"""

import calendar
from datetime import date
from typing import Optional

from domain.enums import MealType
from domain.models import DailyBudget, MonthlyBudget
from domain.schemas.budget_schemas import (
    DailyBudgetResponse,
    MealBudgetResponse,
    MonthlyBudgetResponse,
)


class BudgetMapper:
    """Mapper for budget ledger transformations."""

    @staticmethod
    def daily_to_response(snapshot: DailyBudget) -> DailyBudgetResponse:
        # Fixed meal order keeps responses stable regardless of insert order
        order = list(MealType)
        buckets = sorted(snapshot.meal_budgets, key=lambda b: order.index(b.meal_type))
        return DailyBudgetResponse(
            budget_date=snapshot.budget_date,
            daily_total=snapshot.daily_total,
            total_spent=snapshot.total_spent,
            remaining_budget=snapshot.remaining_budget,
            meal_budgets=[
                MealBudgetResponse(
                    meal_type=b.meal_type,
                    budget=b.budget,
                    spent=b.spent,
                    remaining=b.remaining,
                )
                for b in buckets
            ],
        )

    @staticmethod
    def monthly_to_response(
        profile: MonthlyBudget, today: Optional[date] = None
    ) -> MonthlyBudgetResponse:
        """
        Convert a MonthlyBudget profile to its response.

        days_remaining counts today; it is the whole month for a future month
        and 0 for a past one.
        """
        today = today or date.today()
        days_in_month = calendar.monthrange(profile.year, profile.month)[1]
        if (profile.year, profile.month) < (today.year, today.month):
            days_remaining = 0
        elif (profile.year, profile.month) > (today.year, today.month):
            days_remaining = days_in_month
        else:
            days_remaining = days_in_month - today.day + 1

        utilization = (
            round(profile.total_spent / profile.monthly_total * 100, 2)
            if profile.monthly_total
            else 0.0
        )
        meal_defaults = {m: 0 for m in MealType}
        for default in profile.meal_defaults:
            meal_defaults[default.meal_type] = default.budget

        return MonthlyBudgetResponse(
            year=profile.year,
            month=profile.month,
            monthly_total=profile.monthly_total,
            daily_total=profile.daily_total,
            total_spent=profile.total_spent,
            remaining_budget=profile.monthly_total - profile.total_spent,
            utilization_rate=utilization,
            days_remaining=days_remaining,
            meal_budgets=meal_defaults,
        )
