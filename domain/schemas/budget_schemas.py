from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import date

from domain.enums import MealType


def _check_meal_amounts(value: Dict[MealType, int]) -> Dict[MealType, int]:
    for meal_type, amount in value.items():
        if amount < 0:
            raise ValueError(f"{meal_type.value} budget must be >= 0")
    return value


# ============================================================================
# Requests
# ============================================================================


class MonthlyBudgetUpsertRequest(BaseModel):
    """Create or update the budget profile of a month (defaults to the current month)"""

    year: Optional[int] = Field(None, ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12)
    monthly_total: int = Field(..., ge=0)
    daily_total: Optional[int] = Field(
        None, ge=0, description="Explicit override; defaults to floor(monthly_total / 30)"
    )


class MealBudgetsRequest(BaseModel):
    """Per-meal defaults of a month's budget profile"""

    year: Optional[int] = Field(None, ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12)
    meal_budgets: Dict[MealType, int]

    @field_validator("meal_budgets")
    @classmethod
    def validate_meal_budgets(cls, v):
        return _check_meal_amounts(v)


class DailyBudgetUpdateRequest(BaseModel):
    daily_total: int = Field(..., ge=0)
    apply_forward: bool = Field(
        default=False,
        description="Also update later days of the month and the month's daily default",
    )


class DailyBudgetBulkRequest(BaseModel):
    """Upsert the same daily budget over an inclusive date range"""

    start_date: date
    end_date: date
    daily_total: int = Field(..., ge=0)
    meal_budgets: Dict[MealType, int] = Field(default_factory=dict)

    @field_validator("meal_budgets")
    @classmethod
    def validate_meal_budgets(cls, v):
        return _check_meal_amounts(v)


# ============================================================================
# Responses
# ============================================================================


class MealBudgetResponse(BaseModel):
    meal_type: MealType
    budget: int
    spent: int
    remaining: int

    model_config = {"from_attributes": True}


class DailyBudgetResponse(BaseModel):
    """Snapshot of one date: allocation, consumption and what is left"""

    budget_date: date
    daily_total: int
    total_spent: int
    remaining_budget: int
    meal_budgets: List[MealBudgetResponse]

    def meal(self, meal_type: MealType) -> Optional[MealBudgetResponse]:
        return next((m for m in self.meal_budgets if m.meal_type == meal_type), None)


class MonthlyBudgetResponse(BaseModel):
    year: int
    month: int
    monthly_total: int
    daily_total: int
    total_spent: int
    remaining_budget: int
    utilization_rate: float
    days_remaining: int
    meal_budgets: Dict[MealType, int]


class DailyBudgetUpdateResponse(BaseModel):
    target_date: date
    daily_total: int
    affected_dates_count: int


class DailyBudgetBulkResponse(BaseModel):
    start_date: date
    end_date: date
    daily_budget_count: int
    created_count: int
    updated_count: int
