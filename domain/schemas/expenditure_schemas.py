from pydantic import BaseModel
from typing import Optional, List, Dict
from datetime import date, time, datetime
from uuid import UUID

from domain.enums import MealType


class ExpenditureItemResponse(BaseModel):
    food_id: Optional[UUID] = None
    food_name: str
    unit_price: int
    quantity: int
    line_total: int

    model_config = {"from_attributes": True}


class ExpenditureResponse(BaseModel):
    """Committed expenditure (read-only)"""

    expenditure_id: UUID
    merchant_id: Optional[UUID] = None
    merchant_name: str
    meal_type: MealType
    occurred_date: date
    occurred_time: time
    subtotal: int
    discount: int
    total_amount: int
    memo: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[ExpenditureItemResponse]

    model_config = {"from_attributes": True}


# ============================================================================
# Statistics
# ============================================================================


class MerchantSpending(BaseModel):
    merchant_id: Optional[UUID] = None
    merchant_name: str
    amount: int
    count: int


class DailySpending(BaseModel):
    spending_date: date
    amount: int


class MonthlyExpenditureStats(BaseModel):
    """Spending of one month; meal_breakdown always lists every meal type"""

    year: int
    month: int
    total_spent: int
    daily_average: int
    meal_breakdown: Dict[MealType, int]
    top_merchants: List[MerchantSpending]
    daily_spending: List[DailySpending]


class DailyExpenditureStats(BaseModel):
    stats_date: date
    total_spent: int
    meal_breakdown: Dict[MealType, int]
    expenditures: List[ExpenditureResponse]
