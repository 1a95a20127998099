"""
Domain enums for MealBudget application.
Contains all enumeration types used across the domain models.
"""

import enum


class MealType(str, enum.Enum):
    """Budget bucket an expenditure is attributed to"""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    OTHER = "OTHER"


# Cart line quantities are kept within this range; anything below is removal.
MIN_CART_QUANTITY = 1
MAX_CART_QUANTITY = 99

# dailyTotal defaults to floor(monthlyTotal / DAILY_BUDGET_DIVISOR)
DAILY_BUDGET_DIVISOR = 30
