"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository, AuthTokenRepository
from repositories.catalog_repository import MerchantRepository, FoodRepository
from repositories.cart_repository import CartRepository
from repositories.budget_repository import (
    MonthlyBudgetRepository,
    DailyBudgetRepository,
)
from repositories.expenditure_repository import ExpenditureRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "AuthTokenRepository",
    "MerchantRepository",
    "FoodRepository",
    "CartRepository",
    "MonthlyBudgetRepository",
    "DailyBudgetRepository",
    "ExpenditureRepository",
]
