"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    init_database,
    get_db_session,
)
from domain.models.user import AppUser, AuthToken
from domain.models.catalog import Merchant, Food
from domain.models.cart import Cart, CartItem
from domain.models.budget import (
    MonthlyBudget,
    MonthlyMealBudget,
    DailyBudget,
    MealBudget,
)
from domain.models.expenditure import Expenditure, ExpenditureItem

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_database",
    "get_db_session",
    # User models
    "AppUser",
    "AuthToken",
    # Catalog models
    "Merchant",
    "Food",
    # Cart models
    "Cart",
    "CartItem",
    # Budget models
    "MonthlyBudget",
    "MonthlyMealBudget",
    "DailyBudget",
    "MealBudget",
    # Expenditure models
    "Expenditure",
    "ExpenditureItem",
]
