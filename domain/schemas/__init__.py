"""
Domain schemas package - Pydantic models for validation.
Shared by the API routes and the client core.
"""

from domain.schemas.cart_schemas import (
    AddCartItemRequest,
    UpdateCartItemRequest,
    CartItemResponse,
    CartResponse,
    AddCartItemResponse,
    UpdateCartItemResponse,
    CheckoutRequest,
    CheckoutItem,
    CheckoutResponse,
    BudgetSummary,
)
from domain.schemas.budget_schemas import (
    MonthlyBudgetUpsertRequest,
    MealBudgetsRequest,
    DailyBudgetUpdateRequest,
    DailyBudgetBulkRequest,
    MealBudgetResponse,
    DailyBudgetResponse,
    MonthlyBudgetResponse,
    DailyBudgetUpdateResponse,
    DailyBudgetBulkResponse,
)
from domain.schemas.expenditure_schemas import (
    ExpenditureItemResponse,
    ExpenditureResponse,
    MerchantSpending,
    DailySpending,
    MonthlyExpenditureStats,
    DailyExpenditureStats,
)
from domain.schemas.catalog_schemas import MerchantResponse, FoodResponse
from domain.schemas.auth_schemas import RefreshTokenRequest, TokenPairResponse

__all__ = [
    # Cart schemas
    "AddCartItemRequest",
    "UpdateCartItemRequest",
    "CartItemResponse",
    "CartResponse",
    "AddCartItemResponse",
    "UpdateCartItemResponse",
    # Checkout schemas
    "CheckoutRequest",
    "CheckoutItem",
    "CheckoutResponse",
    "BudgetSummary",
    # Budget schemas
    "MonthlyBudgetUpsertRequest",
    "MealBudgetsRequest",
    "DailyBudgetUpdateRequest",
    "DailyBudgetBulkRequest",
    "MealBudgetResponse",
    "DailyBudgetResponse",
    "MonthlyBudgetResponse",
    "DailyBudgetUpdateResponse",
    "DailyBudgetBulkResponse",
    # Expenditure schemas
    "ExpenditureItemResponse",
    "ExpenditureResponse",
    "MerchantSpending",
    "DailySpending",
    "MonthlyExpenditureStats",
    "DailyExpenditureStats",
    # Catalog schemas
    "MerchantResponse",
    "FoodResponse",
    # Auth schemas
    "RefreshTokenRequest",
    "TokenPairResponse",
]
