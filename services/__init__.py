"""Services package - Business logic layer"""

from services.auth_service import AuthService
from services.catalog_service import CatalogService
from services.cart_service import CartService
from services.budget_service import BudgetService
from services.checkout_service import CheckoutService
from services.expenditure_service import ExpenditureService

__all__ = [
    "AuthService",
    "CatalogService",
    "CartService",
    "BudgetService",
    "CheckoutService",
    "ExpenditureService",
]
