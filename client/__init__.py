"""
Client core - talks to the MealBudget API and mirrors its state.
"""

from client.errors import ErrorKind, ClientError, CartConflictError, CartBusyError
from client.session import SessionTokens
from client.api_client import ApiClient
from client.budget_projector import BudgetProjection, BudgetProjector
from client.budget_ledger import BudgetLedger
from client.conflict_resolver import ConflictResolver
from client.cart_manager import CartManager, CartState
from client.checkout_coordinator import CheckoutCoordinator

__all__ = [
    "ErrorKind",
    "ClientError",
    "CartConflictError",
    "CartBusyError",
    "SessionTokens",
    "ApiClient",
    "BudgetProjection",
    "BudgetProjector",
    "BudgetLedger",
    "ConflictResolver",
    "CartManager",
    "CartState",
    "CheckoutCoordinator",
]
