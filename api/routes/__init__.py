"""API routes package"""

from . import auth, budgets, cart, expenditures, health, merchants

__all__ = ["auth", "budgets", "cart", "expenditures", "health", "merchants"]
