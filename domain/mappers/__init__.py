"""
Domain mappers package - ORM to DTO transformations.
"""

from domain.mappers.cart_mapper import CartMapper, ExpenditureMapper
from domain.mappers.budget_mapper import BudgetMapper

__all__ = ["CartMapper", "ExpenditureMapper", "BudgetMapper"]
