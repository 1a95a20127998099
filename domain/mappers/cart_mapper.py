"""
Cart domain mappers.
Handles transformation between cart/expenditure ORM models and DTOs.
"""

from typing import Optional
from domain.models import Cart, Expenditure
from domain.schemas.cart_schemas import (
    CartResponse,
    CartItemResponse,
    CheckoutResponse,
    CheckoutItem,
    BudgetSummary,
)
from domain.schemas.expenditure_schemas import ExpenditureResponse


class CartMapper:
    """Mapper for cart-related transformations."""

    @staticmethod
    def to_response(cart: Optional[Cart]) -> CartResponse:
        """
        Convert a Cart ORM model to CartResponse.

        A missing cart and a cart without lines both map to the empty cart,
        which never carries a merchant.
        """
        if cart is None or not cart.items:
            return CartResponse(cart_id=cart.cart_id if cart else None)

        items = [CartItemResponse.model_validate(item) for item in cart.items]
        return CartResponse(
            cart_id=cart.cart_id,
            merchant_id=cart.merchant_id,
            merchant_name=cart.merchant.name if cart.merchant else None,
            items=items,
            total_amount=sum(item.line_total for item in items),
        )


class ExpenditureMapper:
    """Mapper for expenditure transformations."""

    @staticmethod
    def to_response(expenditure: Expenditure) -> ExpenditureResponse:
        return ExpenditureResponse.model_validate(expenditure)

    @staticmethod
    def to_checkout_response(
        expenditure: Expenditure, summary: BudgetSummary
    ) -> CheckoutResponse:
        """Build the confirmation payload returned by checkout."""
        return CheckoutResponse(
            expenditure_id=expenditure.expenditure_id,
            merchant_id=expenditure.merchant_id,
            merchant_name=expenditure.merchant_name,
            items=[CheckoutItem.model_validate(i) for i in expenditure.items],
            subtotal=expenditure.subtotal,
            discount=expenditure.discount,
            final_amount=expenditure.total_amount,
            meal_type=expenditure.meal_type,
            occurred_date=expenditure.occurred_date,
            occurred_time=expenditure.occurred_time,
            budget_summary=summary,
            created_at=expenditure.created_at,
        )
