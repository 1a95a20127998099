from typing import Optional
from sqlalchemy.orm import Session
import logging
import uuid
from datetime import date

from app.exceptions import ServiceError, ServiceValidationError
from domain.mappers import ExpenditureMapper
from domain.models import Expenditure, ExpenditureItem
from domain.schemas.cart_schemas import CheckoutRequest, CheckoutResponse
from repositories import CartRepository
from services.budget_service import BudgetService

logger = logging.getLogger("mealbudget.checkout")


class CheckoutService:
    @staticmethod
    def checkout(
        db: Session,
        user_id: uuid.UUID,
        request: CheckoutRequest,
        today: Optional[date] = None,
    ) -> CheckoutResponse:
        """
        Turn the user's cart into an expenditure.

        In a single transaction this:
        1. Copies the cart lines into a new expenditure
        2. Debits subtotal minus discount from the meal bucket of
           occurred_date and from the owning month
        3. Empties the cart

        If any step fails everything is rolled back, so the cart, the budget
        and the expenditure history are never partially updated.

        Raises:
            ServiceValidationError: occurred_date in the future, discount larger
                than the subtotal, or (code EMPTY_CART) nothing to check out
        """
        today = today or date.today()
        if request.occurred_date > today:
            raise ServiceValidationError(
                f"occurred_date {request.occurred_date} is in the future",
                details={"occurred_date": request.occurred_date.isoformat()},
            )

        cart_repo = CartRepository(db)
        try:
            cart = cart_repo.get_by_user(user_id, with_lock=True)
            if cart is None or not cart.items:
                raise ServiceValidationError("Cart is empty", code="EMPTY_CART")

            subtotal = sum(item.line_total for item in cart.items)
            if request.discount > subtotal:
                raise ServiceValidationError(
                    f"Discount {request.discount} exceeds subtotal {subtotal}"
                )
            final_amount = subtotal - request.discount

            expenditure = Expenditure(
                user_id=user_id,
                merchant_id=cart.merchant_id,
                merchant_name=cart.merchant.name,
                meal_type=request.meal_type,
                occurred_date=request.occurred_date,
                occurred_time=request.occurred_time,
                subtotal=subtotal,
                discount=request.discount,
                total_amount=final_amount,
                memo=request.memo,
                items=[
                    ExpenditureItem(
                        food_id=item.food_id,
                        food_name=item.food_name,
                        unit_price=item.unit_price,
                        quantity=item.quantity,
                        line_total=item.line_total,
                        position=index,
                    )
                    for index, item in enumerate(cart.items)
                ],
            )
            db.add(expenditure)

            summary = BudgetService.debit(
                db, user_id, request.occurred_date, request.meal_type, final_amount
            )
            cart_repo.clear(cart)

            db.commit()
            db.refresh(expenditure)
        except ServiceError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Checkout failed for user %s", user_id)
            raise

        logger.info(
            "Checkout %s for user %s: %s %s on %s",
            expenditure.expenditure_id,
            user_id,
            final_amount,
            request.meal_type.value,
            request.occurred_date,
        )
        return ExpenditureMapper.to_checkout_response(expenditure, summary)
