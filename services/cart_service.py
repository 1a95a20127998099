from typing import Optional
from sqlalchemy.orm import Session
import logging
import uuid

from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ServiceValidationError,
)
from domain.enums import MIN_CART_QUANTITY, MAX_CART_QUANTITY
from domain.mappers import CartMapper
from domain.models import Cart, CartItem
from domain.schemas.cart_schemas import (
    AddCartItemRequest,
    AddCartItemResponse,
    CartResponse,
    UpdateCartItemResponse,
)
from repositories import CartRepository, FoodRepository, MerchantRepository

logger = logging.getLogger("mealbudget.cart")


def _cart_total(cart: Optional[Cart]) -> int:
    if cart is None:
        return 0
    return sum(item.line_total for item in cart.items)


class CartService:
    @staticmethod
    def get_cart(db: Session, user_id: uuid.UUID) -> CartResponse:
        return CartMapper.to_response(CartRepository(db).get_by_user(user_id))

    @staticmethod
    def add_item(
        db: Session, user_id: uuid.UUID, request: AddCartItemRequest
    ) -> AddCartItemResponse:
        """
        Add a food to the user's cart.

        A cart only ever holds one merchant's food. Adding from another merchant
        fails with ConflictError and leaves the cart untouched, unless
        replace_cart is set, in which case the old lines are removed and the new
        one added in the same transaction. Adding a food already in the cart
        increments that line.

        Args:
            db: Database session
            user_id: Owner of the cart
            request: Merchant, food, quantity and the replace flag

        Returns:
            AddCartItemResponse: The affected line and the new cart total

        Raises:
            NotFoundError: Merchant or food does not exist
            ServiceValidationError: Food is not on the merchant's menu, or the
                line would exceed the maximum quantity
            ConflictError: Cart holds another merchant's items (details carry
                both merchants)
        """
        merchant = MerchantRepository(db).get_by_id(request.merchant_id)
        if not merchant:
            raise NotFoundError(f"Merchant not found: {request.merchant_id}")

        food_repo = FoodRepository(db)
        food = food_repo.get_for_merchant(request.food_id, merchant.merchant_id)
        if not food:
            if food_repo.exists(request.food_id):
                raise ServiceValidationError(
                    f"Food {request.food_id} is not sold by merchant {merchant.name}"
                )
            raise NotFoundError(f"Food not found: {request.food_id}")

        cart_repo = CartRepository(db)
        try:
            cart = cart_repo.get_or_create(user_id, with_lock=True)
            replaced = False

            if cart.items and cart.merchant_id != merchant.merchant_id:
                if not request.replace_cart:
                    current = cart.merchant
                    raise ConflictError(
                        "Cart already holds items from another merchant",
                        details={
                            "current_merchant_id": str(cart.merchant_id),
                            "current_merchant_name": current.name if current else None,
                            "requested_merchant_id": str(merchant.merchant_id),
                            "requested_merchant_name": merchant.name,
                        },
                    )
                removed = cart_repo.clear(cart)
                replaced = True
                logger.info(
                    "Replaced cart of user %s: dropped %d lines for merchant %s",
                    user_id,
                    removed,
                    merchant.merchant_id,
                )

            existing = None if replaced else cart_repo.get_item_by_food(
                cart.cart_id, food.food_id
            )
            if existing:
                quantity = existing.quantity + request.quantity
                if quantity > MAX_CART_QUANTITY:
                    raise ServiceValidationError(
                        f"Quantity cannot exceed {MAX_CART_QUANTITY}",
                        details={"cart_item_id": str(existing.cart_item_id)},
                    )
                existing.quantity = quantity
                item = existing
            else:
                item = CartItem(
                    food_id=food.food_id,
                    merchant_id=merchant.merchant_id,
                    food_name=food.name,
                    unit_price=food.price,
                    quantity=request.quantity,
                    position=cart_repo.next_position(cart.cart_id),
                )
                cart.items.append(item)

            cart.merchant = merchant
            db.commit()
        except ServiceError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Error adding food %s to cart of user %s", request.food_id, user_id)
            raise

        return AddCartItemResponse(
            cart_item_id=item.cart_item_id,
            food_id=item.food_id,
            food_name=item.food_name,
            quantity=item.quantity,
            line_total=item.line_total,
            cart_total_amount=_cart_total(cart),
            replaced_cart=replaced,
        )

    @staticmethod
    def update_quantity(
        db: Session, user_id: uuid.UUID, cart_item_id: uuid.UUID, quantity: int
    ) -> UpdateCartItemResponse:
        """
        Set the quantity of a line. Anything below 1 removes the line; above
        the maximum is rejected without touching the cart.
        """
        if quantity > MAX_CART_QUANTITY:
            raise ServiceValidationError(f"Quantity cannot exceed {MAX_CART_QUANTITY}")
        if quantity < MIN_CART_QUANTITY:
            return CartService.remove_item(db, user_id, cart_item_id)

        cart_repo = CartRepository(db)
        item = cart_repo.get_item(cart_item_id, user_id)
        if not item:
            raise NotFoundError(f"Cart item not found: {cart_item_id}")

        try:
            item.quantity = quantity
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error updating cart item %s", cart_item_id)
            raise

        return UpdateCartItemResponse(
            cart_item_id=item.cart_item_id,
            quantity=item.quantity,
            line_total=item.line_total,
            cart_total_amount=_cart_total(item.cart),
        )

    @staticmethod
    def remove_item(
        db: Session, user_id: uuid.UUID, cart_item_id: uuid.UUID
    ) -> UpdateCartItemResponse:
        cart_repo = CartRepository(db)
        item = cart_repo.get_item(cart_item_id, user_id)
        if not item:
            raise NotFoundError(f"Cart item not found: {cart_item_id}")

        cart = item.cart
        try:
            cart_repo.remove_item(cart, item)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error removing cart item %s", cart_item_id)
            raise

        return UpdateCartItemResponse(
            cart_item_id=cart_item_id,
            quantity=0,
            line_total=0,
            cart_total_amount=_cart_total(cart),
            removed=True,
        )

    @staticmethod
    def clear_cart(db: Session, user_id: uuid.UUID) -> int:
        """Empty the cart. Clearing an empty or missing cart is a no-op returning 0."""
        cart_repo = CartRepository(db)
        cart = cart_repo.get_by_user(user_id, with_lock=True)
        if cart is None or not cart.items:
            return 0

        try:
            removed = cart_repo.clear(cart)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error clearing cart of user %s", user_id)
            raise

        logger.info("Cleared %d lines from cart of user %s", removed, user_id)
        return removed
