"""Cart and checkout routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging
from uuid import UUID

from api.dependencies import get_current_user, get_db
from api.responses import success_response
from domain.models import AppUser
from domain.schemas.cart_schemas import (
    AddCartItemRequest,
    CheckoutRequest,
    UpdateCartItemRequest,
)
from services.cart_service import CartService
from services.checkout_service import CheckoutService

router = APIRouter(prefix="/cart", tags=["Cart"])
logger = logging.getLogger("mealbudget.api.cart")


@router.get("")
def get_cart(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current cart of the caller; an empty cart has no merchant"""
    return success_response(CartService.get_cart(db, user.user_id))


@router.post("/items", status_code=status.HTTP_201_CREATED)
def add_cart_item(
    payload: AddCartItemRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Add a food to the cart.

    Answers 409 CONFLICT when the cart holds another merchant's food; repeat
    with replace_cart=true to swap the cart over atomically.
    """
    return success_response(CartService.add_item(db, user.user_id, payload))


@router.put("/items/{cart_item_id}")
def update_cart_item(
    cart_item_id: UUID,
    payload: UpdateCartItemRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set a line quantity; a quantity below 1 removes the line"""
    return success_response(
        CartService.update_quantity(db, user.user_id, cart_item_id, payload.quantity)
    )


@router.delete("/items/{cart_item_id}")
def remove_cart_item(
    cart_item_id: UUID,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(CartService.remove_item(db, user.user_id, cart_item_id))


@router.delete("")
def clear_cart(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    removed = CartService.clear_cart(db, user.user_id)
    return success_response({"removed_count": removed})


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Turn the cart into an expenditure and debit the budget in one transaction"""
    return success_response(CheckoutService.checkout(db, user.user_id, payload))
