"""
Cart Repository - Data access layer for cart operations
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import func

from repositories.base import BaseRepository
from domain.models import Cart, CartItem


class CartRepository(BaseRepository[Cart]):
    """Repository for cart data access. Writes are flushed, never committed here."""

    def __init__(self, db: Session):
        super().__init__(db, Cart)

    def get_by_user(self, user_id: UUID, with_lock: bool = False) -> Optional[Cart]:
        """Get the user's cart; with_lock takes a row lock where the backend supports it"""
        query = self.db.query(Cart).filter(Cart.user_id == user_id)
        if with_lock:
            query = query.with_for_update()
        return query.first()

    def get_or_create(self, user_id: UUID, with_lock: bool = False) -> Cart:
        cart = self.get_by_user(user_id, with_lock=with_lock)
        if cart is None:
            cart = self.add(Cart(user_id=user_id))
        return cart

    def get_item(self, cart_item_id: UUID, user_id: UUID) -> Optional[CartItem]:
        """Get a cart line, only if it belongs to the user's cart"""
        return (
            self.db.query(CartItem)
            .join(Cart, Cart.cart_id == CartItem.cart_id)
            .filter(CartItem.cart_item_id == cart_item_id, Cart.user_id == user_id)
            .first()
        )

    def get_item_by_food(self, cart_id: UUID, food_id: UUID) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart_id, CartItem.food_id == food_id)
            .first()
        )

    def next_position(self, cart_id: UUID) -> int:
        current = (
            self.db.query(func.max(CartItem.position))
            .filter(CartItem.cart_id == cart_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    def remove_item(self, cart: Cart, item: CartItem) -> None:
        """Remove one line; the cart drops its merchant when the last line goes"""
        cart.items.remove(item)
        if not cart.items:
            cart.merchant = None
        self.db.flush()

    def clear(self, cart: Cart) -> int:
        """Remove every line and the merchant; returns how many lines were removed"""
        count = len(cart.items)
        cart.items.clear()
        cart.merchant = None
        self.db.flush()
        return count
