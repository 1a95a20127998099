"""
Cart models. A user owns at most one cart and every line belongs to the cart's merchant.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class Cart(Base):
    """Single-merchant cart; merchant_id is NULL whenever the cart has no items"""

    __tablename__ = "cart"

    cart_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    merchant_id = Column(
        UUID(as_uuid=True), ForeignKey("merchant.merchant_id"), nullable=True
    )
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("AppUser", back_populates="cart")
    merchant = relationship("Merchant")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.position",
    )


class CartItem(Base):
    """One food line in a cart"""

    __tablename__ = "cart_item"

    cart_item_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cart_id = Column(
        UUID(as_uuid=True),
        ForeignKey("cart.cart_id", ondelete="CASCADE"),
        nullable=False,
    )
    food_id = Column(UUID(as_uuid=True), ForeignKey("food.food_id"), nullable=False)
    merchant_id = Column(
        UUID(as_uuid=True), ForeignKey("merchant.merchant_id"), nullable=False
    )
    food_name = Column(Text, nullable=False)
    unit_price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    cart = relationship("Cart", back_populates="items")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    __table_args__ = (
        UniqueConstraint("cart_id", "food_id", name="uq_cart_item_food"),
        CheckConstraint(
            "quantity >= 1 AND quantity <= 99", name="ck_cart_item_quantity_range"
        ),
    )
