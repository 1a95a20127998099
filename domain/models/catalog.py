"""
Merchant and menu catalog models.
"""

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class Merchant(Base):
    """A store whose menu items can be put in a cart"""

    __tablename__ = "merchant"

    merchant_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    foods = relationship(
        "Food",
        back_populates="merchant",
        cascade="all, delete-orphan",
        order_by="Food.name",
    )


class Food(Base):
    """Menu item sold by a merchant"""

    __tablename__ = "food"

    food_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    merchant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("merchant.merchant_id", ondelete="CASCADE"),
        nullable=False,
    )
    name = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)

    merchant = relationship("Merchant", back_populates="foods")

    __table_args__ = (CheckConstraint("price >= 0", name="ck_food_price_nonneg"),)
