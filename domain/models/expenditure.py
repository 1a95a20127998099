"""
Expenditure models. Rows are written once by checkout and never updated.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    Date,
    Time,
    Enum as SQLEnum,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base
from domain.enums import MealType


class Expenditure(Base):
    """Completed purchase debited against the budget ledger"""

    __tablename__ = "expenditure"

    expenditure_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    merchant_id = Column(UUID(as_uuid=True), ForeignKey("merchant.merchant_id"))
    merchant_name = Column(Text, nullable=False)
    meal_type = Column(SQLEnum(MealType), nullable=False)
    occurred_date = Column(Date, nullable=False)
    occurred_time = Column(Time, nullable=False)
    subtotal = Column(Integer, nullable=False)
    discount = Column(Integer, nullable=False, default=0)
    total_amount = Column(Integer, nullable=False)
    memo = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    user = relationship("AppUser", back_populates="expenditures")
    items = relationship(
        "ExpenditureItem",
        back_populates="expenditure",
        cascade="all, delete-orphan",
        order_by="ExpenditureItem.position",
    )

    __table_args__ = (
        CheckConstraint("discount >= 0", name="ck_expenditure_discount_nonneg"),
        CheckConstraint("total_amount >= 0", name="ck_expenditure_total_nonneg"),
    )


class ExpenditureItem(Base):
    """Line of an expenditure, copied from the cart at checkout"""

    __tablename__ = "expenditure_item"

    expenditure_item_id = Column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    expenditure_id = Column(
        UUID(as_uuid=True),
        ForeignKey("expenditure.expenditure_id", ondelete="CASCADE"),
        nullable=False,
    )
    food_id = Column(UUID(as_uuid=True))
    food_name = Column(Text, nullable=False)
    unit_price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    expenditure = relationship("Expenditure", back_populates="items")
