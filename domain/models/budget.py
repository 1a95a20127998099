"""
Budget ledger models: a monthly profile and date-scoped daily snapshots,
each split into per-meal-type buckets.
"""

from sqlalchemy import (
    Column,
    TIMESTAMP,
    ForeignKey,
    Integer,
    Date,
    Enum as SQLEnum,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base
from domain.enums import MealType


class MonthlyBudget(Base):
    """Budget profile for one calendar month"""

    __tablename__ = "monthly_budget"

    monthly_budget_id = Column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    monthly_total = Column(Integer, nullable=False, default=0)
    daily_total = Column(Integer, nullable=False, default=0)
    total_spent = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("AppUser", back_populates="monthly_budgets")
    meal_defaults = relationship(
        "MonthlyMealBudget", back_populates="monthly_budget", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_monthly_budget_user_month"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_monthly_budget_month"),
        CheckConstraint("monthly_total >= 0", name="ck_monthly_budget_total_nonneg"),
        CheckConstraint("daily_total >= 0", name="ck_monthly_budget_daily_nonneg"),
    )


class MonthlyMealBudget(Base):
    """Per-meal default budget applied to daily snapshots created in the month"""

    __tablename__ = "monthly_meal_budget"

    monthly_meal_budget_id = Column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    monthly_budget_id = Column(
        UUID(as_uuid=True),
        ForeignKey("monthly_budget.monthly_budget_id", ondelete="CASCADE"),
        nullable=False,
    )
    meal_type = Column(SQLEnum(MealType), nullable=False)
    budget = Column(Integer, nullable=False, default=0)

    monthly_budget = relationship("MonthlyBudget", back_populates="meal_defaults")

    __table_args__ = (
        UniqueConstraint(
            "monthly_budget_id", "meal_type", name="uq_monthly_meal_budget_type"
        ),
    )


class DailyBudget(Base):
    """Allocation-and-consumption snapshot for one date"""

    __tablename__ = "daily_budget"

    daily_budget_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    budget_date = Column(Date, nullable=False)
    daily_total = Column(Integer, nullable=False, default=0)
    total_spent = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("AppUser", back_populates="daily_budgets")
    meal_budgets = relationship(
        "MealBudget", back_populates="daily_budget", cascade="all, delete-orphan"
    )

    @property
    def remaining_budget(self) -> int:
        return self.daily_total - self.total_spent

    def meal(self, meal_type: MealType):
        """Return the bucket for meal_type, or None"""
        for bucket in self.meal_budgets:
            if bucket.meal_type == meal_type:
                return bucket
        return None

    __table_args__ = (
        UniqueConstraint("user_id", "budget_date", name="uq_daily_budget_user_date"),
        CheckConstraint("daily_total >= 0", name="ck_daily_budget_total_nonneg"),
    )


class MealBudget(Base):
    """Meal-type bucket of a daily snapshot"""

    __tablename__ = "meal_budget"

    meal_budget_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    daily_budget_id = Column(
        UUID(as_uuid=True),
        ForeignKey("daily_budget.daily_budget_id", ondelete="CASCADE"),
        nullable=False,
    )
    meal_type = Column(SQLEnum(MealType), nullable=False)
    budget = Column(Integer, nullable=False, default=0)
    spent = Column(Integer, nullable=False, default=0)

    daily_budget = relationship("DailyBudget", back_populates="meal_budgets")

    @property
    def remaining(self) -> int:
        return self.budget - self.spent

    __table_args__ = (
        UniqueConstraint("daily_budget_id", "meal_type", name="uq_meal_budget_type"),
        CheckConstraint("budget >= 0", name="ck_meal_budget_nonneg"),
    )
