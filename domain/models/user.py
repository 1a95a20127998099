"""
User and session models.
"""

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class AppUser(Base):
    """User account model"""

    __tablename__ = "app_user"

    user_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    full_name = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    tokens = relationship(
        "AuthToken", back_populates="user", cascade="all, delete-orphan"
    )
    cart = relationship(
        "Cart", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    monthly_budgets = relationship(
        "MonthlyBudget", back_populates="user", cascade="all, delete-orphan"
    )
    daily_budgets = relationship(
        "DailyBudget", back_populates="user", cascade="all, delete-orphan"
    )
    expenditures = relationship(
        "Expenditure", back_populates="user", cascade="all, delete-orphan"
    )


class AuthToken(Base):
    """Bearer access token paired with the refresh token that can replace it"""

    __tablename__ = "auth_token"

    token_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    access_token = Column(Text, unique=True, nullable=False)
    refresh_token = Column(Text, unique=True, nullable=False)
    access_expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    refresh_expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    revoked = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    user = relationship("AppUser", back_populates="tokens")
