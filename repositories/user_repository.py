"""
User Repository - Data access layer for users and their auth tokens
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import AppUser, AuthToken
from app.exceptions import ServiceValidationError


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_email(self, email: str) -> Optional[AppUser]:
        """Get user by email"""
        return self.db.query(AppUser).filter(AppUser.email == email).first()

    def create_user(self, email: str, full_name: str = None) -> AppUser:
        """Create a new user"""
        user = AppUser(email=email, full_name=full_name)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ServiceValidationError(f"User with email {email} already exists")


class AuthTokenRepository(BaseRepository[AuthToken]):
    """Repository for bearer token lookups"""

    def __init__(self, db: Session):
        super().__init__(db, AuthToken)

    def get_by_access_token(self, access_token: str) -> Optional[AuthToken]:
        return (
            self.db.query(AuthToken)
            .filter(AuthToken.access_token == access_token)
            .first()
        )

    def get_by_refresh_token(self, refresh_token: str) -> Optional[AuthToken]:
        return (
            self.db.query(AuthToken)
            .filter(AuthToken.refresh_token == refresh_token)
            .first()
        )

    def revoke_for_user(self, user_id: UUID) -> int:
        """Revoke every live token of a user (used on logout)"""
        count = (
            self.db.query(AuthToken)
            .filter(AuthToken.user_id == user_id, AuthToken.revoked.is_(False))
            .update({AuthToken.revoked: True}, synchronize_session=False)
        )
        self.db.commit()
        return count
