"""Bearer token issue, lookup and refresh"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import UnauthorizedError, NotFoundError
from domain.models import AppUser, AuthToken
from domain.schemas.auth_schemas import TokenPairResponse
from repositories import AuthTokenRepository, UserRepository

logger = logging.getLogger("mealbudget.auth")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Session tokens for the API. Login itself belongs to the identity provider."""

    @staticmethod
    def issue_tokens(db: Session, user_id: UUID) -> TokenPairResponse:
        """Create a new access/refresh token pair for an existing user."""
        if UserRepository(db).get_by_id(user_id) is None:
            raise NotFoundError(f"User not found: {user_id}")

        now = datetime.now(timezone.utc)
        token = AuthToken(
            user_id=user_id,
            access_token=secrets.token_urlsafe(32),
            refresh_token=secrets.token_urlsafe(48),
            access_expires_at=now + timedelta(minutes=settings.access_token_ttl_minutes),
            refresh_expires_at=now + timedelta(days=settings.refresh_token_ttl_days),
        )
        AuthTokenRepository(db).create(token)
        logger.info("Issued token pair for user %s", user_id)
        return TokenPairResponse(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_in=settings.access_token_ttl_minutes * 60,
        )

    @staticmethod
    def authenticate(db: Session, access_token: str) -> AppUser:
        """
        Resolve the user behind a bearer access token.

        Raises:
            UnauthorizedError: token unknown, revoked or expired
        """
        token = AuthTokenRepository(db).get_by_access_token(access_token)
        if token is None or token.revoked:
            raise UnauthorizedError("Invalid access token")
        if _as_utc(token.access_expires_at) <= datetime.now(timezone.utc):
            raise UnauthorizedError("Access token expired", code="TOKEN_EXPIRED")
        return token.user

    @staticmethod
    def refresh(db: Session, refresh_token: str) -> TokenPairResponse:
        """
        Exchange a refresh token for a new pair. The old pair is revoked, so a
        refresh token works exactly once.
        """
        repo = AuthTokenRepository(db)
        token = repo.get_by_refresh_token(refresh_token)
        if token is None or token.revoked:
            raise UnauthorizedError("Invalid refresh token")
        if _as_utc(token.refresh_expires_at) <= datetime.now(timezone.utc):
            raise UnauthorizedError("Refresh token expired", code="TOKEN_EXPIRED")

        token.revoked = True
        db.flush()
        logger.info("Refreshing session for user %s", token.user_id)
        return AuthService.issue_tokens(db, token.user_id)

    @staticmethod
    def logout(db: Session, user_id: UUID) -> int:
        """Revoke every live token of the user"""
        revoked = AuthTokenRepository(db).revoke_for_user(user_id)
        logger.info("Revoked %d tokens for user %s", revoked, user_id)
        return revoked
