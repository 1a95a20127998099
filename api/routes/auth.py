"""Session token routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db
from api.responses import success_response
from domain.models import AppUser
from domain.schemas.auth_schemas import RefreshTokenRequest
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("mealbudget.api.auth")


@router.post("/refresh")
def refresh_tokens(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new token pair; the old pair stops working"""
    return success_response(AuthService.refresh(db, payload.refresh_token))


@router.post("/logout")
def logout(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Revoke every token of the caller"""
    revoked = AuthService.logout(db, user.user_id)
    return success_response({"revoked_count": revoked})
