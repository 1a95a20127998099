"""Health check routes"""

from fastapi import APIRouter
import logging

from api.responses import success_response
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("mealbudget.api.health")


@router.get("/health-check")
def health_check():
    """Basic health check endpoint"""
    return success_response(
        {"status": "ok", "service": settings.app_name, "version": settings.app_version}
    )
