"""Expenditure history routes (read-only)"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from api.dependencies import get_current_user, get_db
from api.responses import success_response
from domain.enums import MealType
from domain.mappers import ExpenditureMapper
from domain.models import AppUser
from services.expenditure_service import ExpenditureService

router = APIRouter(prefix="/expenditures", tags=["Expenditures"])


@router.get("")
def list_expenditures(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    meal_type: Optional[MealType] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expenditures = ExpenditureService.list_expenditures(
        db,
        user.user_id,
        start_date=start_date,
        end_date=end_date,
        meal_type=meal_type,
        skip=skip,
        limit=limit,
    )
    return success_response([ExpenditureMapper.to_response(e) for e in expenditures])


@router.get("/stats/monthly")
def get_monthly_stats(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Month totals: per meal type, top merchants and spending per date"""
    return success_response(
        ExpenditureService.get_monthly_stats(db, user.user_id, year, month)
    )


@router.get("/stats/daily")
def get_daily_stats(
    date_: date = Query(..., alias="date"),
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(ExpenditureService.get_daily_stats(db, user.user_id, date_))


@router.get("/{expenditure_id}")
def get_expenditure(
    expenditure_id: UUID,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expenditure = ExpenditureService.get_expenditure(db, user.user_id, expenditure_id)
    return success_response(ExpenditureMapper.to_response(expenditure))
