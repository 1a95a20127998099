"""Budget ledger routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging
from datetime import date
from typing import Optional

from api.dependencies import get_current_user, get_db
from api.responses import success_response
from app.exceptions import NotFoundError
from domain.models import AppUser
from domain.schemas.budget_schemas import (
    DailyBudgetBulkRequest,
    DailyBudgetUpdateRequest,
    MealBudgetsRequest,
    MonthlyBudgetUpsertRequest,
)
from services.budget_service import BudgetService

router = APIRouter(prefix="/budgets", tags=["Budgets"])
logger = logging.getLogger("mealbudget.api.budgets")


@router.get("/monthly")
def get_monthly_budget(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Monthly profile (current month by default); 404 when none was set"""
    budget = BudgetService.get_monthly_budget(db, user.user_id, year, month)
    if budget is None:
        raise NotFoundError("No monthly budget set")
    return success_response(budget)


@router.put("/monthly")
def upsert_monthly_budget(
    payload: MonthlyBudgetUpsertRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(BudgetService.upsert_monthly_budget(db, user.user_id, payload))


@router.put("/monthly/meals")
def set_meal_budgets(
    payload: MealBudgetsRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(BudgetService.set_meal_budgets(db, user.user_id, payload))


@router.get("/daily")
def get_daily_budget(
    date_: date = Query(..., alias="date"),
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Snapshot of one date; 404 means nothing was allocated or spent that day"""
    snapshot = BudgetService.get_daily_budget(db, user.user_id, date_)
    if snapshot is None:
        raise NotFoundError(f"No daily budget for {date_.isoformat()}")
    return success_response(snapshot)


@router.put("/daily/{budget_date}")
def update_daily_budget(
    budget_date: date,
    payload: DailyBudgetUpdateRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create or update one date's total, optionally carrying it forward in the month"""
    return success_response(
        BudgetService.update_daily_budget(db, user.user_id, budget_date, payload)
    )


@router.post("/daily/bulk")
def bulk_set_daily_budget(
    payload: DailyBudgetBulkRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(BudgetService.bulk_set_daily_budget(db, user.user_id, payload))
