from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
import calendar
import uuid
from datetime import date

from app.exceptions import NotFoundError, ServiceValidationError
from domain.enums import MealType
from domain.mappers import ExpenditureMapper
from domain.models import Expenditure
from domain.schemas.expenditure_schemas import (
    DailyExpenditureStats,
    DailySpending,
    MerchantSpending,
    MonthlyExpenditureStats,
)
from repositories import ExpenditureRepository

TOP_MERCHANT_LIMIT = 5


def _meal_breakdown(rows: Iterable[Tuple[MealType, int]]) -> Dict[MealType, int]:
    breakdown = {meal_type: 0 for meal_type in MealType}
    for meal_type, amount in rows:
        breakdown[meal_type] += int(amount or 0)
    return breakdown


def _days_counted(year: int, month: int, today: date) -> int:
    """Days of the month that have happened: all of a past month, none of a future one"""
    if (year, month) < (today.year, today.month):
        return calendar.monthrange(year, month)[1]
    if (year, month) == (today.year, today.month):
        return today.day
    return 0


class ExpenditureService:
    @staticmethod
    def list_expenditures(
        db: Session,
        user_id: uuid.UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        meal_type: Optional[MealType] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Expenditure]:
        if start_date and end_date and start_date > end_date:
            raise ServiceValidationError("start_date must not be after end_date")
        return ExpenditureRepository(db).list_for_user(
            user_id,
            start_date=start_date,
            end_date=end_date,
            meal_type=meal_type,
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def get_expenditure(
        db: Session, user_id: uuid.UUID, expenditure_id: uuid.UUID
    ) -> Expenditure:
        expenditure = ExpenditureRepository(db).get_for_user(expenditure_id, user_id)
        if not expenditure:
            raise NotFoundError(f"Expenditure not found: {expenditure_id}")
        return expenditure

    @staticmethod
    def get_monthly_stats(
        db: Session,
        user_id: uuid.UUID,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Optional[date] = None,
    ) -> MonthlyExpenditureStats:
        """
        Totals of one month (current month by default).

        daily_average divides by the days of the month that have passed, so
        the current month is not diluted by days still to come. Only dates
        with spending appear in daily_spending.
        """
        today = today or date.today()
        year = year or today.year
        month = month or today.month
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])

        repo = ExpenditureRepository(db)
        daily = [
            DailySpending(spending_date=day, amount=int(amount))
            for day, amount in repo.totals_by_date(user_id, start, end)
        ]
        total = sum(d.amount for d in daily)
        days = _days_counted(year, month, today)

        return MonthlyExpenditureStats(
            year=year,
            month=month,
            total_spent=total,
            daily_average=total // days if days else 0,
            meal_breakdown=_meal_breakdown(repo.totals_by_meal(user_id, start, end)),
            top_merchants=[
                MerchantSpending(
                    merchant_id=merchant_id,
                    merchant_name=merchant_name,
                    amount=int(amount),
                    count=count,
                )
                for merchant_id, merchant_name, amount, count in repo.top_merchants(
                    user_id, start, end, limit=TOP_MERCHANT_LIMIT
                )
            ],
            daily_spending=daily,
        )

    @staticmethod
    def get_daily_stats(
        db: Session, user_id: uuid.UUID, on_date: date
    ) -> DailyExpenditureStats:
        """Totals of one date together with the expenditures behind them"""
        expenditures = ExpenditureRepository(db).list_on_date(user_id, on_date)
        return DailyExpenditureStats(
            stats_date=on_date,
            total_spent=sum(e.total_amount for e in expenditures),
            meal_breakdown=_meal_breakdown(
                (e.meal_type, e.total_amount) for e in expenditures
            ),
            expenditures=[ExpenditureMapper.to_response(e) for e in expenditures],
        )
