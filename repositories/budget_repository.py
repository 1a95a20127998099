"""
Budget Repository - Data access layer for the monthly profile and daily snapshots
"""

from typing import List, Optional
from uuid import UUID
from datetime import date
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import MonthlyBudget, DailyBudget


class MonthlyBudgetRepository(BaseRepository[MonthlyBudget]):
    """Repository for monthly budget profiles"""

    def __init__(self, db: Session):
        super().__init__(db, MonthlyBudget)

    def get_for_month(
        self, user_id: UUID, year: int, month: int, with_lock: bool = False
    ) -> Optional[MonthlyBudget]:
        query = self.db.query(MonthlyBudget).filter(
            MonthlyBudget.user_id == user_id,
            MonthlyBudget.year == year,
            MonthlyBudget.month == month,
        )
        if with_lock:
            query = query.with_for_update()
        return query.first()


class DailyBudgetRepository(BaseRepository[DailyBudget]):
    """Repository for daily budget snapshots"""

    def __init__(self, db: Session):
        super().__init__(db, DailyBudget)

    def get_for_date(
        self, user_id: UUID, budget_date: date, with_lock: bool = False
    ) -> Optional[DailyBudget]:
        query = self.db.query(DailyBudget).filter(
            DailyBudget.user_id == user_id, DailyBudget.budget_date == budget_date
        )
        if with_lock:
            query = query.with_for_update()
        return query.first()

    def get_range(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> List[DailyBudget]:
        """Snapshots in the inclusive range, ordered by date"""
        return (
            self.db.query(DailyBudget)
            .filter(
                DailyBudget.user_id == user_id,
                DailyBudget.budget_date >= start_date,
                DailyBudget.budget_date <= end_date,
            )
            .order_by(DailyBudget.budget_date)
            .all()
        )
