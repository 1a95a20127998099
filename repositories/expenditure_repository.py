"""
Expenditure Repository - Data access layer for committed expenditures
"""

from typing import List, Optional, Tuple
from uuid import UUID
from datetime import date
from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.enums import MealType
from domain.models import Expenditure


class ExpenditureRepository(BaseRepository[Expenditure]):
    """Repository for expenditure data access (read and insert only)"""

    def __init__(self, db: Session):
        super().__init__(db, Expenditure)

    def get_for_user(self, expenditure_id: UUID, user_id: UUID) -> Optional[Expenditure]:
        return (
            self.db.query(Expenditure)
            .filter(
                Expenditure.expenditure_id == expenditure_id,
                Expenditure.user_id == user_id,
            )
            .first()
        )

    def list_for_user(
        self,
        user_id: UUID,
        start_date: date = None,
        end_date: date = None,
        meal_type: MealType = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Expenditure]:
        """Expenditures of a user, newest first"""
        query = self.db.query(Expenditure).filter(Expenditure.user_id == user_id)

        if start_date:
            query = query.filter(Expenditure.occurred_date >= start_date)
        if end_date:
            query = query.filter(Expenditure.occurred_date <= end_date)
        if meal_type:
            query = query.filter(Expenditure.meal_type == meal_type)

        return (
            query.order_by(
                Expenditure.occurred_date.desc(), Expenditure.occurred_time.desc()
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_on_date(self, user_id: UUID, on_date: date) -> List[Expenditure]:
        """Every expenditure of one date, in the order the meals happened"""
        return (
            self.db.query(Expenditure)
            .filter(Expenditure.user_id == user_id, Expenditure.occurred_date == on_date)
            .order_by(Expenditure.occurred_time, Expenditure.created_at)
            .all()
        )

    def totals_by_meal(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> List[Tuple[MealType, int]]:
        return (
            self.db.query(Expenditure.meal_type, func.sum(Expenditure.total_amount))
            .filter(
                Expenditure.user_id == user_id,
                Expenditure.occurred_date >= start_date,
                Expenditure.occurred_date <= end_date,
            )
            .group_by(Expenditure.meal_type)
            .all()
        )

    def totals_by_date(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> List[Tuple[date, int]]:
        return (
            self.db.query(Expenditure.occurred_date, func.sum(Expenditure.total_amount))
            .filter(
                Expenditure.user_id == user_id,
                Expenditure.occurred_date >= start_date,
                Expenditure.occurred_date <= end_date,
            )
            .group_by(Expenditure.occurred_date)
            .order_by(Expenditure.occurred_date)
            .all()
        )

    def top_merchants(
        self, user_id: UUID, start_date: date, end_date: date, limit: int = 5
    ) -> List[Tuple[Optional[UUID], str, int, int]]:
        """(merchant_id, merchant_name, amount, count), biggest spend first"""
        amount = func.sum(Expenditure.total_amount)
        return (
            self.db.query(
                Expenditure.merchant_id,
                Expenditure.merchant_name,
                amount,
                func.count(Expenditure.expenditure_id),
            )
            .filter(
                Expenditure.user_id == user_id,
                Expenditure.occurred_date >= start_date,
                Expenditure.occurred_date <= end_date,
            )
            .group_by(Expenditure.merchant_id, Expenditure.merchant_name)
            .order_by(amount.desc(), Expenditure.merchant_name)
            .limit(limit)
            .all()
        )
