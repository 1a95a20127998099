from typing import Dict, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import calendar
import logging
import uuid
from datetime import date, timedelta

from app.config import settings
from app.exceptions import ConflictError, ServiceError, ServiceValidationError
from domain.enums import MealType, DAILY_BUDGET_DIVISOR
from domain.mappers import BudgetMapper
from domain.models import DailyBudget, MealBudget, MonthlyBudget, MonthlyMealBudget
from domain.schemas.budget_schemas import (
    DailyBudgetBulkRequest,
    DailyBudgetBulkResponse,
    DailyBudgetResponse,
    DailyBudgetUpdateRequest,
    DailyBudgetUpdateResponse,
    MealBudgetsRequest,
    MonthlyBudgetResponse,
    MonthlyBudgetUpsertRequest,
)
from domain.schemas.cart_schemas import BudgetSummary
from repositories import DailyBudgetRepository, MonthlyBudgetRepository

logger = logging.getLogger("mealbudget.budget")


def _month_of(year: Optional[int], month: Optional[int], today: date) -> Tuple[int, int]:
    return (year or today.year, month or today.month)


def _last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _meal_defaults(profile: Optional[MonthlyBudget]) -> Dict[MealType, int]:
    defaults = {m: 0 for m in MealType}
    if profile is not None:
        for default in profile.meal_defaults:
            defaults[default.meal_type] = default.budget
    return defaults


class BudgetService:
    """
    Budget ledger: a profile per month and a snapshot per date.

    Every public write commits exactly once. Snapshots are created lazily,
    either by a budget write or by the first checkout on that date, and take
    their allocation from the month's profile. Spent amounts only ever change
    through debit().
    """

    @staticmethod
    def get_monthly_budget(
        db: Session,
        user_id: uuid.UUID,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Optional[MonthlyBudgetResponse]:
        today = today or date.today()
        year, month = _month_of(year, month, today)
        profile = MonthlyBudgetRepository(db).get_for_month(user_id, year, month)
        if profile is None:
            return None
        return BudgetMapper.monthly_to_response(profile, today=today)

    @staticmethod
    def get_daily_budget(
        db: Session, user_id: uuid.UUID, on_date: date
    ) -> Optional[DailyBudgetResponse]:
        """Snapshot for on_date, or None when nothing has been allocated or spent yet"""
        snapshot = DailyBudgetRepository(db).get_for_date(user_id, on_date)
        if snapshot is None:
            return None
        return BudgetMapper.daily_to_response(snapshot)

    @staticmethod
    def upsert_monthly_budget(
        db: Session,
        user_id: uuid.UUID,
        request: MonthlyBudgetUpsertRequest,
        today: Optional[date] = None,
    ) -> MonthlyBudgetResponse:
        """
        Create or update a month's profile.

        daily_total is floor(monthly_total / 30) unless the request carries an
        explicit override. Spent amounts are never touched.
        """
        today = today or date.today()
        year, month = _month_of(request.year, request.month, today)
        daily_total = (
            request.daily_total
            if request.daily_total is not None
            else request.monthly_total // DAILY_BUDGET_DIVISOR
        )

        try:
            profile = BudgetService._ensure_profile(db, user_id, year, month)
            profile.monthly_total = request.monthly_total
            profile.daily_total = daily_total
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Concurrent budget write for {year}-{month:02d}; retry")
        except Exception:
            db.rollback()
            logger.exception("Error saving monthly budget %s-%s for user %s", year, month, user_id)
            raise

        logger.info(
            "Monthly budget %s-%02d for user %s: total=%s daily=%s",
            year,
            month,
            user_id,
            request.monthly_total,
            daily_total,
        )
        return BudgetMapper.monthly_to_response(profile, today=today)

    @staticmethod
    def set_meal_budgets(
        db: Session,
        user_id: uuid.UUID,
        request: MealBudgetsRequest,
        today: Optional[date] = None,
    ) -> MonthlyBudgetResponse:
        """Set per-meal defaults on a month's profile, creating the profile if needed"""
        today = today or date.today()
        year, month = _month_of(request.year, request.month, today)

        try:
            profile = BudgetService._ensure_profile(db, user_id, year, month)
            existing = {d.meal_type: d for d in profile.meal_defaults}
            for meal_type, amount in request.meal_budgets.items():
                if meal_type in existing:
                    existing[meal_type].budget = amount
                else:
                    profile.meal_defaults.append(
                        MonthlyMealBudget(meal_type=meal_type, budget=amount)
                    )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Concurrent budget write for {year}-{month:02d}; retry")
        except Exception:
            db.rollback()
            logger.exception("Error saving meal budgets %s-%s for user %s", year, month, user_id)
            raise

        return BudgetMapper.monthly_to_response(profile, today=today)

    @staticmethod
    def bulk_set_daily_budget(
        db: Session, user_id: uuid.UUID, request: DailyBudgetBulkRequest
    ) -> DailyBudgetBulkResponse:
        """
        Upsert the same allocation on every date of an inclusive range.

        Existing snapshots keep their spent amounts; dates without one get a new
        snapshot. Re-running with the same input never creates duplicates.
        """
        if request.start_date > request.end_date:
            raise ServiceValidationError("start_date must not be after end_date")
        days = (request.end_date - request.start_date).days + 1
        if days > settings.max_budget_range_days:
            raise ServiceValidationError(
                f"Date range too long: {days} days (max {settings.max_budget_range_days})"
            )

        created = 0
        profiles: Dict[Tuple[int, int], Optional[MonthlyBudget]] = {}
        monthly_repo = MonthlyBudgetRepository(db)
        try:
            for offset in range(days):
                day = request.start_date + timedelta(days=offset)
                key = (day.year, day.month)
                if key not in profiles:
                    profiles[key] = monthly_repo.get_for_month(user_id, day.year, day.month)
                _, was_created = BudgetService._upsert_day(
                    db,
                    user_id,
                    day,
                    request.daily_total,
                    request.meal_budgets,
                    profiles[key],
                )
                created += int(was_created)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Concurrent budget write; retry")
        except ServiceError:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception(
                "Error in bulk budget %s..%s for user %s",
                request.start_date,
                request.end_date,
                user_id,
            )
            raise

        logger.info(
            "Bulk daily budget %s..%s for user %s: %d created, %d updated",
            request.start_date,
            request.end_date,
            user_id,
            created,
            days - created,
        )
        return DailyBudgetBulkResponse(
            start_date=request.start_date,
            end_date=request.end_date,
            daily_budget_count=days,
            created_count=created,
            updated_count=days - created,
        )

    @staticmethod
    def update_daily_budget(
        db: Session,
        user_id: uuid.UUID,
        on_date: date,
        request: DailyBudgetUpdateRequest,
    ) -> DailyBudgetUpdateResponse:
        """
        Set one date's daily_total, creating its snapshot when missing.

        With apply_forward the later snapshots of the same month that already
        exist get the same total, and so does the month's daily default
        (the month profile is created when missing).
        monthly_total never changes here.
        """
        monthly_repo = MonthlyBudgetRepository(db)
        daily_repo = DailyBudgetRepository(db)
        affected = 1
        try:
            profile = monthly_repo.get_for_month(
                user_id, on_date.year, on_date.month, with_lock=True
            )
            if request.apply_forward and profile is None:
                profile = BudgetService._ensure_profile(
                    db, user_id, on_date.year, on_date.month
                )
            BudgetService._upsert_day(db, user_id, on_date, request.daily_total, {}, profile)

            if request.apply_forward:
                if on_date < _last_day_of_month(on_date):
                    later = daily_repo.get_range(
                        user_id, on_date + timedelta(days=1), _last_day_of_month(on_date)
                    )
                    for snapshot in later:
                        snapshot.daily_total = request.daily_total
                    affected += len(later)
                profile.daily_total = request.daily_total
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Concurrent budget write for {on_date}; retry")
        except Exception:
            db.rollback()
            logger.exception("Error updating daily budget %s for user %s", on_date, user_id)
            raise

        return DailyBudgetUpdateResponse(
            target_date=on_date,
            daily_total=request.daily_total,
            affected_dates_count=affected,
        )

    @staticmethod
    def debit(
        db: Session,
        user_id: uuid.UUID,
        on_date: date,
        meal_type: MealType,
        amount: int,
    ) -> BudgetSummary:
        """
        Charge amount to one meal bucket of on_date and to the owning month.

        Runs inside the caller's transaction and does not commit. A missing
        month profile or snapshot is created first (zero allocation when the
        month has no profile).
        """
        profile = BudgetService._ensure_profile(db, user_id, on_date.year, on_date.month)
        snapshot = DailyBudgetRepository(db).get_for_date(user_id, on_date, with_lock=True)
        if snapshot is None:
            snapshot, _ = BudgetService._upsert_day(
                db, user_id, on_date, profile.daily_total, {}, profile
            )
        bucket = snapshot.meal(meal_type)
        if bucket is None:
            bucket = MealBudget(meal_type=meal_type, budget=0, spent=0)
            snapshot.meal_budgets.append(bucket)

        meal_before = bucket.budget - bucket.spent
        daily_before = snapshot.remaining_budget
        monthly_before = profile.monthly_total - profile.total_spent

        bucket.spent += amount
        snapshot.total_spent += amount
        profile.total_spent += amount
        db.flush()

        return BudgetSummary(
            meal_type=meal_type,
            meal_budget=bucket.budget,
            meal_spent=bucket.spent,
            meal_remaining_before=meal_before,
            meal_remaining_after=bucket.remaining,
            daily_budget=snapshot.daily_total,
            daily_spent=snapshot.total_spent,
            daily_remaining_before=daily_before,
            daily_remaining_after=snapshot.remaining_budget,
            monthly_budget=profile.monthly_total,
            monthly_spent=profile.total_spent,
            monthly_remaining_before=monthly_before,
            monthly_remaining_after=profile.monthly_total - profile.total_spent,
        )

    @staticmethod
    def _ensure_profile(
        db: Session, user_id: uuid.UUID, year: int, month: int
    ) -> MonthlyBudget:
        repo = MonthlyBudgetRepository(db)
        profile = repo.get_for_month(user_id, year, month, with_lock=True)
        if profile is None:
            profile = repo.add(
                MonthlyBudget(
                    user_id=user_id,
                    year=year,
                    month=month,
                    monthly_total=0,
                    daily_total=0,
                    total_spent=0,
                )
            )
        return profile

    @staticmethod
    def _upsert_day(
        db: Session,
        user_id: uuid.UUID,
        on_date: date,
        daily_total: int,
        meal_budgets: Dict[MealType, int],
        profile: Optional[MonthlyBudget],
    ) -> Tuple[DailyBudget, bool]:
        """
        Write the allocation of one date. An existing snapshot keeps its spent
        amounts and any bucket not named in meal_budgets; a new one starts from
        the month's meal defaults.
        """
        repo = DailyBudgetRepository(db)
        snapshot = repo.get_for_date(user_id, on_date, with_lock=True)
        if snapshot is not None:
            snapshot.daily_total = daily_total
            for meal_type, amount in meal_budgets.items():
                bucket = snapshot.meal(meal_type)
                if bucket is None:
                    snapshot.meal_budgets.append(
                        MealBudget(meal_type=meal_type, budget=amount, spent=0)
                    )
                else:
                    bucket.budget = amount
            db.flush()
            return snapshot, False

        allocation = _meal_defaults(profile)
        allocation.update(meal_budgets)
        snapshot = repo.add(
            DailyBudget(
                user_id=user_id,
                budget_date=on_date,
                daily_total=daily_total,
                total_spent=0,
                meal_budgets=[
                    MealBudget(meal_type=m, budget=allocation[m], spent=0)
                    for m in MealType
                ],
            )
        )
        return snapshot, True
