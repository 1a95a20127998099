"""
Tests for BudgetService: monthly profiles, daily snapshots and their upserts.

Dates are pinned to March 2026 so month boundaries are predictable.
"""

from datetime import date

import pytest
from sqlalchemy.orm import Session

from test_fixtures import db_session, session_factory, make_user
from test_constants import (
    DAILY_OVERRIDE,
    DERIVED_DAILY_BUDGET,
    MEAL_DEFAULTS,
    MONTHLY_BUDGET,
)
from app.exceptions import ServiceValidationError
from domain.enums import MealType
from domain.models import DailyBudget, MonthlyBudget
from domain.schemas.budget_schemas import (
    DailyBudgetBulkRequest,
    DailyBudgetUpdateRequest,
    MealBudgetsRequest,
    MonthlyBudgetUpsertRequest,
)
from services.budget_service import BudgetService

MARCH_10 = date(2026, 3, 10)


def _monthly(db, user, monthly_total, daily_total=None):
    return BudgetService.upsert_monthly_budget(
        db,
        user.user_id,
        MonthlyBudgetUpsertRequest(
            year=2026, month=3, monthly_total=monthly_total, daily_total=daily_total
        ),
        today=MARCH_10,
    )


def test_monthly_budget_derives_daily_total(db_session: Session):
    """
    Verifies:
    - daily_total defaults to floor(monthly_total / 30)
    - Remaining, utilization and days remaining are derived
    """
    user = make_user(db_session)

    budget = _monthly(db_session, user, MONTHLY_BUDGET)

    assert budget.monthly_total == MONTHLY_BUDGET
    assert budget.daily_total == DERIVED_DAILY_BUDGET
    assert budget.total_spent == 0
    assert budget.remaining_budget == MONTHLY_BUDGET
    assert budget.utilization_rate == 0.0
    assert budget.days_remaining == 22
    assert budget.meal_budgets[MealType.LUNCH] == 0


def test_monthly_budget_floor_division(db_session: Session):
    user = make_user(db_session)
    assert _monthly(db_session, user, 100).daily_total == 3


def test_explicit_daily_override_keeps_monthly_total(db_session: Session):
    user = make_user(db_session)

    budget = _monthly(db_session, user, MONTHLY_BUDGET, daily_total=DAILY_OVERRIDE)

    assert budget.daily_total == DAILY_OVERRIDE
    assert budget.monthly_total == MONTHLY_BUDGET


def test_monthly_upsert_updates_single_profile(db_session: Session):
    user = make_user(db_session)

    _monthly(db_session, user, MONTHLY_BUDGET)
    updated = _monthly(db_session, user, 450_000)

    assert updated.daily_total == 15_000
    assert db_session.query(MonthlyBudget).filter_by(user_id=user.user_id).count() == 1


def test_get_monthly_budget_absent_is_none(db_session: Session):
    user = make_user(db_session)
    assert BudgetService.get_monthly_budget(db_session, user.user_id, 2026, 3) is None


def test_set_meal_budgets_creates_profile_and_defaults(db_session: Session):
    user = make_user(db_session)

    budget = BudgetService.set_meal_budgets(
        db_session,
        user.user_id,
        MealBudgetsRequest(year=2026, month=3, meal_budgets=MEAL_DEFAULTS),
        today=MARCH_10,
    )

    assert budget.monthly_total == 0
    assert budget.meal_budgets == MEAL_DEFAULTS

    again = BudgetService.set_meal_budgets(
        db_session,
        user.user_id,
        MealBudgetsRequest(year=2026, month=3, meal_budgets={MealType.LUNCH: 6_000}),
        today=MARCH_10,
    )
    assert again.meal_budgets[MealType.LUNCH] == 6_000
    assert again.meal_budgets[MealType.DINNER] == MEAL_DEFAULTS[MealType.DINNER]


def test_get_daily_budget_absent_is_none(db_session: Session):
    user = make_user(db_session)
    assert BudgetService.get_daily_budget(db_session, user.user_id, MARCH_10) is None


def test_bulk_set_creates_then_updates_without_duplicates(db_session: Session):
    """
    Verifies:
    - First run creates one snapshot per date
    - Re-running the same range updates in place
    - Exactly one snapshot per date exists afterwards
    """
    user = make_user(db_session)
    request = DailyBudgetBulkRequest(
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 7),
        daily_total=DERIVED_DAILY_BUDGET,
        meal_budgets={MealType.LUNCH: 5_000},
    )

    first = BudgetService.bulk_set_daily_budget(db_session, user.user_id, request)
    second = BudgetService.bulk_set_daily_budget(db_session, user.user_id, request)

    assert (first.created_count, first.updated_count) == (7, 0)
    assert (second.created_count, second.updated_count) == (0, 7)
    assert second.daily_budget_count == 7
    assert db_session.query(DailyBudget).filter_by(user_id=user.user_id).count() == 7

    snapshot = BudgetService.get_daily_budget(db_session, user.user_id, date(2026, 3, 4))
    assert snapshot.daily_total == DERIVED_DAILY_BUDGET
    assert snapshot.meal(MealType.LUNCH).budget == 5_000
    assert snapshot.meal(MealType.DINNER).budget == 0


def test_bulk_set_preserves_spent_amounts(db_session: Session):
    user = make_user(db_session)
    request = DailyBudgetBulkRequest(
        start_date=MARCH_10, end_date=MARCH_10, daily_total=DERIVED_DAILY_BUDGET
    )
    BudgetService.bulk_set_daily_budget(db_session, user.user_id, request)
    BudgetService.debit(db_session, user.user_id, MARCH_10, MealType.DINNER, 4_200)
    db_session.commit()

    BudgetService.bulk_set_daily_budget(
        db_session,
        user.user_id,
        DailyBudgetBulkRequest(
            start_date=MARCH_10,
            end_date=MARCH_10,
            daily_total=20_000,
            meal_budgets={MealType.DINNER: 8_000},
        ),
    )

    snapshot = BudgetService.get_daily_budget(db_session, user.user_id, MARCH_10)
    assert snapshot.daily_total == 20_000
    assert snapshot.total_spent == 4_200
    assert snapshot.remaining_budget == 15_800
    assert snapshot.meal(MealType.DINNER).spent == 4_200
    assert snapshot.meal(MealType.DINNER).remaining == 3_800


def test_bulk_set_new_snapshots_take_month_meal_defaults(db_session: Session):
    user = make_user(db_session)
    BudgetService.set_meal_budgets(
        db_session,
        user.user_id,
        MealBudgetsRequest(year=2026, month=3, meal_budgets=MEAL_DEFAULTS),
        today=MARCH_10,
    )

    BudgetService.bulk_set_daily_budget(
        db_session,
        user.user_id,
        DailyBudgetBulkRequest(
            start_date=MARCH_10,
            end_date=MARCH_10,
            daily_total=15_000,
            meal_budgets={MealType.OTHER: 1_000},
        ),
    )

    snapshot = BudgetService.get_daily_budget(db_session, user.user_id, MARCH_10)
    assert snapshot.meal(MealType.BREAKFAST).budget == MEAL_DEFAULTS[MealType.BREAKFAST]
    assert snapshot.meal(MealType.DINNER).budget == MEAL_DEFAULTS[MealType.DINNER]
    assert snapshot.meal(MealType.OTHER).budget == 1_000


def test_bulk_set_rejects_bad_ranges(db_session: Session):
    user = make_user(db_session)

    with pytest.raises(ServiceValidationError):
        BudgetService.bulk_set_daily_budget(
            db_session,
            user.user_id,
            DailyBudgetBulkRequest(
                start_date=date(2026, 3, 5), end_date=date(2026, 3, 1), daily_total=1
            ),
        )
    with pytest.raises(ServiceValidationError):
        BudgetService.bulk_set_daily_budget(
            db_session,
            user.user_id,
            DailyBudgetBulkRequest(
                start_date=date(2025, 1, 1),
                end_date=date(2026, 12, 31),
                daily_total=1,
            ),
        )
    assert db_session.query(DailyBudget).count() == 0


def test_update_daily_budget_on_absent_date_matches_one_day_bulk(db_session: Session):
    """
    Verifies:
    - Updating a date with no snapshot creates it
    - The result equals a one-day bulk set with the month's meal defaults
    """
    user = make_user(db_session)
    BudgetService.set_meal_budgets(
        db_session,
        user.user_id,
        MealBudgetsRequest(year=2026, month=3, meal_budgets=MEAL_DEFAULTS),
        today=MARCH_10,
    )

    result = BudgetService.update_daily_budget(
        db_session,
        user.user_id,
        date(2026, 3, 11),
        DailyBudgetUpdateRequest(daily_total=DAILY_OVERRIDE),
    )
    BudgetService.bulk_set_daily_budget(
        db_session,
        user.user_id,
        DailyBudgetBulkRequest(
            start_date=date(2026, 3, 12),
            end_date=date(2026, 3, 12),
            daily_total=DAILY_OVERRIDE,
            meal_budgets=MEAL_DEFAULTS,
        ),
    )

    assert result.target_date == date(2026, 3, 11)
    assert result.affected_dates_count == 1
    via_update = BudgetService.get_daily_budget(db_session, user.user_id, date(2026, 3, 11))
    via_bulk = BudgetService.get_daily_budget(db_session, user.user_id, date(2026, 3, 12))
    assert via_update.model_dump(exclude={"budget_date"}) == via_bulk.model_dump(
        exclude={"budget_date"}
    )


def test_update_daily_budget_without_forward_touches_one_day(db_session: Session):
    user = make_user(db_session)
    _monthly(db_session, user, MONTHLY_BUDGET)
    BudgetService.bulk_set_daily_budget(
        db_session,
        user.user_id,
        DailyBudgetBulkRequest(
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 3),
            daily_total=DERIVED_DAILY_BUDGET,
        ),
    )

    BudgetService.update_daily_budget(
        db_session,
        user.user_id,
        date(2026, 3, 2),
        DailyBudgetUpdateRequest(daily_total=DAILY_OVERRIDE),
    )

    day3 = BudgetService.get_daily_budget(db_session, user.user_id, date(2026, 3, 3))
    assert day3.daily_total == DERIVED_DAILY_BUDGET
    profile = BudgetService.get_monthly_budget(db_session, user.user_id, 2026, 3)
    assert profile.daily_total == DERIVED_DAILY_BUDGET


def test_update_daily_budget_apply_forward(db_session: Session):
    """
    Verifies:
    - Later snapshots of the same month get the new total
    - Earlier snapshots and other months are untouched
    - The month's daily default changes, its monthly total does not
    """
    user = make_user(db_session)
    _monthly(db_session, user, MONTHLY_BUDGET)
    BudgetService.bulk_set_daily_budget(
        db_session,
        user.user_id,
        DailyBudgetBulkRequest(
            start_date=date(2026, 3, 28),
            end_date=date(2026, 4, 2),
            daily_total=DERIVED_DAILY_BUDGET,
        ),
    )

    result = BudgetService.update_daily_budget(
        db_session,
        user.user_id,
        date(2026, 3, 29),
        DailyBudgetUpdateRequest(daily_total=DAILY_OVERRIDE, apply_forward=True),
    )

    assert result.affected_dates_count == 3  # 29th, 30th, 31st
    totals = {
        d.budget_date: d.daily_total
        for d in db_session.query(DailyBudget).filter_by(user_id=user.user_id)
    }
    assert totals[date(2026, 3, 28)] == DERIVED_DAILY_BUDGET
    assert totals[date(2026, 3, 29)] == DAILY_OVERRIDE
    assert totals[date(2026, 3, 31)] == DAILY_OVERRIDE
    assert totals[date(2026, 4, 1)] == DERIVED_DAILY_BUDGET

    profile = BudgetService.get_monthly_budget(db_session, user.user_id, 2026, 3)
    assert profile.daily_total == DAILY_OVERRIDE
    assert profile.monthly_total == MONTHLY_BUDGET


def test_apply_forward_without_profile_sets_month_default(db_session: Session):
    """
    Verifies:
    - apply_forward on a month with no profile creates one
    - A date first touched later (by a checkout) starts from the new total
    """
    user = make_user(db_session)

    BudgetService.update_daily_budget(
        db_session,
        user.user_id,
        MARCH_10,
        DailyBudgetUpdateRequest(daily_total=DAILY_OVERRIDE, apply_forward=True),
    )

    profile = BudgetService.get_monthly_budget(db_session, user.user_id, 2026, 3)
    assert profile is not None
    assert profile.daily_total == DAILY_OVERRIDE
    assert profile.monthly_total == 0

    summary = BudgetService.debit(
        db_session, user.user_id, date(2026, 3, 20), MealType.DINNER, 5_000
    )
    db_session.commit()
    assert summary.daily_budget == DAILY_OVERRIDE
    assert summary.daily_remaining_after == DAILY_OVERRIDE - 5_000


def test_update_without_forward_leaves_month_without_profile(db_session: Session):
    user = make_user(db_session)

    BudgetService.update_daily_budget(
        db_session,
        user.user_id,
        MARCH_10,
        DailyBudgetUpdateRequest(daily_total=DAILY_OVERRIDE),
    )

    assert BudgetService.get_monthly_budget(db_session, user.user_id, 2026, 3) is None


def test_debit_creates_missing_profile_and_snapshot(db_session: Session):
    user = make_user(db_session)

    summary = BudgetService.debit(db_session, user.user_id, MARCH_10, MealType.LUNCH, 7_000)
    db_session.commit()

    assert summary.meal_budget == 0
    assert summary.meal_spent == 7_000
    assert summary.meal_remaining_after == -7_000
    assert summary.monthly_spent == 7_000
    snapshot = BudgetService.get_daily_budget(db_session, user.user_id, MARCH_10)
    assert snapshot.total_spent == 7_000
    assert len(snapshot.meal_budgets) == len(MealType)
