"""Client view of the budget ledger"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Optional, Tuple

from client.api_client import ApiClient, build_request
from client.errors import ClientError, ErrorKind
from domain.enums import MealType
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

logger = logging.getLogger("mealbudget.client.budget")


class BudgetLedger:
    """
    Reads and writes budgets through the API with a small read-through cache.

    A missing monthly profile or daily snapshot is a normal answer (None), not
    an error. Writes go one at a time; reads run concurrently. Cached entries of
    a month are dropped after any write touching it and after a checkout.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self._write_lock = asyncio.Lock()
        self._daily: Dict[date, Optional[DailyBudgetResponse]] = {}
        self._monthly: Dict[Tuple[int, int], Optional[MonthlyBudgetResponse]] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_monthly_budget(
        self, year: Optional[int] = None, month: Optional[int] = None, refresh: bool = False
    ) -> Optional[MonthlyBudgetResponse]:
        today = date.today()
        key = (year or today.year, month or today.month)
        if not refresh and key in self._monthly:
            return self._monthly[key]

        try:
            data = await self.api.get(
                "/budgets/monthly", params={"year": key[0], "month": key[1]}
            )
            budget = MonthlyBudgetResponse.model_validate(data)
        except ClientError as exc:
            if exc.kind != ErrorKind.NOT_FOUND:
                raise
            budget = None
        self._monthly[key] = budget
        return budget

    async def get_daily_budget(
        self, on_date: date, refresh: bool = False
    ) -> Optional[DailyBudgetResponse]:
        if not refresh and on_date in self._daily:
            return self._daily[on_date]

        try:
            data = await self.api.get("/budgets/daily", params={"date": on_date.isoformat()})
            snapshot = DailyBudgetResponse.model_validate(data)
        except ClientError as exc:
            if exc.kind != ErrorKind.NOT_FOUND:
                raise
            snapshot = None
        self._daily[on_date] = snapshot
        return snapshot

    async def get_daily_budgets(
        self, dates: Iterable[date], refresh: bool = False
    ) -> Dict[date, Optional[DailyBudgetResponse]]:
        """Fetch several dates concurrently"""
        unique = list(dict.fromkeys(dates))
        results = await asyncio.gather(
            *(self.get_daily_budget(d, refresh=refresh) for d in unique)
        )
        return dict(zip(unique, results))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert_monthly_budget(
        self,
        monthly_total: int,
        daily_total: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> MonthlyBudgetResponse:
        """Set a month's total; daily_total defaults server-side to monthly_total // 30"""
        request = build_request(
            MonthlyBudgetUpsertRequest,
            year=year,
            month=month,
            monthly_total=monthly_total,
            daily_total=daily_total,
        )
        async with self._write_lock:
            data = await self.api.put(
                "/budgets/monthly", json=request.model_dump(mode="json", exclude_none=True)
            )
        budget = MonthlyBudgetResponse.model_validate(data)
        self._monthly[(budget.year, budget.month)] = budget
        return budget

    async def set_meal_budgets(
        self,
        meal_budgets: Dict[MealType, int],
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> MonthlyBudgetResponse:
        request = build_request(
            MealBudgetsRequest, year=year, month=month, meal_budgets=meal_budgets
        )
        async with self._write_lock:
            data = await self.api.put(
                "/budgets/monthly/meals",
                json=request.model_dump(mode="json", exclude_none=True),
            )
        budget = MonthlyBudgetResponse.model_validate(data)
        self._monthly[(budget.year, budget.month)] = budget
        return budget

    async def bulk_set_daily_budget(
        self,
        start_date: date,
        end_date: date,
        daily_total: int,
        meal_budgets: Optional[Dict[MealType, int]] = None,
    ) -> DailyBudgetBulkResponse:
        request = build_request(
            DailyBudgetBulkRequest,
            start_date=start_date,
            end_date=end_date,
            daily_total=daily_total,
            meal_budgets=meal_budgets or {},
        )
        if start_date > end_date:
            raise ClientError(ErrorKind.VALIDATION, "start_date must not be after end_date")
        async with self._write_lock:
            data = await self.api.post(
                "/budgets/daily/bulk", json=request.model_dump(mode="json")
            )
        self._invalidate_range(start_date, end_date)
        return DailyBudgetBulkResponse.model_validate(data)

    async def update_daily_budget(
        self, on_date: date, daily_total: int, apply_forward: bool = False
    ) -> DailyBudgetUpdateResponse:
        """
        Set one date's total. The server upserts, so this works the same whether
        or not the date already has a snapshot.
        """
        request = build_request(
            DailyBudgetUpdateRequest, daily_total=daily_total, apply_forward=apply_forward
        )
        async with self._write_lock:
            data = await self.api.put(
                f"/budgets/daily/{on_date.isoformat()}",
                json=request.model_dump(mode="json"),
            )
        if apply_forward:
            self.invalidate_month(on_date.year, on_date.month)
        else:
            self.invalidate(on_date)
        return DailyBudgetUpdateResponse.model_validate(data)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def invalidate(self, on_date: Optional[date] = None) -> None:
        """Drop the cached snapshot of on_date and its month's profile; None drops everything"""
        if on_date is None:
            self._daily.clear()
            self._monthly.clear()
            return
        self._daily.pop(on_date, None)
        self._monthly.pop((on_date.year, on_date.month), None)

    def invalidate_month(self, year: int, month: int) -> None:
        self._monthly.pop((year, month), None)
        for cached in [d for d in self._daily if (d.year, d.month) == (year, month)]:
            del self._daily[cached]

    def _invalidate_range(self, start_date: date, end_date: date) -> None:
        day = start_date
        while day <= end_date:
            self._daily.pop(day, None)
            day += timedelta(days=1)
        self._monthly.pop((start_date.year, start_date.month), None)
        self._monthly.pop((end_date.year, end_date.month), None)
