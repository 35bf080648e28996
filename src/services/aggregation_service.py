from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from src.analytics.aggregation import (
    GLOBAL_SCOPE,
    AggregateRow,
    DailyTotal,
    GroupBy,
    Metric,
    ScopeFilter,
    aggregate,
    daily_totals,
    monthly_totals,
    total_or_zero,
)
from src.models.entities import SalesRecordRecord
from src.repositories.branches_repository import BranchesRepository
from src.repositories.sales_records_repository import SalesRecordsRepository
from src.repositories.users_repository import UsersRepository
from src.shared.time import PeriodWindow


class AggregationService:
    """Runs the aggregation engine over the store and joins owner names.

    Each call issues its own store queries so callers can fan several of them
    out concurrently. Rows whose owner no longer exists are dropped.
    """

    def __init__(
        self,
        sales_records_repository: SalesRecordsRepository,
        users_repository: UsersRepository,
        branches_repository: BranchesRepository,
    ) -> None:
        self.sales_records_repository = sales_records_repository
        self.users_repository = users_repository
        self.branches_repository = branches_repository

    async def load_records(
        self, window: PeriodWindow, scope: ScopeFilter = GLOBAL_SCOPE
    ) -> List[SalesRecordRecord]:
        return await self.sales_records_repository.list_sales_records(
            start_date=window.start_date,
            end_date=window.end_date,
            branch_id=scope.branch_id,
            coordinator_id=scope.coordinator_id,
        )

    async def aggregate(
        self,
        window: PeriodWindow,
        group_by: GroupBy,
        metric: Metric,
        scope: ScopeFilter = GLOBAL_SCOPE,
        limit: Optional[int] = None,
    ) -> List[AggregateRow]:
        records = await self.load_records(window, scope)
        rows = aggregate(records, window, group_by, metric, scope=scope)
        if group_by != "none":
            rows = await self._join_names(rows, group_by)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def total(self, window: PeriodWindow, metric: Metric, scope: ScopeFilter = GLOBAL_SCOPE) -> float:
        rows = await self.aggregate(window, "none", metric, scope=scope)
        return total_or_zero(rows)

    async def monthly_totals(
        self, window: PeriodWindow, metric: Metric, scope: ScopeFilter = GLOBAL_SCOPE
    ) -> List[Tuple[Tuple[int, int], float]]:
        records = await self.load_records(window, scope)
        return monthly_totals(records, window, metric, scope=scope)

    async def daily_totals(self, window: PeriodWindow, scope: ScopeFilter = GLOBAL_SCOPE) -> List[DailyTotal]:
        records = await self.load_records(window, scope)
        return daily_totals(records, window, scope=scope)

    async def _join_names(self, rows: List[AggregateRow], group_by: GroupBy) -> List[AggregateRow]:
        keys = [row.group_key for row in rows if row.group_key]
        names: Dict[str, str]
        if group_by == "branch":
            branches = await self.branches_repository.list_branches_by_ids(keys)
            names = {branch.id: branch.name for branch in branches}
        else:
            users = await self.users_repository.list_users_by_ids(keys)
            names = {user.id: user.name for user in users}
        joined: List[AggregateRow] = []
        for row in rows:
            if row.group_key not in names:
                continue
            row.name = names[row.group_key]
            joined.append(row)
        return joined
