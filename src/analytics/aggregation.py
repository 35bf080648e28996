"""Period-scoped grouping and summing of sales records.

Groups with no matching record are absent from every result, never
zero-filled. Callers present an absent group as 0 (``total_or_zero``) or
"N/A" names.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Literal, Optional, Tuple

from src.models.entities import SalesRecordRecord
from src.shared.time import PeriodWindow

GroupBy = Literal["agent", "coordinator", "branch", "none"]
Metric = Literal["sales_amount", "new_registrations"]

_GROUP_KEYS: Dict[str, Callable[[SalesRecordRecord], Optional[str]]] = {
    "agent": lambda record: record.agent_id,
    "coordinator": lambda record: record.coordinator_id,
    "branch": lambda record: record.branch_id,
    "none": lambda record: None,
}


@dataclass(frozen=True)
class ScopeFilter:
    branch_id: Optional[str] = None
    coordinator_id: Optional[str] = None

    def matches(self, record: SalesRecordRecord) -> bool:
        if self.branch_id is not None and record.branch_id != self.branch_id:
            return False
        if self.coordinator_id is not None and record.coordinator_id != self.coordinator_id:
            return False
        return True


GLOBAL_SCOPE = ScopeFilter()


@dataclass
class AggregateRow:
    group_key: Optional[str]
    total: float = 0.0
    sales_amount: float = 0.0
    new_registrations: int = 0
    record_count: int = 0
    name: Optional[str] = None


@dataclass(frozen=True)
class DailyTotal:
    day: date
    total_sales: float
    record_count: int


def aggregate(
    records: Iterable[SalesRecordRecord],
    window: PeriodWindow,
    group_by: GroupBy,
    metric: Metric,
    scope: ScopeFilter = GLOBAL_SCOPE,
    limit: Optional[int] = None,
) -> List[AggregateRow]:
    if group_by not in _GROUP_KEYS:
        raise ValueError(f"Unsupported group_by: {group_by}")
    if metric not in ("sales_amount", "new_registrations"):
        raise ValueError(f"Unsupported metric: {metric}")

    key_of = _GROUP_KEYS[group_by]
    groups: Dict[Optional[str], AggregateRow] = {}
    for record in records:
        if not window.contains(record.date) or not scope.matches(record):
            continue
        key = key_of(record)
        row = groups.get(key)
        if row is None:
            row = groups[key] = AggregateRow(group_key=key)
        row.sales_amount += record.sales_amount
        row.new_registrations += record.new_registrations
        row.record_count += 1

    for row in groups.values():
        row.total = row.sales_amount if metric == "sales_amount" else row.new_registrations

    # sorted() is stable with reverse=True, so ties keep first-seen order.
    ranked = sorted(groups.values(), key=lambda row: row.total, reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def total_or_zero(rows: List[AggregateRow]) -> float:
    return rows[0].total if rows else 0


def monthly_totals(
    records: Iterable[SalesRecordRecord],
    window: PeriodWindow,
    metric: Metric = "sales_amount",
    scope: ScopeFilter = GLOBAL_SCOPE,
) -> List[Tuple[Tuple[int, int], float]]:
    buckets: Dict[Tuple[int, int], float] = defaultdict(float)
    for record in records:
        if window.contains(record.date) and scope.matches(record):
            buckets[(record.date.year, record.date.month)] += getattr(record, metric)
    return [(month, buckets[month]) for month in sorted(buckets)]


def daily_totals(
    records: Iterable[SalesRecordRecord],
    window: PeriodWindow,
    scope: ScopeFilter = GLOBAL_SCOPE,
) -> List[DailyTotal]:
    sales: Dict[date, float] = defaultdict(float)
    counts: Dict[date, int] = defaultdict(int)
    for record in records:
        if window.contains(record.date) and scope.matches(record):
            sales[record.date] += record.sales_amount
            counts[record.date] += 1
    return [DailyTotal(day=day, total_sales=sales[day], record_count=counts[day]) for day in sorted(sales)]
