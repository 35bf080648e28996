from __future__ import annotations

import asyncio
import calendar
from datetime import datetime
from typing import List, Union

from src.analytics.aggregation import AggregateRow, ScopeFilter
from src.analytics.targets import achievement_percentage, find_current_target
from src.core.access import Role, require_branch_scope
from src.core.errors import ForbiddenError
from src.models.entities import UserRecord
from src.repositories.targets_repository import TargetsRepository
from src.schemas.common import AgentPerformanceRow, BranchSalesRow
from src.schemas.reports import (
    AdminReportSummary,
    BranchManagerReportSummary,
    CoordinatorReportSummary,
    ReportPeriod,
)
from src.services.aggregation_service import AggregationService
from src.shared.time import Clock, PeriodWindow, resolve_period, system_clock, validate_period

REPORT_PERIODS = ("monthly", "ytd")

ReportSummary = Union[AdminReportSummary, BranchManagerReportSummary, CoordinatorReportSummary]


class ReportsService:
    def __init__(
        self,
        aggregation_service: AggregationService,
        targets_repository: TargetsRepository,
        clock: Clock = system_clock,
    ) -> None:
        self.aggregation_service = aggregation_service
        self.targets_repository = targets_repository
        self.clock = clock

    async def get_summary(self, principal: UserRecord, period: str) -> ReportSummary:
        if principal.role is Role.ADMIN:
            return await self.get_admin_report(period)
        if principal.role is Role.BRANCH_MANAGER:
            return await self.get_branch_manager_report(principal, period)
        if principal.role is Role.COORDINATOR:
            return await self.get_coordinator_report(principal, period)
        raise ForbiddenError("Reports are not available for this role")

    async def get_admin_report(self, period: str) -> AdminReportSummary:
        validate_period(period, REPORT_PERIODS)
        now = self.clock()
        window = resolve_period(period, now)
        agg = self.aggregation_service

        total_sales, monthly, top_branch, new_registrations, branch_chart = await asyncio.gather(
            agg.total(window, "sales_amount"),
            agg.monthly_totals(window, "sales_amount"),
            agg.aggregate(window, "branch", "sales_amount", limit=1),
            agg.total(window, "new_registrations"),
            agg.aggregate(window, "branch", "sales_amount"),
        )

        avg_monthly_sales = sum(total for _, total in monthly) / len(monthly) if monthly else 0
        return AdminReportSummary(
            total_sales=total_sales,
            avg_monthly_sales=round(avg_monthly_sales),
            top_performing_branch=branch_sales_row(top_branch[0]) if top_branch else BranchSalesRow(),
            new_registrations=int(new_registrations),
            branch_sales_for_chart=[branch_sales_row(row) for row in branch_chart],
            last_updated=now,
            period=_report_period(period, now, window),
        )

    async def get_branch_manager_report(self, manager: UserRecord, period: str) -> BranchManagerReportSummary:
        validate_period(period, REPORT_PERIODS)
        branch_id = require_branch_scope(manager.branch_id, "User is not assigned to a branch.")
        now = self.clock()
        window = resolve_period(period, now)
        scope = ScopeFilter(branch_id=branch_id)
        agg = self.aggregation_service

        branch_sales, top_agent, branch_targets, new_registrations, agent_chart = await asyncio.gather(
            agg.total(window, "sales_amount", scope=scope),
            agg.aggregate(window, "agent", "sales_amount", scope=scope, limit=1),
            self.targets_repository.list_targets(branch_id=branch_id, target_type="sales"),
            agg.total(window, "new_registrations", scope=scope),
            agg.aggregate(window, "agent", "sales_amount", scope=scope),
        )

        current_target = find_current_target(branch_targets, "sales", now.date())
        branch_target = current_target.amount if current_target else 0
        return BranchManagerReportSummary(
            branch_sales=branch_sales,
            top_agent=_agent_row(top_agent[0]) if top_agent else AgentPerformanceRow(),
            target_achievement=round(achievement_percentage(branch_sales, branch_target), 1),
            branch_target=branch_target,
            new_registrations=int(new_registrations),
            agent_performance_chart=_agent_rows(agent_chart),
            last_updated=now,
            period=_report_period(period, now, window),
        )

    async def get_coordinator_report(self, coordinator: UserRecord, period: str) -> CoordinatorReportSummary:
        validate_period(period, REPORT_PERIODS)
        require_branch_scope(coordinator.branch_id, "Coordinator must be assigned to a branch")
        now = self.clock()
        window = resolve_period(period, now)
        scope = ScopeFilter(coordinator_id=coordinator.id)
        agg = self.aggregation_service

        team_sales, top_agent, coordinator_targets, new_registrations, agent_rows = await asyncio.gather(
            agg.total(window, "sales_amount", scope=scope),
            agg.aggregate(window, "agent", "sales_amount", scope=scope, limit=1),
            self.targets_repository.list_targets(coordinator_ids=[coordinator.id], target_type="sales"),
            agg.total(window, "new_registrations", scope=scope),
            agg.aggregate(window, "agent", "sales_amount", scope=scope),
        )

        current_target = find_current_target(coordinator_targets, "sales", now.date())
        target_amount = current_target.amount if current_target else 0
        return CoordinatorReportSummary(
            team_sales=team_sales,
            top_agent_in_team=_agent_row(top_agent[0]) if top_agent else AgentPerformanceRow(),
            team_achievement_percentage=round(achievement_percentage(team_sales, target_amount), 1),
            new_registrations=int(new_registrations),
            agent_performance_data=_agent_rows(agent_rows),
            current_target=target_amount,
            last_updated=now,
            period=_report_period(period, now, window),
        )


def _agent_row(row: AggregateRow) -> AgentPerformanceRow:
    return AgentPerformanceRow(
        agent_id=row.group_key,
        agent_name=row.name or "N/A",
        total_sales=row.sales_amount,
        total_registrations=row.new_registrations,
    )


def _agent_rows(rows: List[AggregateRow]) -> List[AgentPerformanceRow]:
    return [_agent_row(row) for row in rows]


def branch_sales_row(row: AggregateRow) -> BranchSalesRow:
    return BranchSalesRow(branch_id=row.group_key, branch_name=row.name or "N/A", total_sales=row.sales_amount)


def _report_period(period: str, now: datetime, window: PeriodWindow) -> ReportPeriod:
    return ReportPeriod(
        type=period,
        year=now.year,
        month=now.month,
        month_name=calendar.month_name[now.month],
        start_date=window.start,
        end_date=window.end,
    )
