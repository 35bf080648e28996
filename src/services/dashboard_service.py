from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Union

from src.analytics.aggregation import AggregateRow, ScopeFilter
from src.analytics.targets import (
    achievement_percentage,
    first_of_type,
    sum_amounts,
    targets_intersecting,
    targets_within,
)
from src.core.access import Role, require_branch_scope
from src.core.errors import ForbiddenError
from src.models.entities import TargetRecord, UserRecord
from src.repositories.branches_repository import BranchesRepository
from src.repositories.targets_repository import TargetsRepository
from src.repositories.users_repository import UsersRepository
from src.schemas.dashboard import (
    AdminDashboardSummary,
    BranchManagerDashboardSummary,
    CoordinatorPerformanceRow,
    TopAgentRow,
)
from src.schemas.reports import CoordinatorReportSummary
from src.services.aggregation_service import AggregationService
from src.services.reports_service import ReportsService, branch_sales_row
from src.services.targets_service import TargetsService
from src.shared.time import Clock, resolve_period, system_clock

TOP_AGENT_LIMIT = 5

DashboardSummary = Union[AdminDashboardSummary, BranchManagerDashboardSummary, CoordinatorReportSummary]


class DashboardService:
    def __init__(
        self,
        aggregation_service: AggregationService,
        reports_service: ReportsService,
        targets_service: TargetsService,
        targets_repository: TargetsRepository,
        users_repository: UsersRepository,
        branches_repository: BranchesRepository,
        clock: Clock = system_clock,
    ) -> None:
        self.aggregation_service = aggregation_service
        self.reports_service = reports_service
        self.targets_service = targets_service
        self.targets_repository = targets_repository
        self.users_repository = users_repository
        self.branches_repository = branches_repository
        self.clock = clock

    async def get_summary(self, principal: UserRecord) -> DashboardSummary:
        if principal.role is Role.ADMIN:
            return await self.get_admin_summary()
        if principal.role is Role.BRANCH_MANAGER:
            return await self.get_branch_manager_summary(principal)
        if principal.role is Role.COORDINATOR:
            return await self.reports_service.get_coordinator_report(principal, "monthly")
        raise ForbiddenError("Dashboards are not available for this role")

    async def get_admin_summary(self) -> AdminDashboardSummary:
        window = resolve_period("monthly", self.clock())
        agg = self.aggregation_service

        user_count, branch_count, sales_this_month, branch_rows, agent_rows, sales_targets = await asyncio.gather(
            self.users_repository.count_users(),
            self.branches_repository.count_branches(),
            agg.total(window, "sales_amount"),
            agg.aggregate(window, "branch", "sales_amount"),
            agg.aggregate(window, "agent", "sales_amount"),
            self.targets_repository.list_targets(target_type="sales"),
        )

        # Personal targets are keyed on the owning user; only those inside the month count.
        monthly_targets = _targets_by_owner(targets_within(sales_targets, window))
        top_agents = [
            _top_agent_row(row, sum_amounts(monthly_targets.get(row.group_key, [])))
            for row in agent_rows
        ]
        top_agents.sort(key=lambda row: (row.achievement_percentage, row.total_sales), reverse=True)
        top_agents = top_agents[:TOP_AGENT_LIMIT]

        average_achievement = (
            sum(row.achievement_percentage for row in top_agents) / len(top_agents) if top_agents else 0
        )
        return AdminDashboardSummary(
            user_count=user_count,
            branch_count=branch_count,
            sales_this_month=sales_this_month,
            average_achievement=round(average_achievement, 1),
            branch_sales_performance=[branch_sales_row(row) for row in branch_rows],
            top_agents=top_agents,
        )

    async def get_branch_manager_summary(self, manager: UserRecord) -> BranchManagerDashboardSummary:
        branch_id = require_branch_scope(manager.branch_id, "Branch manager not assigned to a branch")
        window = resolve_period("monthly", self.clock())
        scope = ScopeFilter(branch_id=branch_id)
        agg = self.aggregation_service

        (
            branch_targets,
            sales_this_month,
            registrations_this_month,
            coordinators,
            coordinator_rows,
            branch_ranking,
        ) = await asyncio.gather(
            self.targets_repository.list_targets(branch_id=branch_id),
            agg.total(window, "sales_amount", scope=scope),
            agg.total(window, "new_registrations", scope=scope),
            self.users_repository.list_users(role=Role.COORDINATOR.value, branch_id=branch_id),
            agg.aggregate(window, "coordinator", "sales_amount", scope=scope),
            agg.aggregate(window, "branch", "sales_amount"),
        )
        coordinator_targets = await self.targets_repository.list_targets(
            coordinator_ids=[coordinator.id for coordinator in coordinators],
            target_type="sales",
        )

        coordinator_performance = _coordinator_performance(
            coordinators,
            {row.group_key: row for row in coordinator_rows},
            _targets_by_owner(targets_within(coordinator_targets, window)),
        )

        month_targets = targets_intersecting(branch_targets, window)
        sales_target = first_of_type(month_targets, "sales")
        registration_target = first_of_type(month_targets, "registration")
        return BranchManagerDashboardSummary(
            branch_targets=await self.targets_service.to_responses(month_targets),
            sales_this_month=sales_this_month,
            registrations_this_month=int(registrations_this_month),
            sales_progress_percentage=round(
                achievement_percentage(sales_this_month, sales_target.amount if sales_target else None), 1
            ),
            registration_progress_percentage=round(
                achievement_percentage(
                    registrations_this_month, registration_target.amount if registration_target else None
                ),
                1,
            ),
            coordinator_performance=coordinator_performance,
            top_coordinator=coordinator_performance[0] if coordinator_performance else None,
            branch_rank=_rank_of(branch_id, branch_ranking),
            total_branches=len(branch_ranking),
        )


def _targets_by_owner(targets: List[TargetRecord]) -> Dict[str, List[TargetRecord]]:
    grouped: Dict[str, List[TargetRecord]] = {}
    for target in targets:
        if target.coordinator_id:
            grouped.setdefault(target.coordinator_id, []).append(target)
    return grouped


def _top_agent_row(row: AggregateRow, monthly_target: float) -> TopAgentRow:
    return TopAgentRow(
        agent_id=row.group_key,
        agent_name=row.name or "N/A",
        total_sales=row.sales_amount,
        total_registrations=row.new_registrations,
        monthly_target=monthly_target,
        achievement_percentage=round(achievement_percentage(row.sales_amount, monthly_target), 1),
    )


def _coordinator_performance(
    coordinators: List[UserRecord],
    rows_by_coordinator: Dict[Optional[str], AggregateRow],
    targets_by_coordinator: Dict[str, List[TargetRecord]],
) -> List[CoordinatorPerformanceRow]:
    performance: List[CoordinatorPerformanceRow] = []
    for coordinator in coordinators:
        row = rows_by_coordinator.get(coordinator.id)
        monthly_sales = row.sales_amount if row else 0
        monthly_target = sum_amounts(targets_by_coordinator.get(coordinator.id, []))
        performance.append(
            CoordinatorPerformanceRow(
                coordinator_id=coordinator.id,
                name=coordinator.name,
                email=coordinator.email,
                monthly_sales_target=monthly_target,
                monthly_sales=monthly_sales,
                monthly_registrations=row.new_registrations if row else 0,
                sales_achievement_percentage=round(achievement_percentage(monthly_sales, monthly_target), 1),
            )
        )
    performance.sort(key=lambda item: item.sales_achievement_percentage, reverse=True)
    return performance


def _rank_of(branch_id: str, ranking: List[AggregateRow]) -> Optional[int]:
    for position, row in enumerate(ranking, start=1):
        if row.group_key == branch_id:
            return position
    return None
