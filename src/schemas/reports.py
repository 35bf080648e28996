from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from src.schemas.common import AgentPerformanceRow, BranchSalesRow
from src.shared.base import BaseSchema


class ReportPeriod(BaseSchema):
    type: str
    year: int
    month: int
    month_name: str
    start_date: datetime
    end_date: datetime


class AdminReportSummary(BaseSchema):
    view: Literal["admin"] = "admin"
    total_sales: float
    avg_monthly_sales: int
    top_performing_branch: BranchSalesRow
    new_registrations: int
    branch_sales_for_chart: List[BranchSalesRow]
    last_updated: datetime
    period: ReportPeriod


class BranchManagerReportSummary(BaseSchema):
    view: Literal["branch_manager"] = "branch_manager"
    branch_sales: float
    top_agent: AgentPerformanceRow
    target_achievement: float
    branch_target: float
    new_registrations: int
    agent_performance_chart: List[AgentPerformanceRow]
    last_updated: datetime
    period: ReportPeriod


class CoordinatorReportSummary(BaseSchema):
    view: Literal["coordinator"] = "coordinator"
    team_sales: float
    top_agent_in_team: AgentPerformanceRow
    team_achievement_percentage: float
    new_registrations: int
    agent_performance_data: List[AgentPerformanceRow]
    current_target: float
    last_updated: datetime
    period: ReportPeriod
