from __future__ import annotations

from typing import List, Literal, Optional

from src.schemas.common import BranchSalesRow
from src.schemas.targets import TargetResponse
from src.shared.base import BaseSchema


class TopAgentRow(BaseSchema):
    agent_id: str
    agent_name: str
    total_sales: float
    total_registrations: int
    monthly_target: float
    achievement_percentage: float


class AdminDashboardSummary(BaseSchema):
    view: Literal["admin"] = "admin"
    user_count: int
    branch_count: int
    sales_this_month: float
    average_achievement: float
    branch_sales_performance: List[BranchSalesRow]
    top_agents: List[TopAgentRow]


class CoordinatorPerformanceRow(BaseSchema):
    coordinator_id: str
    name: str
    email: Optional[str] = None
    monthly_sales_target: float
    monthly_sales: float
    monthly_registrations: int
    sales_achievement_percentage: float


class BranchManagerDashboardSummary(BaseSchema):
    view: Literal["branch_manager"] = "branch_manager"
    branch_targets: List[TargetResponse]
    sales_this_month: float
    registrations_this_month: int
    sales_progress_percentage: float
    registration_progress_percentage: float
    coordinator_performance: List[CoordinatorPerformanceRow]
    top_coordinator: Optional[CoordinatorPerformanceRow] = None
    # None when the branch has no sales in the period and so is unranked.
    branch_rank: Optional[int] = None
    total_branches: int
