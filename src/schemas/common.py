from __future__ import annotations

from typing import Optional

from src.shared.base import BaseSchema


class EntityRef(BaseSchema):
    id: str
    name: Optional[str] = None


class AgentPerformanceRow(BaseSchema):
    agent_id: Optional[str] = None
    agent_name: str = "N/A"
    total_sales: float = 0
    total_registrations: int = 0


class BranchSalesRow(BaseSchema):
    branch_id: Optional[str] = None
    branch_name: str = "N/A"
    total_sales: float = 0
