from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_current_principal, get_dashboard_service
from src.core.access import Operation, require_capability
from src.models.entities import UserRecord
from src.services.dashboard_service import DashboardService, DashboardSummary
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary")
async def dashboard_summary(
    principal: UserRecord = Depends(get_current_principal),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardSummary]:
    require_capability(principal.role, Operation.VIEW_DASHBOARD)
    data = await service.get_summary(principal)
    return ResponseEnvelope(data=data, meta=build_meta("sales_records,targets,users,branches", "monthly"))
