from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_principal, get_reports_service
from src.core.access import Operation, require_capability
from src.models.entities import UserRecord
from src.services.reports_service import ReportsService, ReportSummary
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary")
async def report_summary(
    period: str = Query(default="monthly"),
    principal: UserRecord = Depends(get_current_principal),
    service: ReportsService = Depends(get_reports_service),
) -> ResponseEnvelope[ReportSummary]:
    require_capability(principal.role, Operation.VIEW_REPORT)
    data = await service.get_summary(principal, period)
    return ResponseEnvelope(data=data, meta=build_meta("sales_records,targets", period))
