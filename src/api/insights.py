from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_principal, get_insights_service
from src.core.access import Operation, require_capability
from src.models.entities import UserRecord
from src.schemas.insights import SalesInsightResponse
from src.services.insights_service import InsightsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("/summary")
async def insight_summary(
    principal: UserRecord = Depends(get_current_principal),
    service: InsightsService = Depends(get_insights_service),
) -> ResponseEnvelope[SalesInsightResponse]:
    require_capability(principal.role, Operation.VIEW_INSIGHTS)
    data = await service.get_recent_insight()
    return ResponseEnvelope(data=data, meta=build_meta("sales_records", "trailing", degraded=data.is_fallback))


@router.get("/range")
async def insight_for_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    principal: UserRecord = Depends(get_current_principal),
    service: InsightsService = Depends(get_insights_service),
) -> ResponseEnvelope[SalesInsightResponse]:
    require_capability(principal.role, Operation.VIEW_INSIGHTS)
    data = await service.get_insight_for_range(start_date, end_date)
    meta = build_meta("sales_records", f"{start_date}..{end_date}", degraded=data.is_fallback)
    return ResponseEnvelope(data=data, meta=meta)
