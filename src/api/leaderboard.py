from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_principal, get_leaderboard_service
from src.core.access import Operation, require_capability
from src.models.entities import UserRecord
from src.schemas.leaderboard import LeaderboardFilters, LeaderboardResponse
from src.services.leaderboard_service import LeaderboardService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def get_leaderboard_filters(
    type: str = Query(default="agents"),
    metric: str = Query(default="sales"),
    period: str = Query(default="monthly"),
) -> LeaderboardFilters:
    # Unknown values are rejected by the service with a named 400, not a 422.
    return LeaderboardFilters(type=type, metric=metric, period=period)


@router.get("")
async def leaderboard(
    filters: LeaderboardFilters = Depends(get_leaderboard_filters),
    principal: UserRecord = Depends(get_current_principal),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> ResponseEnvelope[LeaderboardResponse]:
    require_capability(principal.role, Operation.VIEW_LEADERBOARD)
    data = await service.get_leaderboard(filters)
    return ResponseEnvelope(data=data, meta=build_meta("sales_records", filters.period))
