from __future__ import annotations

from typing import Dict

from src.analytics.aggregation import GroupBy, Metric
from src.core.errors import BadRequestError
from src.schemas.leaderboard import LeaderboardEntry, LeaderboardFilters, LeaderboardResponse
from src.services.aggregation_service import AggregationService
from src.shared.time import Clock, resolve_period, system_clock, validate_period

LEADERBOARD_TYPES: Dict[str, GroupBy] = {
    "agents": "agent",
    "coordinators": "coordinator",
    "branches": "branch",
}
LEADERBOARD_METRICS: Dict[str, Metric] = {
    "sales": "sales_amount",
    "registrations": "new_registrations",
}
LEADERBOARD_PERIODS = ("weekly", "monthly", "yearly")


class LeaderboardService:
    def __init__(self, aggregation_service: AggregationService, clock: Clock = system_clock) -> None:
        self.aggregation_service = aggregation_service
        self.clock = clock

    async def get_leaderboard(self, filters: LeaderboardFilters) -> LeaderboardResponse:
        if filters.type not in LEADERBOARD_TYPES:
            raise BadRequestError(
                "Invalid type. Must be one of: agents, coordinators, branches", code="INVALID_PARAMETER"
            )
        if filters.metric not in LEADERBOARD_METRICS:
            raise BadRequestError(
                "Invalid metric. Must be one of: sales, registrations", code="INVALID_PARAMETER"
            )
        validate_period(filters.period, LEADERBOARD_PERIODS)

        window = resolve_period(filters.period, self.clock())
        rows = await self.aggregation_service.aggregate(
            window,
            LEADERBOARD_TYPES[filters.type],
            LEADERBOARD_METRICS[filters.metric],
        )
        return LeaderboardResponse(
            type=filters.type,
            metric=filters.metric,
            period=filters.period,
            period_start=window.start,
            period_end=window.end,
            rankings=[
                LeaderboardEntry(id=row.group_key, name=row.name, total_performance=row.total, rank=index)
                for index, row in enumerate(rows, start=1)
            ],
        )
