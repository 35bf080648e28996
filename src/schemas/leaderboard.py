from __future__ import annotations

from datetime import datetime
from typing import List

from src.shared.base import BaseSchema


class LeaderboardFilters(BaseSchema):
    type: str
    metric: str
    period: str


class LeaderboardEntry(BaseSchema):
    id: str
    name: str
    total_performance: float
    rank: int


class LeaderboardResponse(BaseSchema):
    type: str
    metric: str
    period: str
    period_start: datetime
    period_end: datetime
    rankings: List[LeaderboardEntry]
