from __future__ import annotations

from datetime import date
from typing import List

from src.shared.base import BaseSchema


class DailySalesPoint(BaseSchema):
    day: date
    total_sales: float
    record_count: int


class InsightDateRange(BaseSchema):
    start_date: date
    end_date: date


class SalesInsightResponse(BaseSchema):
    insight: str
    is_fallback: bool
    data_points: int
    date_range: InsightDateRange
    model_name: str
    daily_sales: List[DailySalesPoint]
