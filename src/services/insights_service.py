from __future__ import annotations

import json
from datetime import date
from typing import List

from src.analytics.aggregation import DailyTotal
from src.core.config import Settings, get_settings
from src.schemas.insights import DailySalesPoint, InsightDateRange, SalesInsightResponse
from src.services.aggregation_service import AggregationService
from src.services.text_generation_service import TextGenerationService
from src.shared.time import Clock, PeriodWindow, explicit_window, system_clock, trailing_days_window

SYSTEM_PROMPT = (
    "You are a motivating executive sales coach for an insurance company with a national branch "
    "network. Base every statement only on the data you are given. Write clear, professional "
    "paragraphs ready to display in a dashboard card."
)

SUMMARY_INSTRUCTIONS = (
    "Provide: 1. one clear positive trend; 2. one key area for improvement; "
    "3. two concrete, actionable suggestions for management; 4. a brief motivational note for the sales team."
)

RANGE_INSTRUCTIONS = (
    "Provide: 1. a brief performance summary for the period; 2. two specific insights about sales "
    "patterns; 3. two actionable recommendations; 4. a brief motivational message for the sales team."
)

FALLBACK_INSIGHT = (
    "Sales insights are unavailable right now. In the meantime: follow up personally with recent "
    "clients, keep product training current, review each team's progress against its targets weekly, "
    "and celebrate early wins to keep momentum. Please try again later for a data-driven analysis."
)


class InsightsService:
    def __init__(
        self,
        aggregation_service: AggregationService,
        text_generation_service: TextGenerationService,
        clock: Clock = system_clock,
        settings: Settings | None = None,
    ) -> None:
        self.aggregation_service = aggregation_service
        self.text_generation_service = text_generation_service
        self.clock = clock
        self.settings = settings or get_settings()

    async def get_recent_insight(self) -> SalesInsightResponse:
        window = trailing_days_window(self.settings.insights_lookback_days, self.clock())
        return await self._build_insight(window, SUMMARY_INSTRUCTIONS)

    async def get_insight_for_range(self, start_date: date, end_date: date) -> SalesInsightResponse:
        window = explicit_window(start_date, end_date)
        return await self._build_insight(window, RANGE_INSTRUCTIONS)

    async def _build_insight(self, window: PeriodWindow, instructions: str) -> SalesInsightResponse:
        daily = await self.aggregation_service.daily_totals(window)
        result = await self.text_generation_service.generate(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=_build_user_prompt(window, daily, instructions),
            fallback_text=FALLBACK_INSIGHT,
        )
        return SalesInsightResponse(
            insight=result.text,
            is_fallback=result.used_fallback,
            data_points=len(daily),
            date_range=InsightDateRange(start_date=window.start_date, end_date=window.end_date),
            model_name=result.model_name,
            daily_sales=[
                DailySalesPoint(day=point.day, total_sales=point.total_sales, record_count=point.record_count)
                for point in daily
            ],
        )


def _build_user_prompt(window: PeriodWindow, daily: List[DailyTotal], instructions: str) -> str:
    data = [
        {"day": point.day.isoformat(), "totalSales": point.total_sales, "count": point.record_count}
        for point in daily
    ]
    return (
        f"Daily total sales for the whole company from {window.start_date.isoformat()} "
        f"to {window.end_date.isoformat()}:\n"
        f"{json.dumps(data, separators=(',', ':'))}\n\n{instructions}"
    )
