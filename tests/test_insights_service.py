from __future__ import annotations

import asyncio
from datetime import date

import pytest
from conftest import FakeTextGenerationService, add_sale, fixed_clock

from src.core.config import Settings
from src.core.errors import BadRequestError
from src.services.insights_service import FALLBACK_INSIGHT, InsightsService
from src.services.text_generation_service import TextGenerationService


def _service(aggregation_service, text_generation_service) -> InsightsService:
    return InsightsService(
        aggregation_service=aggregation_service,
        text_generation_service=text_generation_service,
        clock=fixed_clock,
        settings=Settings(INSIGHTS_LOOKBACK_DAYS=30),
    )


def test_text_generation_falls_back_without_api_key() -> None:
    service = TextGenerationService(settings=Settings(OPENAI_API_KEY=""))
    result = asyncio.run(service.generate(system_prompt="s", user_prompt="u", fallback_text="fallback"))
    assert result.used_fallback is True
    assert result.text == "fallback"


def test_text_generation_falls_back_when_disabled() -> None:
    service = TextGenerationService(settings=Settings(OPENAI_API_KEY="sk-test", AI_GENERATION_ENABLED=False))
    result = asyncio.run(service.generate(system_prompt="s", user_prompt="u", fallback_text="fallback"))
    assert result.used_fallback is True


def test_extract_content_requires_text() -> None:
    payload = {"choices": [{"message": {"content": "  Sales rose.  "}}]}
    assert TextGenerationService._extract_content(payload) == "Sales rose."
    with pytest.raises(ValueError):
        TextGenerationService._extract_content({"choices": []})


def test_recent_insight_summarises_trailing_days(store, network, aggregation_service) -> None:
    add_sale(store, network.north_agent, network.north_coordinator, date(2024, 3, 1), 100)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 3, 1), 50)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 3, 19), 70)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 1, 2), 999)
    generator = FakeTextGenerationService(text="Sales are climbing.", used_fallback=False)

    response = asyncio.run(_service(aggregation_service, generator).get_recent_insight())

    assert response.insight == "Sales are climbing."
    assert response.is_fallback is False
    assert response.data_points == 2
    assert response.date_range.end_date == date(2024, 3, 20)
    assert [(point.day, point.total_sales) for point in response.daily_sales] == [
        (date(2024, 3, 1), 150),
        (date(2024, 3, 19), 70),
    ]
    assert '"totalSales":150.0' in generator.prompts[0]


def test_range_insight_falls_back(aggregation_service) -> None:
    response = asyncio.run(
        _service(aggregation_service, FakeTextGenerationService()).get_insight_for_range(
            date(2024, 3, 1), date(2024, 3, 10)
        )
    )
    assert response.insight == FALLBACK_INSIGHT
    assert response.is_fallback is True
    assert response.data_points == 0


def test_range_insight_rejects_reversed_dates(aggregation_service) -> None:
    with pytest.raises(BadRequestError) as excinfo:
        asyncio.run(
            _service(aggregation_service, FakeTextGenerationService()).get_insight_for_range(
                date(2024, 3, 10), date(2024, 3, 1)
            )
        )
    assert excinfo.value.code == "INVALID_DATE_RANGE"
