from __future__ import annotations

import asyncio
from datetime import date

import pytest
from conftest import add_sale, fixed_clock

from src.core.errors import BadRequestError
from src.schemas.leaderboard import LeaderboardFilters
from src.services.leaderboard_service import LeaderboardService


@pytest.fixture()
def service(aggregation_service) -> LeaderboardService:
    return LeaderboardService(aggregation_service=aggregation_service, clock=fixed_clock)


def _seed(store, network) -> None:
    add_sale(store, network.north_agent, network.north_coordinator, date(2024, 3, 18), 300, 1)
    add_sale(store, network.north_agent_2, network.north_coordinator_2, date(2024, 3, 19), 700, 4)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 3, 4), 900, 2)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 1, 10), 5000, 10)


def test_monthly_agent_rankings(store, network, service) -> None:
    _seed(store, network)
    response = asyncio.run(service.get_leaderboard(LeaderboardFilters(type="agents", metric="sales", period="monthly")))

    assert [(entry.name, entry.total_performance, entry.rank) for entry in response.rankings] == [
        ("Sam Agent", 900, 1),
        ("Bea Agent", 700, 2),
        ("Alex Agent", 300, 3),
    ]
    assert response.period_start.date() == date(2024, 3, 1)


def test_weekly_window_excludes_earlier_days(store, network, service) -> None:
    _seed(store, network)
    response = asyncio.run(
        service.get_leaderboard(LeaderboardFilters(type="coordinators", metric="registrations", period="weekly"))
    )
    assert [entry.id for entry in response.rankings] == ["coord-north-2", "coord-north"]
    assert [entry.total_performance for entry in response.rankings] == [4, 1]


def test_yearly_branch_rankings_are_non_increasing(store, network, service) -> None:
    _seed(store, network)
    response = asyncio.run(service.get_leaderboard(LeaderboardFilters(type="branches", metric="sales", period="yearly")))

    totals = [entry.total_performance for entry in response.rankings]
    assert totals == sorted(totals, reverse=True)
    assert [entry.rank for entry in response.rankings] == list(range(1, len(totals) + 1))
    assert response.rankings[0].name == "South"


def test_empty_leaderboard(service) -> None:
    response = asyncio.run(service.get_leaderboard(LeaderboardFilters(type="agents", metric="sales", period="weekly")))
    assert response.rankings == []


@pytest.mark.parametrize(
    ("type_", "metric", "period", "fragment"),
    [
        ("teams", "sales", "monthly", "Invalid type"),
        ("agents", "profit", "monthly", "Invalid metric"),
        ("agents", "sales", "ytd", "Invalid period"),
    ],
)
def test_invalid_parameters(service, type_, metric, period, fragment) -> None:
    with pytest.raises(BadRequestError) as excinfo:
        asyncio.run(service.get_leaderboard(LeaderboardFilters(type=type_, metric=metric, period=period)))
    assert excinfo.value.code == "INVALID_PARAMETER"
    assert fragment in excinfo.value.message
