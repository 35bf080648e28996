from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace
from typing import Dict
from uuid import uuid4

import jwt
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_branches_repository,
    get_clock,
    get_sales_records_repository,
    get_targets_repository,
    get_text_generation_service,
    get_users_repository,
)
from src.core.config import get_settings
from src.main import create_app
from src.models.entities import SalesRecordRecord, UserRecord
from src.repositories.memory import (
    InMemoryBranchesRepository,
    InMemorySalesRecordsRepository,
    InMemoryStore,
    InMemoryTargetsRepository,
    InMemoryUsersRepository,
)
from src.services.aggregation_service import AggregationService
from src.services.text_generation_service import TextGenerationResult

# A Wednesday; its week runs 2024-03-18..2024-03-24.
FIXED_NOW = datetime(2024, 3, 20, 10, 0)


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeTextGenerationService:
    def __init__(self, text: str = "", used_fallback: bool = True) -> None:
        self.text = text
        self.used_fallback = used_fallback
        self.prompts: list[str] = []

    async def generate(self, *, system_prompt: str, user_prompt: str, fallback_text: str) -> TextGenerationResult:
        self.prompts.append(user_prompt)
        return TextGenerationResult(
            text=fallback_text if self.used_fallback else self.text,
            model_name="deterministic-fallback" if self.used_fallback else "test-model",
            tokens_used=0,
            latency_ms=0,
            used_fallback=self.used_fallback,
        )


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def network(store: InMemoryStore) -> SimpleNamespace:
    """Two branches with a manager, coordinators and agents each, plus an admin."""
    north = store.add_branch("North", "Harbour City", branch_id="branch-north")
    south = store.add_branch("South", "Riverside", branch_id="branch-south")
    return SimpleNamespace(
        north=north,
        south=south,
        admin=store.add_user("Ada Admin", "admin", user_id="admin-1"),
        north_manager=store.add_user("Nia Manager", "branch_manager", north.id, user_id="manager-north"),
        south_manager=store.add_user("Sol Manager", "branch_manager", south.id, user_id="manager-south"),
        north_coordinator=store.add_user(
            "Cato Coordinator", "coordinator", north.id, user_id="coord-north", email="cato@example.com"
        ),
        north_coordinator_2=store.add_user("Cleo Coordinator", "coordinator", north.id, user_id="coord-north-2"),
        south_coordinator=store.add_user("Cyd Coordinator", "coordinator", south.id, user_id="coord-south"),
        north_agent=store.add_user("Alex Agent", "agent", north.id, user_id="agent-north"),
        north_agent_2=store.add_user("Bea Agent", "agent", north.id, user_id="agent-north-2"),
        south_agent=store.add_user("Sam Agent", "agent", south.id, user_id="agent-south"),
    )


def add_sale(
    store: InMemoryStore,
    agent: UserRecord,
    coordinator: UserRecord,
    day: date,
    amount: float,
    registrations: int = 0,
) -> None:
    store.sales_records.append(
        SalesRecordRecord(
            id=str(uuid4()),
            agent_id=agent.id,
            coordinator_id=coordinator.id,
            branch_id=coordinator.branch_id,
            date=day,
            sales_amount=amount,
            new_registrations=registrations,
        )
    )


@pytest.fixture()
def aggregation_service(store: InMemoryStore) -> AggregationService:
    return AggregationService(
        sales_records_repository=InMemorySalesRecordsRepository(store),
        users_repository=InMemoryUsersRepository(store),
        branches_repository=InMemoryBranchesRepository(store),
    )


@pytest.fixture()
def text_generation_service() -> FakeTextGenerationService:
    return FakeTextGenerationService()


@pytest.fixture()
def client(store: InMemoryStore, text_generation_service: FakeTextGenerationService) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_users_repository] = lambda: InMemoryUsersRepository(store)
    app.dependency_overrides[get_branches_repository] = lambda: InMemoryBranchesRepository(store)
    app.dependency_overrides[get_sales_records_repository] = lambda: InMemorySalesRecordsRepository(store)
    app.dependency_overrides[get_targets_repository] = lambda: InMemoryTargetsRepository(store)
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    app.dependency_overrides[get_text_generation_service] = lambda: text_generation_service
    return TestClient(app)


def auth_headers(user: UserRecord) -> Dict[str, str]:
    settings = get_settings()
    token = jwt.encode({"id": user.id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}
