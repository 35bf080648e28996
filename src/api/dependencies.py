from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.core.config import get_settings
from src.core.errors import UnauthorizedError
from src.core.security import decode_access_token
from src.models.entities import UserRecord
from src.repositories.branches_repository import BranchesRepository
from src.repositories.memory import (
    InMemoryBranchesRepository,
    InMemorySalesRecordsRepository,
    InMemoryStore,
    InMemoryTargetsRepository,
    InMemoryUsersRepository,
)
from src.repositories.sales_records_repository import SalesRecordsRepository
from src.repositories.targets_repository import TargetsRepository
from src.repositories.users_repository import UsersRepository
from src.services.aggregation_service import AggregationService
from src.services.dashboard_service import DashboardService
from src.services.hierarchy_service import HierarchyService
from src.services.insights_service import InsightsService
from src.services.leaderboard_service import LeaderboardService
from src.services.reports_service import ReportsService
from src.services.sales_records_service import SalesRecordsService
from src.services.targets_service import TargetsService
from src.services.text_generation_service import TextGenerationService
from src.shared.time import Clock, system_clock

bearer_scheme = HTTPBearer(auto_error=False)


def _use_memory_store() -> bool:
    return get_settings().storage_backend == "memory"


@lru_cache
def get_memory_store() -> InMemoryStore:
    return InMemoryStore()


@lru_cache
def get_users_repository() -> UsersRepository:
    if _use_memory_store():
        return InMemoryUsersRepository(get_memory_store())
    return UsersRepository()


@lru_cache
def get_branches_repository() -> BranchesRepository:
    if _use_memory_store():
        return InMemoryBranchesRepository(get_memory_store())
    return BranchesRepository()


@lru_cache
def get_sales_records_repository() -> SalesRecordsRepository:
    if _use_memory_store():
        return InMemorySalesRecordsRepository(get_memory_store())
    return SalesRecordsRepository()


@lru_cache
def get_targets_repository() -> TargetsRepository:
    if _use_memory_store():
        return InMemoryTargetsRepository(get_memory_store())
    return TargetsRepository()


def get_clock() -> Clock:
    return system_clock


def get_aggregation_service(
    sales_records_repository: SalesRecordsRepository = Depends(get_sales_records_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
    branches_repository: BranchesRepository = Depends(get_branches_repository),
) -> AggregationService:
    return AggregationService(
        sales_records_repository=sales_records_repository,
        users_repository=users_repository,
        branches_repository=branches_repository,
    )


def get_sales_records_service(
    sales_records_repository: SalesRecordsRepository = Depends(get_sales_records_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
    branches_repository: BranchesRepository = Depends(get_branches_repository),
) -> SalesRecordsService:
    return SalesRecordsService(
        hierarchy_service=HierarchyService(
            users_repository=users_repository,
            branches_repository=branches_repository,
        ),
        repository=sales_records_repository,
    )


def get_targets_service(
    targets_repository: TargetsRepository = Depends(get_targets_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
    branches_repository: BranchesRepository = Depends(get_branches_repository),
) -> TargetsService:
    return TargetsService(
        repository=targets_repository,
        users_repository=users_repository,
        branches_repository=branches_repository,
    )


def get_reports_service(
    aggregation_service: AggregationService = Depends(get_aggregation_service),
    targets_repository: TargetsRepository = Depends(get_targets_repository),
    clock: Clock = Depends(get_clock),
) -> ReportsService:
    return ReportsService(
        aggregation_service=aggregation_service,
        targets_repository=targets_repository,
        clock=clock,
    )


def get_dashboard_service(
    aggregation_service: AggregationService = Depends(get_aggregation_service),
    reports_service: ReportsService = Depends(get_reports_service),
    targets_service: TargetsService = Depends(get_targets_service),
    targets_repository: TargetsRepository = Depends(get_targets_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
    branches_repository: BranchesRepository = Depends(get_branches_repository),
    clock: Clock = Depends(get_clock),
) -> DashboardService:
    return DashboardService(
        aggregation_service=aggregation_service,
        reports_service=reports_service,
        targets_service=targets_service,
        targets_repository=targets_repository,
        users_repository=users_repository,
        branches_repository=branches_repository,
        clock=clock,
    )


def get_leaderboard_service(
    aggregation_service: AggregationService = Depends(get_aggregation_service),
    clock: Clock = Depends(get_clock),
) -> LeaderboardService:
    return LeaderboardService(aggregation_service=aggregation_service, clock=clock)


@lru_cache
def get_text_generation_service() -> TextGenerationService:
    return TextGenerationService()


def get_insights_service(
    aggregation_service: AggregationService = Depends(get_aggregation_service),
    text_generation_service: TextGenerationService = Depends(get_text_generation_service),
    clock: Clock = Depends(get_clock),
) -> InsightsService:
    return InsightsService(
        aggregation_service=aggregation_service,
        text_generation_service=text_generation_service,
        clock=clock,
    )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users_repository: UsersRepository = Depends(get_users_repository),
) -> UserRecord:
    token = credentials.credentials if credentials else None
    user_id = decode_access_token(token, get_settings())
    user = await users_repository.get_user(user_id)
    if user is None:
        raise UnauthorizedError("Not authorized, user not found")
    return user
