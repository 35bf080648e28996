from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_principal, get_targets_service
from src.core.access import Operation, Scope, require_capability
from src.models.entities import UserRecord
from src.schemas.targets import (
    BranchTargetCreateRequest,
    CoordinatorTargetCreateRequest,
    ManagerTargetsPageResponse,
    TargetResponse,
)
from src.services.targets_service import TargetsService
from src.shared.response import ResponseEnvelope, build_meta, paginate_list

router = APIRouter(prefix="/targets", tags=["targets"])


@router.get("/mine")
async def my_targets(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    principal: UserRecord = Depends(get_current_principal),
    service: TargetsService = Depends(get_targets_service),
) -> ResponseEnvelope[List[TargetResponse]]:
    require_capability(principal.role, Operation.VIEW_TARGETS)
    targets = await service.get_my_targets(principal)
    data, pagination = paginate_list(targets, page, page_size)
    return ResponseEnvelope(data=data, pagination=pagination, meta=build_meta("targets", "all"))


@router.get("/manager-page")
async def manager_targets_page(
    principal: UserRecord = Depends(get_current_principal),
    service: TargetsService = Depends(get_targets_service),
) -> ResponseEnvelope[ManagerTargetsPageResponse]:
    require_capability(principal.role, Operation.VIEW_MANAGER_TARGETS_PAGE, Scope.BRANCH)
    data = await service.get_manager_targets_page(principal)
    return ResponseEnvelope(data=data, meta=build_meta("targets", "all"))


@router.post("/branch", status_code=201)
async def set_branch_target(
    payload: BranchTargetCreateRequest,
    principal: UserRecord = Depends(get_current_principal),
    service: TargetsService = Depends(get_targets_service),
) -> ResponseEnvelope[TargetResponse]:
    require_capability(principal.role, Operation.SET_BRANCH_TARGET, Scope.GLOBAL)
    data = await service.set_branch_target(principal, payload)
    return ResponseEnvelope(data=data, meta=build_meta("targets", "all"))


@router.post("/coordinator", status_code=201)
async def set_coordinator_target(
    payload: CoordinatorTargetCreateRequest,
    principal: UserRecord = Depends(get_current_principal),
    service: TargetsService = Depends(get_targets_service),
) -> ResponseEnvelope[TargetResponse]:
    require_capability(principal.role, Operation.SET_COORDINATOR_TARGET, Scope.BRANCH)
    data = await service.set_coordinator_target(principal, payload)
    return ResponseEnvelope(data=data, meta=build_meta("targets", "all"))
