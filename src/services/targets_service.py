from __future__ import annotations

import asyncio
import logging
import math
from datetime import date
from typing import Dict, List, Optional

from src.core.access import Role, require_branch_scope
from src.core.errors import BadRequestError, ForbiddenError, NotFoundError
from src.models.entities import TargetRecord, UserRecord
from src.repositories.branches_repository import BranchesRepository
from src.repositories.targets_repository import TargetsRepository
from src.repositories.users_repository import UsersRepository
from src.schemas.common import EntityRef
from src.schemas.targets import (
    BranchTargetCreateRequest,
    CoordinatorSummary,
    CoordinatorTargetCreateRequest,
    ManagerTargetsPageResponse,
    TargetResponse,
)

logger = logging.getLogger(__name__)


class TargetsService:
    def __init__(
        self,
        repository: TargetsRepository,
        users_repository: UsersRepository,
        branches_repository: BranchesRepository,
    ) -> None:
        self.repository = repository
        self.users_repository = users_repository
        self.branches_repository = branches_repository

    async def set_branch_target(
        self, admin: UserRecord, request: BranchTargetCreateRequest
    ) -> TargetResponse:
        self._validate_amount_and_window(request.amount, request.start_date, request.end_date)
        branch = await self.branches_repository.get_branch(request.branch_id)
        if branch is None:
            raise NotFoundError("Selected branch not found.", code="BRANCH_NOT_FOUND")

        # Read-then-write without a lock: two concurrent admins can still both pass.
        overlapping = await self.repository.find_overlapping_branch_target(
            branch_id=branch.id,
            target_type=request.target_type,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        if overlapping is not None:
            raise BadRequestError(
                "A target already exists for this branch and type during the specified period.",
                code="OVERLAPPING_TARGET",
            )

        target = await self.repository.create_target(
            {
                "target_type": request.target_type,
                "amount": float(request.amount),
                "start_date": request.start_date.isoformat(),
                "end_date": request.end_date.isoformat(),
                "branch_id": branch.id,
                "set_by_id": admin.id,
            }
        )
        logger.info(
            "Branch target %s set for %s: %s %s (%s..%s) by %s",
            target.id,
            branch.name,
            target.target_type,
            target.amount,
            target.start_date,
            target.end_date,
            admin.id,
        )
        return self._to_response(
            target,
            branches={branch.id: branch.name},
            users={admin.id: admin.name},
        )

    async def set_coordinator_target(
        self, manager: UserRecord, request: CoordinatorTargetCreateRequest
    ) -> TargetResponse:
        manager_branch_id = require_branch_scope(
            manager.branch_id, "Branch manager is not assigned to a branch."
        )
        self._validate_amount_and_window(request.amount, request.start_date, request.end_date)

        coordinator = await self.users_repository.get_user(request.coordinator_id)
        if coordinator is None:
            raise NotFoundError("Coordinator not found", code="COORDINATOR_NOT_FOUND")
        if coordinator.role is not Role.COORDINATOR:
            raise BadRequestError(
                "Target can only be set for users with coordinator role",
                code="INVALID_COORDINATOR_ROLE",
            )
        if coordinator.branch_id != manager_branch_id:
            raise ForbiddenError("You can only set targets for coordinators in your branch")

        target = await self.repository.create_target(
            {
                "target_type": request.target_type,
                "amount": float(request.amount),
                "start_date": request.start_date.isoformat(),
                "end_date": request.end_date.isoformat(),
                "coordinator_id": coordinator.id,
                "set_by_id": manager.id,
            }
        )
        logger.info(
            "Coordinator target %s set for %s: %s %s by %s",
            target.id,
            coordinator.id,
            target.target_type,
            target.amount,
            manager.id,
        )
        return self._to_response(
            target,
            branches={},
            users={coordinator.id: coordinator.name, manager.id: manager.name},
        )

    async def get_my_targets(self, principal: UserRecord) -> List[TargetResponse]:
        if principal.role is Role.ADMIN:
            targets = await self.repository.list_targets()
        elif principal.role is Role.BRANCH_MANAGER:
            branch_id = require_branch_scope(principal.branch_id, "Branch manager is not assigned to a branch.")
            targets = await self.repository.list_targets(branch_id=branch_id)
        elif principal.role is Role.COORDINATOR:
            targets = await self.repository.list_targets(coordinator_ids=[principal.id])
        else:
            targets = []
        return await self.to_responses(targets)

    async def get_manager_targets_page(self, manager: UserRecord) -> ManagerTargetsPageResponse:
        branch_id = require_branch_scope(manager.branch_id, "Manager is not assigned to a branch.")
        branch, admin_targets, coordinators = await asyncio.gather(
            self.branches_repository.get_branch(branch_id),
            self.repository.list_targets(branch_id=branch_id),
            self.users_repository.list_users(role=Role.COORDINATOR.value, branch_id=branch_id),
        )
        if branch is None:
            raise NotFoundError("Manager's branch not found.", code="BRANCH_NOT_FOUND")
        return ManagerTargetsPageResponse(
            branch=EntityRef(id=branch.id, name=branch.name),
            admin_targets=await self.to_responses(admin_targets),
            coordinators_in_branch=[
                CoordinatorSummary(id=user.id, name=user.name, email=user.email) for user in coordinators
            ],
        )

    async def to_responses(self, targets: List[TargetRecord]) -> List[TargetResponse]:
        if not targets:
            return []
        branch_ids = {target.branch_id for target in targets if target.branch_id}
        user_ids = {target.coordinator_id for target in targets if target.coordinator_id}
        user_ids |= {target.set_by_id for target in targets if target.set_by_id}
        branches, users = await asyncio.gather(
            self.branches_repository.list_branches_by_ids(branch_ids),
            self.users_repository.list_users_by_ids(user_ids),
        )
        branch_names = {branch.id: branch.name for branch in branches}
        user_names = {user.id: user.name for user in users}
        return [self._to_response(target, branch_names, user_names) for target in targets]

    @staticmethod
    def _validate_amount_and_window(amount: float, start_date: date, end_date: date) -> None:
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise BadRequestError("Please enter a valid positive target amount.", code="INVALID_AMOUNT")
        if start_date >= end_date:
            raise BadRequestError("End date must be after start date.", code="INVALID_DATE_RANGE")

    @staticmethod
    def _to_response(
        target: TargetRecord,
        branches: Dict[str, str],
        users: Dict[str, str],
    ) -> TargetResponse:
        return TargetResponse(
            id=target.id,
            target_type=target.target_type,
            amount=target.amount,
            start_date=target.start_date,
            end_date=target.end_date,
            branch=_ref(target.branch_id, branches),
            coordinator=_ref(target.coordinator_id, users),
            set_by=_ref(target.set_by_id, users),
            created_at=target.created_at,
        )


def _ref(entity_id: Optional[str], names: Dict[str, str]) -> Optional[EntityRef]:
    if not entity_id:
        return None
    return EntityRef(id=entity_id, name=names.get(entity_id))
