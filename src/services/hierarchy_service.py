from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NoReturn

from src.core.access import Role
from src.core.errors import BadRequestError
from src.models.entities import BranchRecord, UserRecord
from src.repositories.branches_repository import BranchesRepository
from src.repositories.users_repository import UsersRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedHierarchy:
    agent: UserRecord
    coordinator: UserRecord
    branch: BranchRecord


class HierarchyService:
    """Resolves the agent, coordinator and branch behind a new sales record."""

    def __init__(self, users_repository: UsersRepository, branches_repository: BranchesRepository) -> None:
        self.users_repository = users_repository
        self.branches_repository = branches_repository

    async def validate(self, agent_id: str, coordinator: UserRecord) -> ValidatedHierarchy:
        if not coordinator.branch_id:
            self._reject(
                "MISSING_BRANCH_ASSIGNMENT",
                "Coordinator must be assigned to a branch to create sales records",
                coordinator,
            )

        agent = await self.users_repository.get_user(agent_id)
        if agent is None:
            self._reject("AGENT_NOT_FOUND", "Selected agent does not exist", coordinator)
        if agent.role is not Role.AGENT:
            self._reject("INVALID_AGENT_ROLE", "Selected user is not an agent", coordinator)

        branch = await self.branches_repository.get_branch(coordinator.branch_id)
        if branch is None:
            self._reject("BRANCH_NOT_FOUND", "Coordinator's assigned branch does not exist", coordinator)

        if agent.branch_id and agent.branch_id != coordinator.branch_id:
            self._reject(
                "BRANCH_MISMATCH",
                "Agent must belong to the same branch as the coordinator",
                coordinator,
            )

        return ValidatedHierarchy(agent=agent, coordinator=coordinator, branch=branch)

    @staticmethod
    def _reject(code: str, message: str, coordinator: UserRecord) -> NoReturn:
        logger.warning("Rejected sales record from coordinator %s: %s", coordinator.id, code)
        raise BadRequestError(message, code=code)
