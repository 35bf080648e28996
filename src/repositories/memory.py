"""In-process store with the same async surface as the Supabase repositories.

Used when ``STORAGE_BACKEND=memory`` and as the test double for services.
Insertion order is preserved, which is what the Supabase queries order by.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from src.models.entities import BranchRecord, SalesRecordRecord, TargetRecord, UserRecord


@dataclass
class InMemoryStore:
    users: List[UserRecord] = field(default_factory=list)
    branches: List[BranchRecord] = field(default_factory=list)
    sales_records: List[SalesRecordRecord] = field(default_factory=list)
    targets: List[TargetRecord] = field(default_factory=list)

    def add_branch(self, name: str, location: str = "", branch_id: Optional[str] = None) -> BranchRecord:
        branch = BranchRecord(id=branch_id or str(uuid4()), name=name, location=location)
        self.branches.append(branch)
        return branch

    def add_user(
        self,
        name: str,
        role: str,
        branch_id: Optional[str] = None,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserRecord:
        user = UserRecord(id=user_id or str(uuid4()), name=name, role=role, branch_id=branch_id, email=email)
        self.users.append(user)
        return user


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUsersRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        return next((user for user in self.store.users if user.id == user_id), None)

    async def list_users_by_ids(self, user_ids: Iterable[str]) -> List[UserRecord]:
        wanted = set(user_ids)
        return [user for user in self.store.users if user.id in wanted]

    async def list_users(
        self,
        role: Optional[str] = None,
        branch_id: Optional[str] = None,
    ) -> List[UserRecord]:
        users = [
            user
            for user in self.store.users
            if (role is None or user.role == role) and (branch_id is None or user.branch_id == branch_id)
        ]
        return sorted(users, key=lambda user: user.name)

    async def count_users(self) -> int:
        return len(self.store.users)


class InMemoryBranchesRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_branch(self, branch_id: str) -> Optional[BranchRecord]:
        return next((branch for branch in self.store.branches if branch.id == branch_id), None)

    async def list_branches_by_ids(self, branch_ids: Iterable[str]) -> List[BranchRecord]:
        wanted = set(branch_ids)
        return [branch for branch in self.store.branches if branch.id in wanted]

    async def count_branches(self) -> int:
        return len(self.store.branches)


class InMemorySalesRecordsRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create_sales_record(self, payload: Dict[str, Any]) -> SalesRecordRecord:
        record = SalesRecordRecord.model_validate({"id": str(uuid4()), "created_at": _now(), **payload})
        self.store.sales_records.append(record)
        return record

    async def list_sales_records(
        self,
        start_date: date,
        end_date: date,
        branch_id: Optional[str] = None,
        coordinator_id: Optional[str] = None,
    ) -> List[SalesRecordRecord]:
        return [
            record
            for record in self.store.sales_records
            if start_date <= record.date <= end_date
            and (branch_id is None or record.branch_id == branch_id)
            and (coordinator_id is None or record.coordinator_id == coordinator_id)
        ]


class InMemoryTargetsRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create_target(self, payload: Dict[str, Any]) -> TargetRecord:
        target = TargetRecord.model_validate({"id": str(uuid4()), "created_at": _now(), **payload})
        self.store.targets.append(target)
        return target

    async def list_targets(
        self,
        branch_id: Optional[str] = None,
        coordinator_ids: Optional[Iterable[str]] = None,
        target_type: Optional[str] = None,
    ) -> List[TargetRecord]:
        wanted_coordinators = set(coordinator_ids) if coordinator_ids is not None else None
        matches = [
            target
            for target in self.store.targets
            if (branch_id is None or target.branch_id == branch_id)
            and (wanted_coordinators is None or target.coordinator_id in wanted_coordinators)
            and (target_type is None or target.target_type == target_type)
        ]
        # Newest first, matching the created_at.desc ordering of the Supabase query.
        return list(reversed(matches))

    async def find_overlapping_branch_target(
        self,
        branch_id: str,
        target_type: str,
        start_date: date,
        end_date: date,
    ) -> Optional[TargetRecord]:
        return next(
            (
                target
                for target in self.store.targets
                if target.branch_id == branch_id
                and target.target_type == target_type
                and target.start_date <= end_date
                and target.end_date >= start_date
            ),
            None,
        )
