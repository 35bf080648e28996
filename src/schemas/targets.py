from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from src.models.entities import TargetType
from src.schemas.common import EntityRef
from src.shared.base import BaseSchema, RequestSchema


class BranchTargetCreateRequest(RequestSchema):
    branch_id: str = Field(min_length=1)
    target_type: TargetType
    amount: float
    start_date: date
    end_date: date


class CoordinatorTargetCreateRequest(RequestSchema):
    coordinator_id: str = Field(min_length=1)
    target_type: TargetType
    amount: float
    start_date: date
    end_date: date


class TargetResponse(BaseSchema):
    id: str
    target_type: TargetType
    amount: float
    start_date: date
    end_date: date
    branch: Optional[EntityRef] = None
    coordinator: Optional[EntityRef] = None
    set_by: Optional[EntityRef] = None
    created_at: Optional[datetime] = None


class CoordinatorSummary(BaseSchema):
    id: str
    name: str
    email: Optional[str] = None


class ManagerTargetsPageResponse(BaseSchema):
    branch: EntityRef
    admin_targets: List[TargetResponse]
    coordinators_in_branch: List[CoordinatorSummary]
