from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from src.core.access import Role

TargetType = Literal["sales", "registration"]


class UserRecord(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Role
    branch_id: Optional[str] = None


class BranchRecord(BaseModel):
    id: str
    name: str
    location: Optional[str] = None


class SalesRecordRecord(BaseModel):
    id: str
    agent_id: str
    coordinator_id: str
    branch_id: str
    date: date
    sales_amount: float = Field(ge=0, allow_inf_nan=False)
    new_registrations: int = Field(ge=0)
    created_at: Optional[datetime] = None


class TargetRecord(BaseModel):
    id: str
    target_type: TargetType
    amount: float = Field(gt=0, allow_inf_nan=False)
    start_date: date
    end_date: date
    branch_id: Optional[str] = None
    coordinator_id: Optional[str] = None
    set_by_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_owner_and_window(self) -> "TargetRecord":
        if bool(self.branch_id) == bool(self.coordinator_id):
            raise ValueError("Exactly one of branch_id or coordinator_id must be set")
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self
