from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from src.schemas.common import EntityRef
from src.shared.base import BaseSchema, RequestSchema


class SalesRecordCreateRequest(RequestSchema):
    agent_id: str = Field(min_length=1)
    date: date
    sales_amount: float
    new_registrations: int


class SalesRecordResponse(BaseSchema):
    id: str
    agent: EntityRef
    coordinator: EntityRef
    branch: EntityRef
    date: date
    sales_amount: float
    new_registrations: int
    created_at: Optional[datetime] = None
