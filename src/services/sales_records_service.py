from __future__ import annotations

import logging
import math

from src.core.errors import BadRequestError
from src.models.entities import UserRecord
from src.repositories.sales_records_repository import SalesRecordsRepository
from src.schemas.common import EntityRef
from src.schemas.sales_records import SalesRecordCreateRequest, SalesRecordResponse
from src.services.hierarchy_service import HierarchyService

logger = logging.getLogger(__name__)


class SalesRecordsService:
    def __init__(self, hierarchy_service: HierarchyService, repository: SalesRecordsRepository) -> None:
        self.hierarchy_service = hierarchy_service
        self.repository = repository

    async def create_sales_record(
        self, coordinator: UserRecord, request: SalesRecordCreateRequest
    ) -> SalesRecordResponse:
        hierarchy = await self.hierarchy_service.validate(request.agent_id, coordinator)
        if (
            not math.isfinite(request.sales_amount)
            or request.sales_amount < 0
            or request.new_registrations < 0
        ):
            raise BadRequestError(
                "Sales amount and new registrations must be non-negative numbers",
                code="INVALID_AMOUNT",
            )

        # The branch always comes from the coordinator, never from the request.
        record = await self.repository.create_sales_record(
            {
                "agent_id": hierarchy.agent.id,
                "coordinator_id": hierarchy.coordinator.id,
                "branch_id": hierarchy.branch.id,
                "date": request.date.isoformat(),
                "sales_amount": float(request.sales_amount),
                "new_registrations": int(request.new_registrations),
            }
        )
        logger.info(
            "Sales record %s created: agent=%s coordinator=%s branch=%s amount=%s",
            record.id,
            hierarchy.agent.name,
            hierarchy.coordinator.name,
            hierarchy.branch.name,
            record.sales_amount,
        )
        return SalesRecordResponse(
            id=record.id,
            agent=EntityRef(id=hierarchy.agent.id, name=hierarchy.agent.name),
            coordinator=EntityRef(id=hierarchy.coordinator.id, name=hierarchy.coordinator.name),
            branch=EntityRef(id=hierarchy.branch.id, name=hierarchy.branch.name),
            date=record.date,
            sales_amount=record.sales_amount,
            new_registrations=record.new_registrations,
            created_at=record.created_at,
        )
