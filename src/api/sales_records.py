from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_current_principal, get_sales_records_service
from src.core.access import Operation, require_capability
from src.models.entities import UserRecord
from src.schemas.sales_records import SalesRecordCreateRequest, SalesRecordResponse
from src.services.sales_records_service import SalesRecordsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/sales-records", tags=["sales-records"])


@router.post("", status_code=201)
async def create_sales_record(
    payload: SalesRecordCreateRequest,
    principal: UserRecord = Depends(get_current_principal),
    service: SalesRecordsService = Depends(get_sales_records_service),
) -> ResponseEnvelope[SalesRecordResponse]:
    require_capability(principal.role, Operation.CREATE_SALES_RECORD)
    data = await service.create_sales_record(principal, payload)
    return ResponseEnvelope(data=data, meta=build_meta("sales_records", "now"))
