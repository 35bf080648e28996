from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.entities import SalesRecordRecord

SALES_RECORD_COLUMNS = "id,agent_id,coordinator_id,branch_id,date,sales_amount,new_registrations,created_at"


class SalesRecordsRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    async def create_sales_record(self, payload: Dict[str, Any]) -> SalesRecordRecord:
        rows = await self.client.insert(table="sales_records", payload=payload)
        if not rows:
            raise RuntimeError("Sales record insert returned no rows")
        return SalesRecordRecord.model_validate(rows[0])

    async def list_sales_records(
        self,
        start_date: date,
        end_date: date,
        branch_id: Optional[str] = None,
        coordinator_id: Optional[str] = None,
    ) -> List[SalesRecordRecord]:
        # Ascending creation order keeps aggregation ties in arrival order.
        filters = [
            ("date", f"gte.{start_date.isoformat()}"),
            ("date", f"lte.{end_date.isoformat()}"),
        ]
        if branch_id:
            filters.append(("branch_id", f"eq.{branch_id}"))
        if coordinator_id:
            filters.append(("coordinator_id", f"eq.{coordinator_id}"))
        rows = await self.client.select_all(
            table="sales_records",
            select=SALES_RECORD_COLUMNS,
            filters=filters,
            order="created_at.asc,id.asc",
        )
        return [SalesRecordRecord.model_validate(row) for row in rows]
