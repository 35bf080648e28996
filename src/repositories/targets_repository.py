from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from src.core.supabase import SupabaseClient
from src.models.entities import TargetRecord

TARGET_COLUMNS = "id,target_type,amount,start_date,end_date,branch_id,coordinator_id,set_by_id,created_at"


class TargetsRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    async def create_target(self, payload: Dict[str, Any]) -> TargetRecord:
        rows = await self.client.insert(table="targets", payload=payload)
        if not rows:
            raise RuntimeError("Target insert returned no rows")
        return TargetRecord.model_validate(rows[0])

    async def list_targets(
        self,
        branch_id: Optional[str] = None,
        coordinator_ids: Optional[Iterable[str]] = None,
        target_type: Optional[str] = None,
    ) -> List[TargetRecord]:
        filters = []
        if branch_id:
            filters.append(("branch_id", f"eq.{branch_id}"))
        if coordinator_ids is not None:
            normalized_ids = sorted({value for value in coordinator_ids if value})
            if not normalized_ids:
                return []
            filters.append(("coordinator_id", f"in.({','.join(normalized_ids)})"))
        if target_type:
            filters.append(("target_type", f"eq.{target_type}"))
        rows = await self.client.select_all(
            table="targets",
            select=TARGET_COLUMNS,
            filters=filters,
            order="created_at.desc,id.desc",
        )
        return [TargetRecord.model_validate(row) for row in rows]

    async def find_overlapping_branch_target(
        self,
        branch_id: str,
        target_type: str,
        start_date: date,
        end_date: date,
    ) -> Optional[TargetRecord]:
        rows, _ = await self.client.select(
            table="targets",
            select=TARGET_COLUMNS,
            filters=[
                ("branch_id", f"eq.{branch_id}"),
                ("target_type", f"eq.{target_type}"),
                ("start_date", f"lte.{end_date.isoformat()}"),
                ("end_date", f"gte.{start_date.isoformat()}"),
            ],
            limit=1,
        )
        return TargetRecord.model_validate(rows[0]) if rows else None
