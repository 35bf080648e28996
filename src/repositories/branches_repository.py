from __future__ import annotations

from typing import Iterable, List, Optional

from src.core.supabase import SupabaseClient
from src.models.entities import BranchRecord

BRANCH_COLUMNS = "id,name,location"


class BranchesRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    async def get_branch(self, branch_id: str) -> Optional[BranchRecord]:
        rows, _ = await self.client.select(
            table="branches",
            select=BRANCH_COLUMNS,
            filters=[("id", f"eq.{branch_id}")],
            limit=1,
        )
        return BranchRecord.model_validate(rows[0]) if rows else None

    async def list_branches_by_ids(self, branch_ids: Iterable[str]) -> List[BranchRecord]:
        normalized_ids = sorted({branch_id for branch_id in branch_ids if branch_id})
        if not normalized_ids:
            return []
        rows, _ = await self.client.select(
            table="branches",
            select=BRANCH_COLUMNS,
            filters=[("id", f"in.({','.join(normalized_ids)})")],
            limit=len(normalized_ids),
        )
        return [BranchRecord.model_validate(row) for row in rows]

    async def count_branches(self) -> int:
        return await self.client.count("branches")
