from __future__ import annotations

from typing import Iterable, List, Optional

from src.core.supabase import SupabaseClient
from src.models.entities import UserRecord

USER_COLUMNS = "id,name,email,role,branch_id"


class UsersRepository:
    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self.client = client or SupabaseClient()

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        rows, _ = await self.client.select(
            table="users",
            select=USER_COLUMNS,
            filters=[("id", f"eq.{user_id}")],
            limit=1,
        )
        return UserRecord.model_validate(rows[0]) if rows else None

    async def list_users_by_ids(self, user_ids: Iterable[str]) -> List[UserRecord]:
        normalized_ids = sorted({user_id for user_id in user_ids if user_id})
        if not normalized_ids:
            return []
        users: List[UserRecord] = []
        chunk_size = 100
        for start in range(0, len(normalized_ids), chunk_size):
            chunk = normalized_ids[start : start + chunk_size]
            rows, _ = await self.client.select(
                table="users",
                select=USER_COLUMNS,
                filters=[("id", f"in.({','.join(chunk)})")],
                limit=len(chunk),
            )
            users.extend(UserRecord.model_validate(row) for row in rows)
        return users

    async def list_users(
        self,
        role: Optional[str] = None,
        branch_id: Optional[str] = None,
    ) -> List[UserRecord]:
        filters = []
        if role:
            filters.append(("role", f"eq.{role}"))
        if branch_id:
            filters.append(("branch_id", f"eq.{branch_id}"))
        rows = await self.client.select_all(
            table="users",
            select=USER_COLUMNS,
            filters=filters,
            order="name.asc,id.asc",
        )
        return [UserRecord.model_validate(row) for row in rows]

    async def count_users(self) -> int:
        return await self.client.count("users")
