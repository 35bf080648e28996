from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from src.core.config import Settings, get_settings

# Supabase's default PostgREST max-rows; the server may cap pages lower still.
PAGE_SIZE = 1000


class SupabaseClient:
    _shared_client: httpx.AsyncClient | None = None

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings = settings or get_settings()
        if not settings.supabase_url:
            raise ValueError("SUPABASE_URL is required for the supabase storage backend")
        self.base_url = settings.supabase_url.rstrip("/") + "/rest/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self._client = http_client or self._get_shared_client()

    @classmethod
    def _get_shared_client(cls) -> httpx.AsyncClient:
        # One client per process, created on first use.
        if cls._shared_client is None:
            cls._shared_client = httpx.AsyncClient(
                timeout=30.0,
                limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
            )
        return cls._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        client, cls._shared_client = cls._shared_client, None
        if client is not None:
            await client.aclose()

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        headers.update(extra)
        return headers

    async def select(
        self,
        table: str,
        select: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
        count: bool | str = False,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        params: List[Tuple[str, str]] = [("select", select)]
        if filters:
            params.extend(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        if order:
            params.append(("order", order))

        headers = self._headers()
        if count:
            if count is True:
                headers["Prefer"] = "count=exact"
            elif isinstance(count, str):
                headers["Prefer"] = f"count={count}"

        url = f"{self.base_url}/{table}?{urlencode(params, doseq=True)}"
        response = await self._client.get(url, headers=headers)
        response.raise_for_status()
        total_count = None
        if count and "content-range" in response.headers:
            content_range = response.headers["content-range"]
            total_part = content_range.split("/")[-1] if "/" in content_range else ""
            if total_part.isdigit():
                total_count = int(total_part)
        return response.json(), total_count

    async def select_all(
        self,
        table: str,
        select: str,
        order: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        page_size: int = PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """Read every matching row, page by page.

        ``order`` must be total (end it with a unique column) so offsets are stable.
        The exact count from the first page decides when to stop; without it a
        short page ends the read.
        """
        rows: List[Dict[str, Any]] = []
        while True:
            page, total_count = await self.select(
                table=table,
                select=select,
                filters=filters,
                limit=page_size,
                offset=len(rows),
                order=order,
                count=True,
            )
            rows.extend(page)
            if not page:
                break
            if total_count is not None:
                if len(rows) >= total_count:
                    break
            elif len(page) < page_size:
                break
        return rows

    async def count(self, table: str, filters: Optional[List[Tuple[str, str]]] = None) -> int:
        _, total_count = await self.select(table=table, select="id", filters=filters, limit=1, count=True)
        return total_count or 0

    async def insert(
        self,
        table: str,
        payload: Dict[str, Any] | List[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}"
        headers = self._headers(**{"Content-Type": "application/json", "Prefer": "return=representation"})
        response = await self._client.post(url, headers=headers, json=payload)
        response.raise_for_status()
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []
