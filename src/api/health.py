from __future__ import annotations

from fastapi import APIRouter

from src.core.config import get_settings
from src.shared.response import ResponseEnvelope, build_meta


router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> ResponseEnvelope[dict]:
    return ResponseEnvelope(
        data={"status": "ok", "storageBackend": get_settings().storage_backend},
        meta=build_meta("system", "now"),
    )
