from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from memory_backend.core.config import get_settings
from memory_backend.db.session import database_reachable

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    settings = get_settings()
    database_ok = database_reachable()
    return {
        "ok": database_ok,
        "service": "memory-helper-backend",
        "database": "ok" if database_ok else "unavailable",
        "faceMatching": settings.face_match_mode,
        "summaries": "model" if settings.llm_api_key else "fallback",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
