from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

__all__ = ["build_router"]


def build_router() -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    def health() -> dict[str, Any]:
        timestamp = datetime.now(tz=UTC).isoformat().replace("+00:00", "Z")
        return {"status": "ok", "timestamp": timestamp}

    return router
