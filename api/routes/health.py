from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_context_manager
from context import ContextManager

router = APIRouter(tags=["health"])


@router.get("/healthz", summary="Application health check")
async def healthcheck(manager: ContextManager = Depends(get_context_manager)) -> dict[str, str]:
    # Never triggers a load; the first league request does that.
    return {"status": "ok", "league": "loaded" if manager.loaded else "pending"}
