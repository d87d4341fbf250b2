from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from api.cache import history_cache
from api.dependencies import require_api_key
from api.models import ConfigResponse, ConfigUpdateRequest
from config import SETTINGS_HELP, settings

router = APIRouter(prefix="/config", tags=["config"], dependencies=[Depends(require_api_key)])


@router.get("/", response_model=ConfigResponse, summary="List current league knobs")
async def get_config() -> ConfigResponse:
    return ConfigResponse(knobs=settings.snapshot())


@router.patch("/", response_model=ConfigResponse, summary="Update one or more league knobs")
async def patch_config(payload: ConfigUpdateRequest) -> ConfigResponse:
    if not payload.updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No updates provided")
    known = set(settings.names())
    for name in payload.updates:
        if name not in known:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown knob '{name}'")
    snapshot = settings.snapshot()
    try:
        for name, value in payload.updates.items():
            settings.set(name, value)
    except (TypeError, ValueError) as exc:
        for name, value in snapshot.items():
            settings.set(name, value)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    history_cache.clear()
    return ConfigResponse(knobs=settings.snapshot())


@router.get("/help", summary="Describe available configuration knobs")
async def config_help() -> dict[str, str]:
    return SETTINGS_HELP.copy()
