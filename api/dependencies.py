"""FastAPI dependencies: API-key guard and access to the loaded league."""

from __future__ import annotations

import logging
import os
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from context import ContextManager, LeagueDataContext, context_manager

logger = logging.getLogger(__name__)

API_KEY_ENV = "LEAGUE_API_KEY"


class APISettings:
    """Per-request view of the environment-driven API options."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self.api_key = api_key

    @classmethod
    def from_env(cls) -> "APISettings":
        return cls(api_key=os.environ.get(API_KEY_ENV) or None)

    @property
    def auth_enabled(self) -> bool:
        return self.api_key is not None


def get_api_settings() -> APISettings:
    return APISettings.from_env()


async def require_api_key(
    api_settings: Annotated[APISettings, Depends(get_api_settings)],
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
) -> None:
    """Reject the request unless ``X-API-Key`` matches ``LEAGUE_API_KEY`` (when set)."""

    if not api_settings.auth_enabled:
        return
    if x_api_key != api_settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_context_manager() -> ContextManager:
    return context_manager


def get_league_context(
    manager: Annotated[ContextManager, Depends(get_context_manager)],
) -> LeagueDataContext:
    """Load (or reuse) the parsed league; unreadable inputs become a 503."""

    try:
        return manager.get()
    except (FileNotFoundError, ValueError) as exc:
        logger.error("League data unavailable: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
