from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.cache import history_cache
from api.dependencies import get_context_manager, get_league_context, require_api_key
from api.models import (
    FixtureEntry,
    FixtureListResponse,
    LeagueMetadataResponse,
    LeagueReloadRequest,
)
from context import ContextManager, LeagueDataContext
from standings import open_gameweeks

router = APIRouter(prefix="/league", tags=["league"], dependencies=[Depends(require_api_key)])


def _metadata_response(manager: ContextManager) -> LeagueMetadataResponse:
    metadata = manager.metadata()
    return LeagueMetadataResponse(
        teamCount=metadata["team_count"],
        fixtureCount=metadata["fixture_count"],
        lastReload=metadata["last_reload"],
        standingsPath=metadata["standings_path"],
        fixturesPath=metadata["fixtures_path"],
        firstGameweek=metadata["first_gameweek"],
        lastGameweek=metadata["last_gameweek"],
        settings=metadata["settings"],
    )


@router.get("", response_model=LeagueMetadataResponse, summary="Get league metadata")
async def get_league_metadata(
    manager: ContextManager = Depends(get_context_manager),
) -> LeagueMetadataResponse:
    try:
        return _metadata_response(manager)
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("/reload", response_model=LeagueMetadataResponse, summary="Reload standings and fixtures from disk")
async def reload_league(
    payload: LeagueReloadRequest,
    manager: ContextManager = Depends(get_context_manager),
) -> LeagueMetadataResponse:
    standings_path = None
    if payload.standings_path:
        path = Path(payload.standings_path).expanduser()
        if not path.exists() or not path.is_file():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Standings path not found")
        standings_path = str(path)

    fixtures_path = None
    if payload.fixtures_path:
        path = Path(payload.fixtures_path).expanduser()
        if not path.exists() or not path.is_file():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Fixtures path not found")
        fixtures_path = str(path)

    try:
        manager.reload(standings_path=standings_path, fixtures_path=fixtures_path)
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    history_cache.clear()
    return _metadata_response(manager)


@router.get("/fixtures", response_model=FixtureListResponse, summary="List fixtures, optionally for one gameweek")
async def list_fixtures(
    gameweek: Optional[int] = Query(default=None, ge=1, description="Only return fixtures in this gameweek."),
    ctx: LeagueDataContext = Depends(get_league_context),
) -> FixtureListResponse:
    open_weeks = set(open_gameweeks())
    fixtures = ctx.fixtures
    if gameweek is not None:
        fixtures = [fixture for fixture in fixtures if fixture.gameweek == gameweek]
    items = [
        FixtureEntry(
            id=fixture.fixture_id,
            gameweek=fixture.gameweek,
            home=fixture.home,
            away=fixture.away,
            date=fixture.date,
            day=fixture.day,
            time=fixture.time,
            homeScore=fixture.home_score,
            awayScore=fixture.away_score,
            open=fixture.gameweek in open_weeks,
        )
        for fixture in fixtures
    ]
    return FixtureListResponse(
        gameweek=gameweek,
        gameweeks=ctx.gameweeks(),
        openGameweeks=sorted(open_weeks),
        items=items,
    )
