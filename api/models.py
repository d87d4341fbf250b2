"""Pydantic schemas used by the API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    knobs: Dict[str, Any]


class ConfigUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    updates: Dict[str, Any] = Field(default_factory=dict)


class LeagueMetadataResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_count: int = Field(..., alias="teamCount")
    fixture_count: int = Field(..., alias="fixtureCount")
    last_reload: datetime = Field(..., alias="lastReload")
    standings_path: str = Field(..., alias="standingsPath")
    fixtures_path: str = Field(..., alias="fixturesPath")
    first_gameweek: Optional[int] = Field(default=None, alias="firstGameweek")
    last_gameweek: Optional[int] = Field(default=None, alias="lastGameweek")
    settings: Dict[str, Any]


class LeagueReloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    standings_path: Optional[str] = Field(default=None, alias="standingsPath")
    fixtures_path: Optional[str] = Field(default=None, alias="fixturesPath")


class ScorePrediction(BaseModel):
    home: int = Field(..., ge=0)
    away: int = Field(..., ge=0)


class FixtureEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    gameweek: int
    home: str
    away: str
    date: str = ""
    day: str = ""
    time: str = ""
    home_score: Optional[int] = Field(default=None, alias="homeScore")
    away_score: Optional[int] = Field(default=None, alias="awayScore")
    open: bool = False


class FixtureListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gameweek: Optional[int] = None
    gameweeks: List[int]
    open_gameweeks: List[int] = Field(default_factory=list, alias="openGameweeks")
    items: List[FixtureEntry]


class StandingRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rank: int
    team: str
    played: int
    win: int
    draw: int
    loss: int
    goals_for: int = Field(..., alias="goalsFor")
    goals_against: int = Field(..., alias="goalsAgainst")
    goal_difference: int = Field(..., alias="goalDifference")
    points: int
    move: int = 0
    zone: str = ""
    form: str = ""


class FoldSummaryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    applied: int
    skipped: int
    skipped_fixtures: List[str] = Field(default_factory=list, alias="skippedFixtures")


class ProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    predictions: Dict[str, ScorePrediction] = Field(default_factory=dict)
    teams: Optional[List[str]] = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    standings: List[StandingRow]
    summary: FoldSummaryPayload
    prediction_count: int = Field(..., alias="predictionCount")


class HistoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    predictions: Dict[str, ScorePrediction] = Field(default_factory=dict)
    start: Optional[int] = Field(default=None, ge=1)
    end: Optional[int] = Field(default=None, ge=1)
    chart_start: Optional[int] = Field(default=None, ge=1, alias="chartStart")
    teams: Optional[List[str]] = None


class HistoryTeamSummary(BaseModel):
    team: str
    best: int
    worst: int
    average: float
    median: float
    final: int


class HistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    computed: bool
    start: int
    end: int
    chart_start: int = Field(..., alias="chartStart")
    visible_teams: List[str] = Field(default_factory=list, alias="visibleTeams")
    positions: Dict[str, List[int]] = Field(default_factory=dict)
    chart: List[Dict[str, Any]] = Field(default_factory=list)
    summaries: List[HistoryTeamSummary] = Field(default_factory=list)
    summary: Optional[FoldSummaryPayload] = None
