from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, status

from api.cache import build_history_key, history_cache
from api.dependencies import get_league_context, require_api_key
from api.models import (
    FoldSummaryPayload,
    HistoryRequest,
    HistoryResponse,
    HistoryTeamSummary,
    ProjectRequest,
    ProjectResponse,
    ScorePrediction,
    StandingRow,
)
from config import settings
from context import LeagueDataContext
from reports import (
    default_chart_teams,
    position_history_frame,
    standings_dataframe,
    summarize_positions,
)
from standings import (
    FoldSummary,
    InvalidPrediction,
    Prediction,
    TeamStanding,
    project_standings_with_summary,
    replay_positions_with_summary,
    resolve_gameweek_range,
)

router = APIRouter(prefix="/standings", tags=["standings"], dependencies=[Depends(require_api_key)])


def _convert_predictions(
    ctx: LeagueDataContext,
    raw: Dict[str, ScorePrediction],
) -> Dict[str, Prediction]:
    known = ctx.fixture_ids()
    unknown = sorted(fixture_id for fixture_id in raw if fixture_id not in known)
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown fixture id(s): {', '.join(unknown)}",
        )
    return {fixture_id: Prediction(home=pred.home, away=pred.away) for fixture_id, pred in raw.items()}


def _summary_payload(summary: FoldSummary) -> FoldSummaryPayload:
    return FoldSummaryPayload(
        applied=summary.applied,
        skipped=summary.skipped,
        skippedFixtures=list(summary.skipped_fixtures),
    )


def _standing_rows(projected: Sequence[TeamStanding], base: Sequence[TeamStanding]) -> List[StandingRow]:
    form_by_team = {standing.team: standing.form for standing in projected}
    df = standings_dataframe(projected, base)
    return [
        StandingRow(
            rank=int(row["Rank"]),
            team=str(row["Team"]),
            played=int(row["P"]),
            win=int(row["W"]),
            draw=int(row["D"]),
            loss=int(row["L"]),
            goalsFor=int(row["GF"]),
            goalsAgainst=int(row["GA"]),
            goalDifference=int(row["GD"]),
            points=int(row["Pts"]),
            move=int(row["Move"]),
            zone=str(row["Zone"]),
            form=form_by_team.get(str(row["Team"]), ""),
        )
        for row in df.to_dict(orient="records")
    ]


@router.post("/project", response_model=ProjectResponse, summary="Project the final table from score predictions")
async def project(
    payload: ProjectRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> ProjectResponse:
    predictions = _convert_predictions(ctx, payload.predictions)
    try:
        projected, summary = project_standings_with_summary(ctx.standings, ctx.fixtures, predictions)
    except InvalidPrediction as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    rows = _standing_rows(projected, ctx.standings)
    if payload.teams is not None:
        # Ranks stay those of the full table.
        wanted = set(payload.teams)
        rows = [row for row in rows if row.team in wanted]

    return ProjectResponse(
        standings=rows,
        summary=_summary_payload(summary),
        predictionCount=len(predictions),
    )


def _resolve_window(payload: HistoryRequest) -> tuple[int, int, int, int]:
    try:
        start, end, season_length = resolve_gameweek_range(payload.start, payload.end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    chart_start = payload.chart_start
    if chart_start is None:
        chart_start = int(settings.get("remaining_start_gameweek"))
    chart_start = min(max(chart_start, start), end)
    return start, end, chart_start, season_length


@router.post("/history", response_model=HistoryResponse, summary="Replay predictions gameweek by gameweek")
async def history(
    payload: HistoryRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> HistoryResponse:
    start, end, chart_start, season_length = _resolve_window(payload)
    predictions = _convert_predictions(ctx, payload.predictions)

    if not predictions:
        return HistoryResponse(computed=False, start=start, end=end, chartStart=chart_start)

    key = build_history_key(
        context_timestamp=ctx.created_at.isoformat(),
        start=start,
        end=end,
        season_length=season_length,
        predictions=predictions,
    )
    cached = history_cache.get(key)
    if cached is None:
        try:
            cached = replay_positions_with_summary(
                ctx.standings,
                ctx.fixtures,
                predictions,
                start,
                end,
                season_length=season_length,
            )
        except (InvalidPrediction, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        history_cache.set(key, cached)
    positions, summary = cached

    visible: Optional[List[str]] = payload.teams
    if visible is None:
        projected, _ = project_standings_with_summary(ctx.standings, ctx.fixtures, predictions)
        visible = default_chart_teams(projected)
    visible = [team for team in visible if team in positions]

    chart_df = position_history_frame(positions, chart_start, end, visible)
    summary_df = summarize_positions(positions, chart_start, end)
    summaries = [
        HistoryTeamSummary(
            team=str(row["Team"]),
            best=int(row["Best"]),
            worst=int(row["Worst"]),
            average=float(row["Average"]),
            median=float(row["Median"]),
            final=int(row["Final"]),
        )
        for row in summary_df.to_dict(orient="records")
    ]

    return HistoryResponse(
        computed=True,
        start=start,
        end=end,
        chartStart=chart_start,
        visibleTeams=visible,
        positions={team: list(ranks) for team, ranks in positions.items()},
        chart=chart_df.to_dict(orient="records"),
        summaries=summaries,
        summary=_summary_payload(summary),
    )
