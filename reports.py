from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from config import RELEGATION_PLACES, ZONES, settings
from standings import PositionHistory, TeamStanding

TABLE_COLUMNS = ["Rank", "Team", "P", "W", "D", "L", "GF", "GA", "GD", "Pts", "Move", "Zone"]


def zone_for_rank(rank: int, team_count: int) -> str:
    for name, lo, hi in ZONES:
        if lo <= rank <= hi:
            return name
    if team_count and rank > team_count - RELEGATION_PLACES:
        return "relegation"
    return ""


def position_changes(
    projected: Sequence[TeamStanding],
    base: Sequence[TeamStanding],
) -> Dict[str, int]:
    """Places gained per team (positive = moved up) relative to the base table."""

    base_rank = {standing.team: standing.rank for standing in base}
    return {
        standing.team: base_rank.get(standing.team, 0) - standing.rank
        for standing in projected
    }


def standings_dataframe(
    projected: Sequence[TeamStanding],
    base: Optional[Sequence[TeamStanding]] = None,
) -> pd.DataFrame:
    """Turn a ranked table into the display dataframe (one row per team)."""

    moves = position_changes(projected, base) if base is not None else {}
    team_count = len(projected)
    rows: List[Dict[str, object]] = []
    for standing in projected:
        rows.append(
            {
                "Rank": standing.rank,
                "Team": standing.team,
                "P": standing.played,
                "W": standing.win,
                "D": standing.draw,
                "L": standing.loss,
                "GF": standing.goals_for,
                "GA": standing.goals_against,
                "GD": standing.goal_difference,
                "Pts": standing.points,
                "Move": moves.get(standing.team, 0),
                "Zone": zone_for_rank(standing.rank, team_count),
            }
        )
    if not rows:
        return pd.DataFrame(columns=TABLE_COLUMNS)
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def default_chart_teams(projected: Sequence[TeamStanding], limit: Optional[int] = None) -> List[str]:
    count = settings.get("chart_top_teams") if limit is None else limit
    return [standing.team for standing in projected[: max(0, count)]]


def position_history_frame(
    history: PositionHistory,
    start: int,
    end: int,
    teams: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Chart rows: one per gameweek (``GW<n>``), one column per visible team."""

    # Caller order wins (e.g. projected top-N); duplicates dropped.
    visible = list(dict.fromkeys(teams)) if teams is not None else sorted(history)
    visible = [team for team in visible if team in history]
    gameweeks = list(range(start, end + 1))
    data = {team: [history[team][gw - 1] for gw in gameweeks] for team in visible}
    frame = pd.DataFrame(data, index=pd.Index([f"GW{gw}" for gw in gameweeks], name="gameweek"))
    return frame.reset_index()


def summarize_positions(history: PositionHistory, start: int, end: int) -> pd.DataFrame:
    """Best, worst, average and median rank per team across ``start..end``."""

    rows: List[Dict[str, object]] = []
    for team, positions in history.items():
        window = np.array(positions[start - 1 : end], dtype=float)
        if window.size == 0:
            continue
        rows.append(
            {
                "Team": team,
                "Best": int(window.min()),
                "Worst": int(window.max()),
                "Average": round(float(window.mean()), 2),
                "Median": float(np.median(window)),
                "Final": int(window[-1]),
            }
        )
    columns = ["Team", "Best", "Worst", "Average", "Median", "Final"]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns).sort_values(["Final", "Team"]).reset_index(drop=True)


def format_standings_table(df: pd.DataFrame) -> str:
    if df.empty:
        return "(no teams)"
    display = df.copy()
    if "GD" in display.columns:
        display["GD"] = display["GD"].map(lambda v: f"{int(v):+d}")
    if "Move" in display.columns:
        display["Move"] = display["Move"].map(lambda v: f"+{v}" if v > 0 else ("-" if v == 0 else str(v)))
    return display.to_string(index=False)
