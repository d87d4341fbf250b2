"""CSV and JSON ingestion for the base table, fixture list and predictions.

The projection engine only sees parsed records; this module turns the raw
exports into them. Fixture files carry no gameweek column, so weeks are
assigned by sorting fixtures chronologically and cutting them into buckets of
``fixtures_per_gameweek``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from config import STANDINGS_COLUMNS, settings
from standings import Fixture, InvalidPrediction, Prediction, TeamStanding, validate_predictions

logger = logging.getLogger(__name__)

FIXTURE_MARKER_COLUMNS = {"league", "home", "away"}
HOME_SCORE_COLUMNS = ("homescore", "home score", "home_score")
AWAY_SCORE_COLUMNS = ("awayscore", "away score", "away_score")


def _normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = (
        df.columns.astype(str)
        .str.replace("\ufeff", "", regex=False)
        .str.strip()
        .str.lower()
    )
    return df


def read_csv_table(path: str | Path) -> pd.DataFrame:
    """Read a CSV as strings with trimmed, lower-cased headers."""

    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    df = _normalise_columns(df)
    for col in df.columns:
        df[col] = df[col].str.strip()
    return df


def is_fixtures_frame(df: pd.DataFrame) -> bool:
    return FIXTURE_MARKER_COLUMNS.issubset(set(df.columns))


def _iso_date(raw: str) -> str:
    if len(raw) < 8 or not raw[:8].isdigit():
        return ""
    return f"{raw[:4]}-{raw[4:6]}-{raw[6:8]}"


def _first_present(df: pd.DataFrame, candidates: Tuple[str, ...]) -> Optional[str]:
    for name in candidates:
        if name in df.columns:
            return name
    return None


def _optional_score(value: Any) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def load_fixtures_frame(
    df: pd.DataFrame,
    fixtures_per_gameweek: Optional[int] = None,
) -> List[Fixture]:
    """Convert a fixtures table into :class:`Fixture` records with gameweeks assigned."""

    df = _normalise_columns(df.copy())
    missing = [col for col in ("home", "away") if col not in df.columns]
    if missing:
        raise ValueError(f"Fixtures file missing required columns: {missing}")

    per_week = settings.get("fixtures_per_gameweek") if fixtures_per_gameweek is None else fixtures_per_gameweek
    if per_week <= 0:
        raise ValueError("fixtures_per_gameweek must be positive")

    working = df.reset_index(drop=True)
    working["_row"] = working.index
    dates = working["date"].astype(str) if "date" in working.columns else pd.Series("", index=working.index)
    working["_date_raw"] = dates
    working["_date_value"] = pd.to_numeric(dates.str[:8], errors="coerce").fillna(0).astype("int64")

    home_col = _first_present(working, HOME_SCORE_COLUMNS)
    away_col = _first_present(working, AWAY_SCORE_COLUMNS)
    home_scores = (
        pd.to_numeric(working[home_col], errors="coerce") if home_col else pd.Series(float("nan"), index=working.index)
    )
    away_scores = (
        pd.to_numeric(working[away_col], errors="coerce") if away_col else pd.Series(float("nan"), index=working.index)
    )
    working["_home_score"] = home_scores
    working["_away_score"] = away_scores

    # Stable so same-day fixtures keep their file order.
    working = working.sort_values("_date_value", kind="stable").reset_index(drop=True)

    fixtures: List[Fixture] = []
    for position, row in working.iterrows():
        fixtures.append(
            Fixture(
                fixture_id=f"fixture-{row['_row']}",
                home=str(row["home"]).strip(),
                away=str(row["away"]).strip(),
                gameweek=int(position) // per_week + 1,
                home_score=_optional_score(row["_home_score"]),
                away_score=_optional_score(row["_away_score"]),
                date=_iso_date(str(row["_date_raw"])),
                day=str(row.get("day", "") or ""),
                time=str(row.get("time", "") or ""),
            )
        )
    return fixtures


def load_standings_frame(df: pd.DataFrame) -> List[TeamStanding]:
    """Convert a league table into :class:`TeamStanding` rows, ranked by file order."""

    df = _normalise_columns(df.copy())
    if "team" not in df.columns:
        raise ValueError("Standings file must contain a 'team' column")

    working = df.reset_index(drop=True)
    numeric_fields = {
        src: dst for src, dst in STANDINGS_COLUMNS.items() if dst not in ("team", "form")
    }
    for src in numeric_fields:
        if src in working.columns:
            working[src] = pd.to_numeric(working[src], errors="coerce").fillna(0).astype(int)
        else:
            working[src] = 0

    rows: List[TeamStanding] = []
    for index, row in working.iterrows():
        kwargs: Dict[str, Any] = {dst: int(row[src]) for src, dst in numeric_fields.items()}
        standing = TeamStanding(
            team=str(row["team"]).strip(),
            rank=int(index) + 1,
            form=str(row.get("form", "") or ""),
            **kwargs,
        )
        if "goal difference" in working.columns:
            stated = pd.to_numeric(row["goal difference"], errors="coerce")
            if not pd.isna(stated) and int(stated) != standing.goal_difference:
                logger.warning(
                    "Goal difference for %s is %s in the file but goals give %d; using goals",
                    standing.team,
                    row["goal difference"],
                    standing.goal_difference,
                )
        rows.append(standing)
    return rows


def load_league(
    first_path: str | Path,
    second_path: str | Path,
    *,
    fixtures_per_gameweek: Optional[int] = None,
) -> Tuple[List[TeamStanding], List[Fixture]]:
    """Load the table and fixtures from two CSVs, whichever order they are given in."""

    first = read_csv_table(first_path)
    second = read_csv_table(second_path)
    if is_fixtures_frame(first):
        fixtures_df, standings_df = first, second
    else:
        fixtures_df, standings_df = second, first

    fixtures = load_fixtures_frame(fixtures_df, fixtures_per_gameweek)
    standings = load_standings_frame(standings_df)
    logger.info("Parsed %d fixtures and %d teams", len(fixtures), len(standings))

    expected_teams = settings.get("expected_teams")
    expected_fixtures = expected_teams * (expected_teams - 1)
    if len(standings) != expected_teams:
        logger.warning("Expected %d teams, got %d", expected_teams, len(standings))
    if len(fixtures) != expected_fixtures:
        logger.warning("Expected %d fixtures, got %d", expected_fixtures, len(fixtures))
    return standings, fixtures


def clamp_score(value: Any, maximum: Optional[int] = None) -> int:
    """Coerce a typed-in score to an int within ``0..maximum`` (garbage becomes 0)."""

    upper = settings.get("max_predicted_goals") if maximum is None else maximum
    try:
        score = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(upper, score))


def parse_predictions(raw: Dict[str, Any], *, clamp: bool = False) -> Dict[str, Prediction]:
    """Turn ``{fixture_id: {"home": h, "away": a}}`` into validated predictions."""

    if not isinstance(raw, dict):
        raise InvalidPrediction("predictions must be an object keyed by fixture id", value=type(raw).__name__)
    parsed: Dict[str, Prediction] = {}
    for fixture_id, entry in raw.items():
        prediction = Prediction.from_value(entry, fixture_id)
        if clamp:
            prediction = Prediction(home=clamp_score(prediction.home), away=clamp_score(prediction.away))
        parsed[str(fixture_id)] = prediction
    return validate_predictions(parsed)


def load_predictions(path: str | Path, *, clamp: bool = False) -> Dict[str, Prediction]:
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Predictions file not found: {json_path}")
    try:
        raw = json.loads(json_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Predictions file is not valid JSON: {json_path}") from exc
    return parse_predictions(raw, clamp=clamp)


__all__ = [
    "read_csv_table",
    "is_fixtures_frame",
    "load_fixtures_frame",
    "load_standings_frame",
    "load_league",
    "clamp_score",
    "parse_predictions",
    "load_predictions",
]
