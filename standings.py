"""Projected league standings and per-gameweek position histories.

The engine folds predicted scores into a copy of the base table, re-ranks the
teams (points, then goal difference, then goals scored, ties keeping their
input order) and, for the trajectory chart, replays that fold one gameweek at a
time to record every team's rank after each round. Everything here is pure: the
caller's standings and fixtures are never mutated and no I/O happens. Parsing
lives in :mod:`data`.
"""

from __future__ import annotations

import logging
import numbers
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from config import settings

logger = logging.getLogger(__name__)


class InvalidPrediction(ValueError):
    """A predicted score that is not a non-negative integer."""

    def __init__(self, message: str, fixture_id: Optional[str] = None, value: Any = None) -> None:
        self.message = message
        self.fixture_id = fixture_id
        self.value = value
        super().__init__(message)

    def __str__(self) -> str:
        if self.fixture_id:
            return f"Invalid prediction for '{self.fixture_id}': {self.message} (got: {self.value!r})"
        return self.message


@dataclass
class TeamStanding:
    team: str
    played: int = 0
    win: int = 0
    draw: int = 0
    loss: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    rank: int = 0
    form: str = ""

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def clone(self) -> "TeamStanding":
        return replace(self)

    def sort_key(self) -> Tuple[int, int, int]:
        return (self.points, self.goal_difference, self.goals_for)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "team": self.team,
            "played": self.played,
            "win": self.win,
            "draw": self.draw,
            "loss": self.loss,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
            "form": self.form,
        }


@dataclass(frozen=True)
class Fixture:
    fixture_id: str
    home: str
    away: str
    gameweek: int
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    date: str = ""
    day: str = ""
    time: str = ""

    @property
    def completed(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass(frozen=True)
class Prediction:
    home: int
    away: int

    @classmethod
    def from_value(cls, raw: Any, fixture_id: Optional[str] = None) -> "Prediction":
        """Build a prediction from another prediction, a ``{home, away}`` mapping or a pair."""

        if isinstance(raw, Prediction):
            return raw
        if isinstance(raw, Mapping):
            if "home" not in raw or "away" not in raw:
                raise InvalidPrediction("expected 'home' and 'away' keys", fixture_id, raw)
            return cls(home=raw["home"], away=raw["away"])
        if isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) == 2:
            return cls(home=raw[0], away=raw[1])
        raise InvalidPrediction("expected a score pair", fixture_id, raw)

    def validate(self, fixture_id: Optional[str] = None) -> "Prediction":
        for side, value in (("home", self.home), ("away", self.away)):
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidPrediction(f"{side} score must be an integer", fixture_id, value)
            if value < 0:
                raise InvalidPrediction(f"{side} score cannot be negative", fixture_id, value)
        return self


PredictionMap = Mapping[str, Any]
PositionHistory = Dict[str, List[int]]


@dataclass
class FoldSummary:
    """What happened when predictions were applied to a working table."""

    applied: int = 0
    skipped_fixtures: List[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_fixtures)

    def merge(self, other: "FoldSummary") -> None:
        self.applied += other.applied
        self.skipped_fixtures.extend(other.skipped_fixtures)


def validate_predictions(predictions: PredictionMap) -> Dict[str, Prediction]:
    """Normalise and check every prediction, raising :class:`InvalidPrediction` on the first bad one."""

    validated: Dict[str, Prediction] = {}
    for fixture_id, raw in predictions.items():
        validated[fixture_id] = Prediction.from_value(raw, fixture_id).validate(fixture_id)
    return validated


def _prepare_predictions(predictions: PredictionMap) -> Dict[str, Prediction]:
    if settings.get("validate_predictions"):
        return validate_predictions(predictions)
    return {fixture_id: Prediction.from_value(raw, fixture_id) for fixture_id, raw in predictions.items()}


def fold_result(home: TeamStanding, away: TeamStanding, home_score: int, away_score: int) -> None:
    """Apply one result to both teams' cumulative stats, in place.

    Calling this twice for the same fixture counts it twice; callers guarantee
    one call per (fixture, prediction) pair.
    """

    home.played += 1
    away.played += 1

    home.goals_for += home_score
    home.goals_against += away_score
    away.goals_for += away_score
    away.goals_against += home_score

    if home_score > away_score:
        home.win += 1
        home.points += 3
        away.loss += 1
    elif home_score < away_score:
        away.win += 1
        away.points += 3
        home.loss += 1
    else:
        home.draw += 1
        away.draw += 1
        home.points += 1
        away.points += 1


def apply_predictions(
    working: Dict[str, TeamStanding],
    fixtures: Iterable[Fixture],
    predictions: Mapping[str, Prediction],
) -> FoldSummary:
    """Fold every predicted fixture into ``working``.

    Fixtures without a prediction are ignored, even when they already carry a
    final score (those are assumed to be in the base table). Fixtures naming a
    team that is not in ``working`` are skipped and reported in the summary.
    """

    summary = FoldSummary()
    for fixture in fixtures:
        prediction = predictions.get(fixture.fixture_id)
        if prediction is None:
            continue
        home = working.get(fixture.home)
        away = working.get(fixture.away)
        if home is None or away is None:
            logger.debug(
                "Skipping %s: %s vs %s has no matching team in the table",
                fixture.fixture_id,
                fixture.home,
                fixture.away,
            )
            summary.skipped_fixtures.append(fixture.fixture_id)
            continue
        fold_result(home, away, prediction.home, prediction.away)
        summary.applied += 1
    return summary


def _ranked_order(standings: Iterable[TeamStanding]) -> List[TeamStanding]:
    # sorted() keeps equal keys in input order, reverse=True included.
    return sorted(standings, key=TeamStanding.sort_key, reverse=True)


def rank_standings(standings: Iterable[TeamStanding]) -> List[TeamStanding]:
    """Return copies of ``standings`` ordered best to worst with ``rank`` set (1-based)."""

    ranked: List[TeamStanding] = []
    for position, standing in enumerate(_ranked_order(standings), start=1):
        ranked.append(replace(standing, rank=position))
    return ranked


def _working_copy(base: Iterable[TeamStanding]) -> Dict[str, TeamStanding]:
    return {standing.team: standing.clone() for standing in base}


def _log_skips(summary: FoldSummary, operation: str) -> None:
    if summary.skipped:
        logger.warning(
            "%s skipped %d predicted fixture(s) naming unknown teams: %s",
            operation,
            summary.skipped,
            ", ".join(summary.skipped_fixtures),
        )


def project_standings_with_summary(
    base: Sequence[TeamStanding],
    fixtures: Sequence[Fixture],
    predictions: PredictionMap,
) -> Tuple[List[TeamStanding], FoldSummary]:
    """Project the final table and report which predictions were applied."""

    prepared = _prepare_predictions(predictions)
    working = _working_copy(base)
    summary = apply_predictions(working, fixtures, prepared)
    _log_skips(summary, "Projection")
    return rank_standings(working.values()), summary


def project_standings(
    base: Sequence[TeamStanding],
    fixtures: Sequence[Fixture],
    predictions: PredictionMap,
) -> List[TeamStanding]:
    """Fold all predicted results into the base table and rank the outcome."""

    projected, _ = project_standings_with_summary(base, fixtures, predictions)
    return projected


def base_position_history(
    base: Sequence[TeamStanding],
    season_length: Optional[int] = None,
) -> PositionHistory:
    """Every team's base rank repeated for each gameweek of the season."""

    length = settings.get("season_gameweeks") if season_length is None else int(season_length)
    return {standing.team: [standing.rank] * length for standing in rank_standings(base)}


def bucket_fixtures(fixtures: Iterable[Fixture], start: int, end: int) -> Dict[int, List[Fixture]]:
    """Group fixtures by gameweek, dropping any outside ``start..end``."""

    buckets: Dict[int, List[Fixture]] = {}
    for fixture in fixtures:
        if start <= fixture.gameweek <= end:
            buckets.setdefault(fixture.gameweek, []).append(fixture)
    return buckets


def resolve_gameweek_range(
    start: Optional[int] = None,
    end: Optional[int] = None,
    season_length: Optional[int] = None,
) -> Tuple[int, int, int]:
    """Fill in default replay bounds and check ``1 <= start <= end <= season_length``.

    Returns ``(start, end, season_length)``. A defaulted end is clamped to the
    season length; an explicit one is not.
    """

    length = settings.get("season_gameweeks") if season_length is None else int(season_length)
    first = settings.get("history_start_gameweek") if start is None else int(start)
    last = settings.get("history_end_gameweek") if end is None else int(end)
    last = min(last, length) if end is None else last
    if not 1 <= first <= last <= length:
        raise ValueError(
            f"Gameweek range {first}-{last} must satisfy 1 <= start <= end <= {length}"
        )
    return first, last, length


def open_gameweeks(season_length: Optional[int] = None) -> List[int]:
    """Gameweeks still open for predictions: ``remaining_start_gameweek`` to season end."""

    length = settings.get("season_gameweeks") if season_length is None else int(season_length)
    first_open = max(1, int(settings.get("remaining_start_gameweek")))
    return list(range(first_open, length + 1))


def replay_positions_with_summary(
    base: Sequence[TeamStanding],
    fixtures: Sequence[Fixture],
    predictions: PredictionMap,
    start: Optional[int] = None,
    end: Optional[int] = None,
    *,
    season_length: Optional[int] = None,
) -> Tuple[PositionHistory, FoldSummary]:
    """Replay predictions gameweek by gameweek, recording each team's rank.

    Slots outside ``start..end`` keep the base rank. Gameweeks are strictly
    sequential because each round's table builds on the previous one; a round
    with nothing predicted still records the (unchanged) ranking.
    """

    first, last, length = resolve_gameweek_range(start, end, season_length)
    history = base_position_history(base, length)
    summary = FoldSummary()
    if not predictions:
        return history, summary

    prepared = _prepare_predictions(predictions)
    started = time.perf_counter()
    working = _working_copy(base)
    buckets = bucket_fixtures(fixtures, first, last)

    for gameweek in range(first, last + 1):
        summary.merge(apply_predictions(working, buckets.get(gameweek, []), prepared))
        for position, standing in enumerate(_ranked_order(working.values()), start=1):
            history[standing.team][gameweek - 1] = position

    logger.debug(
        "Replayed gameweeks %d-%d for %d teams in %.1f ms",
        first,
        last,
        len(working),
        (time.perf_counter() - started) * 1000.0,
    )
    _log_skips(summary, "Replay")
    return history, summary


def replay_positions(
    base: Sequence[TeamStanding],
    fixtures: Sequence[Fixture],
    predictions: PredictionMap,
    start: Optional[int] = None,
    end: Optional[int] = None,
    *,
    season_length: Optional[int] = None,
) -> PositionHistory:
    """Rank of every team after each gameweek in ``start..end`` (index ``gameweek - 1``)."""

    history, _ = replay_positions_with_summary(
        base,
        fixtures,
        predictions,
        start,
        end,
        season_length=season_length,
    )
    return history


__all__ = [
    "InvalidPrediction",
    "TeamStanding",
    "Fixture",
    "Prediction",
    "PredictionMap",
    "PositionHistory",
    "FoldSummary",
    "validate_predictions",
    "fold_result",
    "apply_predictions",
    "rank_standings",
    "project_standings",
    "project_standings_with_summary",
    "base_position_history",
    "bucket_fixtures",
    "resolve_gameweek_range",
    "open_gameweeks",
    "replay_positions",
    "replay_positions_with_summary",
]
