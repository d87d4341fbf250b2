"""Runtime configuration knobs for the league table predictor.

Season shape (length, team count, gameweek windows) used to be baked into the
projection code as literals. They now live in a thread-safe
:class:`SettingsManager` so the API can override them at runtime and other
leagues can reuse the engine. Modules read them with
``settings.get(...)`` at call time so an override applies immediately.
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict


class SettingsManager:
    """Thread-safe accessor for mutable league knobs.

    The manager stores a copy of the default settings and exposes ``get``/``set``
    helpers. ``snapshot`` returns a plain dictionary that can be embedded in
    API responses without risking mid-request mutation.
    """

    def __init__(self, defaults: Dict[str, Any]) -> None:
        self._defaults = dict(defaults)
        self._settings = dict(defaults)
        self._lock = RLock()

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._settings.keys())

    def get(self, name: str) -> Any:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            return self._settings[name]

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            default = self._defaults[name]
            if isinstance(default, bool):
                value = _coerce_bool(value)
            elif isinstance(default, int):
                value = _coerce_int(value)
            self._settings[name] = value

    def reset(self, name: str | None = None) -> None:
        with self._lock:
            if name is None:
                self._settings = dict(self._defaults)
                return
            if name not in self._defaults:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = self._defaults[name]

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._settings)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
        raise ValueError(f"Cannot interpret '{value}' as a boolean")
    return bool(value)


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Cannot interpret {value!r} as an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Expected a whole number, got {value!r}")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"Cannot interpret '{value}' as an integer") from None
    raise TypeError(f"Cannot interpret {value!r} as an integer")


_DEFAULT_SETTINGS: Dict[str, Any] = {
    "season_gameweeks": 38,
    "expected_teams": 20,
    "fixtures_per_gameweek": 10,
    "history_start_gameweek": 1,
    "history_end_gameweek": 38,
    "remaining_start_gameweek": 18,
    "max_predicted_goals": 15,
    "validate_predictions": True,
    "chart_top_teams": 6,
}

SETTINGS_HELP: Dict[str, str] = {
    "season_gameweeks": "Number of gameweeks in a season; every position history has this many entries.",
    "expected_teams": "Team count the league is expected to have. Ingestion only warns on a mismatch.",
    "fixtures_per_gameweek": "How many chronologically ordered fixtures make up one gameweek when assigning weeks.",
    "history_start_gameweek": "Default first gameweek replayed for position histories.",
    "history_end_gameweek": "Default last gameweek replayed for position histories.",
    "remaining_start_gameweek": "First gameweek still open for predictions; also the start of the trajectory chart.",
    "max_predicted_goals": "Upper clamp applied to scores entered through the fixture inputs.",
    "validate_predictions": "Reject non-integer or negative predicted scores before folding them into the table.",
    "chart_top_teams": "How many of the projected top teams the trajectory chart shows by default.",
}

settings = SettingsManager(_DEFAULT_SETTINGS)

# Relative to the project root; the API can point elsewhere via env vars.
STANDINGS_CSV = "standings.csv"
FIXTURES_CSV = "fixtures.csv"

# Table zones by rank (inclusive bounds); relegation counts from the bottom.
ZONES = [
    ("champions_league", 1, 4),
    ("europa_league", 5, 5),
]
RELEGATION_PLACES = 3

# Standings CSV header (lower-cased) -> TeamStanding field
STANDINGS_COLUMNS = {
    "team": "team",
    "played": "played",
    "won": "win",
    "drawn": "draw",
    "lost": "loss",
    "goals for": "goals_for",
    "goals against": "goals_against",
    "points": "points",
    "form": "form",
}
