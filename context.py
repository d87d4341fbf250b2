"""Shared league data context and reload management utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional

from config import FIXTURES_CSV, STANDINGS_CSV, settings
from data import load_league
from standings import Fixture, TeamStanding


def _resolve_data_path(name: str) -> Path:
    path = Path(name)
    if not path.is_absolute():
        path = Path(__file__).resolve().parent / name
    return path


DEFAULT_STANDINGS_PATH = _resolve_data_path(os.getenv("STANDINGS_CSV", STANDINGS_CSV))
DEFAULT_FIXTURES_PATH = _resolve_data_path(os.getenv("FIXTURES_CSV", FIXTURES_CSV))


@dataclass(frozen=True)
class LeagueDataContext:
    """Immutable snapshot of the parsed base table and fixture list."""

    standings: List[TeamStanding]
    fixtures: List[Fixture]
    created_at: datetime
    standings_path: Path
    fixtures_path: Path
    settings_snapshot: Dict[str, Any]

    def fixture_ids(self) -> set[str]:
        return {fixture.fixture_id for fixture in self.fixtures}

    def gameweeks(self) -> List[int]:
        return sorted({fixture.gameweek for fixture in self.fixtures})


def build_context(standings_path: Path, fixtures_path: Path) -> LeagueDataContext:
    """Parse both CSVs into a fresh :class:`LeagueDataContext`."""

    standings_path = Path(standings_path)
    fixtures_path = Path(fixtures_path)
    standings, fixtures = load_league(standings_path, fixtures_path)
    return LeagueDataContext(
        standings=standings,
        fixtures=fixtures,
        created_at=datetime.now(timezone.utc),
        standings_path=standings_path,
        fixtures_path=fixtures_path,
        settings_snapshot=settings.snapshot(),
    )


class ContextManager:
    """Manage the active :class:`LeagueDataContext` with atomic reloads."""

    def __init__(
        self,
        *,
        standings_path: Path | str | None = None,
        fixtures_path: Path | str | None = None,
    ) -> None:
        self._lock = RLock()
        self._standings_path = Path(standings_path) if standings_path else DEFAULT_STANDINGS_PATH
        self._fixtures_path = Path(fixtures_path) if fixtures_path else DEFAULT_FIXTURES_PATH
        self._context: Optional[LeagueDataContext] = None

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._context is not None

    def get(self) -> LeagueDataContext:
        """Return the current context, loading it lazily if needed."""

        with self._lock:
            if self._context is None:
                self._context = build_context(self._standings_path, self._fixtures_path)
            return self._context

    def reload(
        self,
        *,
        standings_path: Path | str | None = None,
        fixtures_path: Path | str | None = None,
    ) -> LeagueDataContext:
        """Reload inputs and swap in a brand-new context atomically."""

        new_standings = Path(standings_path) if standings_path else self._standings_path
        new_fixtures = Path(fixtures_path) if fixtures_path else self._fixtures_path
        fresh = build_context(new_standings, new_fixtures)

        with self._lock:
            self._standings_path = new_standings
            self._fixtures_path = new_fixtures
            self._context = fresh
            return self._context

    def metadata(self) -> Dict[str, Any]:
        """Return lightweight info about the active context."""

        ctx = self.get()
        gameweeks = ctx.gameweeks()
        return {
            "last_reload": ctx.created_at,
            "standings_path": str(ctx.standings_path),
            "fixtures_path": str(ctx.fixtures_path),
            "team_count": len(ctx.standings),
            "fixture_count": len(ctx.fixtures),
            "first_gameweek": gameweeks[0] if gameweeks else None,
            "last_gameweek": gameweeks[-1] if gameweeks else None,
            "settings": ctx.settings_snapshot,
        }


# Global singleton used by the CLI/API layers.
context_manager = ContextManager()
