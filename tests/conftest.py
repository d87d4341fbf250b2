from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from api.cache import history_cache
from api.dependencies import get_context_manager
from api.main import app
from config import settings
from context import ContextManager

# Four-team double round robin: two fixtures per gameweek, six gameweeks.
LEAGUE_SETTINGS: Dict[str, int] = {
    "season_gameweeks": 6,
    "expected_teams": 4,
    "fixtures_per_gameweek": 2,
    "history_start_gameweek": 1,
    "history_end_gameweek": 6,
    "remaining_start_gameweek": 3,
}

STANDINGS_CSV = """Team,Played,Won,Drawn,Lost,Goals For,Goals Against,Goal Difference,Points,Form
Alpha,2,2,0,0,5,1,4,6,WW
Bravo,2,1,0,1,3,3,0,3,WL
Charlie,2,1,0,1,2,2,0,3,LW
Delta,2,0,0,2,1,5,-4,0,LL
"""

FIXTURES_CSV = """League,Date,Day,Time,Home,Away
Test League,20250816,Sat,15:00,Alpha,Bravo
Test League,20250816,Sat,17:30,Charlie,Delta
Test League,20250823,Sat,15:00,Alpha,Charlie
Test League,20250823,Sat,17:30,Bravo,Delta
Test League,20250830,Sat,15:00,Alpha,Delta
Test League,20250830,Sat,17:30,Bravo,Charlie
Test League,20250906,Sat,15:00,Bravo,Alpha
Test League,20250906,Sat,17:30,Delta,Charlie
Test League,20250913,Sat,15:00,Charlie,Alpha
Test League,20250913,Sat,17:30,Delta,Bravo
Test League,20250920,Sat,15:00,Delta,Alpha
Test League,20250920,Sat,17:30,Charlie,Bravo
"""


@pytest.fixture(autouse=True)
def _reset_shared_state() -> Iterator[None]:
    settings.reset()
    history_cache.clear()
    yield
    settings.reset()
    history_cache.clear()


@pytest.fixture
def league_settings() -> Dict[str, int]:
    for name, value in LEAGUE_SETTINGS.items():
        settings.set(name, value)
    return dict(LEAGUE_SETTINGS)


@pytest.fixture
def league_files(tmp_path: Path) -> tuple[Path, Path]:
    standings_path = tmp_path / "standings.csv"
    fixtures_path = tmp_path / "fixtures.csv"
    standings_path.write_text(STANDINGS_CSV)
    fixtures_path.write_text(FIXTURES_CSV)
    return standings_path, fixtures_path


@pytest.fixture
def client(league_settings: Dict[str, int], league_files: tuple[Path, Path]) -> Iterator[TestClient]:
    standings_path, fixtures_path = league_files
    manager = ContextManager(standings_path=standings_path, fixtures_path=fixtures_path)
    app.dependency_overrides[get_context_manager] = lambda: manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
