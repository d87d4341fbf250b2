from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from data import (
    clamp_score,
    is_fixtures_frame,
    load_fixtures_frame,
    load_league,
    load_predictions,
    load_standings_frame,
    parse_predictions,
    read_csv_table,
)
from standings import InvalidPrediction, Prediction


def _fixtures_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "League": ["X", "X", "X", "X"],
            " Date": ["20250823", "20250816", "20250816", "20250830"],
            "Day": ["Sat", "Sat", "Sat", "Sat"],
            "Time": ["15:00", "12:30", "17:30", "15:00"],
            "Home": ["Charlie", "Alpha", "Echo", "Alpha"],
            "Away": ["Delta", "Bravo", "Foxtrot", "Charlie"],
        }
    )


def test_fixtures_get_gameweeks_in_date_order() -> None:
    fixtures = load_fixtures_frame(_fixtures_df(), fixtures_per_gameweek=2)

    assert [f.fixture_id for f in fixtures] == ["fixture-1", "fixture-2", "fixture-0", "fixture-3"]
    assert [f.gameweek for f in fixtures] == [1, 1, 2, 2]
    first = fixtures[0]
    assert (first.home, first.away, first.date, first.day, first.time) == ("Alpha", "Bravo", "2025-08-16", "Sat", "12:30")
    assert not first.completed


def test_fixtures_per_gameweek_defaults_to_setting(league_settings) -> None:
    fixtures = load_fixtures_frame(_fixtures_df())
    assert [f.gameweek for f in fixtures] == [1, 1, 2, 2]


def test_fixture_scores_are_read_when_present() -> None:
    df = _fixtures_df()
    df["HomeScore"] = ["2", "", "", ""]
    df["AwayScore"] = ["1", "", "", ""]

    fixtures = {f.fixture_id: f for f in load_fixtures_frame(df, fixtures_per_gameweek=2)}

    assert fixtures["fixture-0"].completed
    assert (fixtures["fixture-0"].home_score, fixtures["fixture-0"].away_score) == (2, 1)
    assert fixtures["fixture-1"].home_score is None


def test_fixtures_require_home_and_away() -> None:
    with pytest.raises(ValueError, match="missing required columns"):
        load_fixtures_frame(pd.DataFrame({"League": ["X"], "Home": ["A"]}))


def test_fixtures_reject_non_positive_bucket_size() -> None:
    with pytest.raises(ValueError):
        load_fixtures_frame(_fixtures_df(), fixtures_per_gameweek=0)


def test_standings_frame_coerces_numbers_and_ranks_by_row() -> None:
    df = pd.DataFrame(
        {
            "Team ": ["Alpha", "Bravo"],
            "Won": ["3", "1"],
            "Goals For": ["9", ""],
            "Goals Against": ["2", "4"],
            "Points": ["10", "n/a"],
            "Form": ["WWD", ""],
        }
    )

    alpha, bravo = load_standings_frame(df)

    assert (alpha.team, alpha.rank, alpha.win, alpha.points, alpha.goal_difference, alpha.form) == (
        "Alpha",
        1,
        3,
        10,
        7,
        "WWD",
    )
    assert (bravo.rank, bravo.points, bravo.goals_for, bravo.played) == (2, 0, 0, 0)


def test_standings_frame_requires_team_column() -> None:
    with pytest.raises(ValueError):
        load_standings_frame(pd.DataFrame({"Points": ["1"]}))


def test_standings_goal_difference_mismatch_is_logged(caplog) -> None:
    df = pd.DataFrame(
        {"Team": ["Alpha"], "Goals For": ["5"], "Goals Against": ["1"], "Goal Difference": ["10"]}
    )

    with caplog.at_level("WARNING"):
        (alpha,) = load_standings_frame(df)

    assert alpha.goal_difference == 4
    assert "Goal difference for Alpha" in caplog.text


def test_is_fixtures_frame() -> None:
    assert is_fixtures_frame(pd.DataFrame(columns=["league", "date", "home", "away"]))
    assert not is_fixtures_frame(pd.DataFrame(columns=["team", "points"]))


def test_read_csv_table_normalises_headers(tmp_path: Path) -> None:
    path = tmp_path / "table.csv"
    path.write_text("\ufeff Team ,POINTS\n Alpha ,3\n", encoding="utf-8")

    df = read_csv_table(path)

    assert list(df.columns) == ["team", "points"]
    assert df.loc[0, "team"] == "Alpha"


def test_read_csv_table_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_csv_table(tmp_path / "nope.csv")


def test_load_league_detects_file_roles(league_settings, league_files) -> None:
    standings_path, fixtures_path = league_files

    standings, fixtures = load_league(fixtures_path, standings_path)

    assert [s.team for s in standings] == ["Alpha", "Bravo", "Charlie", "Delta"]
    assert [s.rank for s in standings] == [1, 2, 3, 4]
    assert len(fixtures) == 12
    assert fixtures[0].fixture_id == "fixture-0"
    assert (fixtures[0].home, fixtures[0].away, fixtures[0].gameweek) == ("Alpha", "Bravo", 1)
    assert fixtures[-1].gameweek == 6


def test_load_league_warns_on_unexpected_team_count(league_files, caplog) -> None:
    standings_path, fixtures_path = league_files

    with caplog.at_level("WARNING"):
        load_league(standings_path, fixtures_path)

    assert "Expected 20 teams, got 4" in caplog.text


@pytest.mark.parametrize(
    "raw,expected",
    [(3, 3), (20, 15), (-2, 0), ("7", 7), ("abc", 0), (None, 0), (3.9, 3)],
)
def test_clamp_score(raw, expected) -> None:
    assert clamp_score(raw) == expected


def test_clamp_score_custom_maximum() -> None:
    assert clamp_score(12, maximum=9) == 9


def test_parse_predictions_validates() -> None:
    parsed = parse_predictions({"fixture-1": {"home": 2, "away": 1}, "fixture-2": [0, 0]})
    assert parsed == {"fixture-1": Prediction(2, 1), "fixture-2": Prediction(0, 0)}

    with pytest.raises(InvalidPrediction):
        parse_predictions({"fixture-1": {"home": -1, "away": 1}})
    with pytest.raises(InvalidPrediction):
        parse_predictions([["fixture-1", 1, 0]])


def test_parse_predictions_can_clamp() -> None:
    parsed = parse_predictions({"fixture-1": {"home": 20, "away": -1}}, clamp=True)
    assert parsed["fixture-1"] == Prediction(15, 0)


def test_load_predictions(tmp_path: Path) -> None:
    path = tmp_path / "predictions.json"
    path.write_text(json.dumps({"fixture-4": {"home": 0, "away": 3}}))

    assert load_predictions(path) == {"fixture-4": Prediction(0, 3)}


def test_load_predictions_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_predictions(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_predictions(broken)
