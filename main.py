# main.py  (print-only version)

from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from config import settings
from data import load_league, load_predictions
from reports import (
    default_chart_teams,
    format_standings_table,
    position_history_frame,
    standings_dataframe,
    summarize_positions,
)
from standings import (
    project_standings_with_summary,
    replay_positions_with_summary,
    resolve_gameweek_range,
)

logger = logging.getLogger("league")


def hr(char="─", n=80):  # horizontal rule
    print(char * n)


def print_section(title, body):
    print(title); hr()
    print(body)
    print()


def _parse_teams(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    teams = [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
    return teams or None


def main(
    standings_path: str,
    fixtures_path: str,
    predictions_path: Optional[str] = None,
    *,
    show_history: bool = False,
    start: Optional[int] = None,
    end: Optional[int] = None,
    chart_start: Optional[int] = None,
    teams: Optional[List[str]] = None,
    clamp: bool = False,
) -> None:
    base, fixtures = load_league(standings_path, fixtures_path)
    predictions = load_predictions(predictions_path, clamp=clamp) if predictions_path else {}
    logger.info("Loaded %d predictions", len(predictions))

    projected, summary = project_standings_with_summary(base, fixtures, predictions)
    table = standings_dataframe(projected, base)
    print_section(
        f"Projected table ({summary.applied} predicted fixtures applied, {summary.skipped} skipped)",
        format_standings_table(table),
    )

    if not show_history:
        return
    if not predictions:
        print("No predictions supplied; positions stay at their base rank.")
        return

    history, _ = replay_positions_with_summary(base, fixtures, predictions, start, end)
    first, last, _ = resolve_gameweek_range(start, end)

    window_start = chart_start if chart_start is not None else settings.get("remaining_start_gameweek")
    window_start = min(max(window_start, first), last)
    visible = teams if teams is not None else default_chart_teams(projected)
    chart = position_history_frame(history, window_start, last, visible)
    print_section(f"Positions by gameweek (GW{window_start}-GW{last})", chart.to_string(index=False))
    print_section("Position summary", summarize_positions(history, window_start, last).to_string(index=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Project a league table from predicted fixture scores.")
    parser.add_argument("--standings", required=True, help="Base league table CSV.")
    parser.add_argument("--fixtures", required=True, help="Season fixture list CSV.")
    parser.add_argument("--predictions", help="JSON object mapping fixture ids to {\"home\": h, \"away\": a}.")
    parser.add_argument("--history", action="store_true", help="Also replay the season and print each team's rank per gameweek.")
    parser.add_argument("--start", type=int, help="First gameweek to replay.")
    parser.add_argument("--end", type=int, help="Last gameweek to replay.")
    parser.add_argument("--chart-start", type=int, help="First gameweek shown in the positions table.")
    parser.add_argument("--teams", help="Comma-separated teams to show in the positions table (defaults to the projected top teams).")
    parser.add_argument("--clamp-scores", action="store_true", help="Clamp predicted scores into 0..max_predicted_goals instead of rejecting them.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return parser


def run(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(levelname)s - %(message)s")
    try:
        main(
            args.standings,
            args.fixtures,
            args.predictions,
            show_history=args.history,
            start=args.start,
            end=args.end,
            chart_start=args.chart_start,
            teams=_parse_teams(args.teams),
            clamp=args.clamp_scores,
        )
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    run()
