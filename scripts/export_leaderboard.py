#!/usr/bin/env python
"""Export a season's standings from JSON stores to CSV files.

Writes three files into the output directory: participant, pilot and
constructor standings, season-to-date unless ``--race`` names a race id.

Usage
-----
::

    python scripts/export_leaderboard.py seasons.json selections.json SEASON_ID \\
        --out results/ [--race RACE_ID]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

# Ensure the project root is on the import path.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from league_engine.config import load_league_rules  # noqa: E402
from league_engine.core.errors import LeagueRuleError  # noqa: E402
from league_engine.core.leaderboard import Scope, standings_frame  # noqa: E402
from league_engine.service import LeagueService  # noqa: E402
from league_engine.storage.season_store import JsonFileSeasonStore  # noqa: E402
from league_engine.storage.selection_store import JsonFileTeamSelectionStore  # noqa: E402

logger = logging.getLogger("export_leaderboard")


def export_leaderboard(
    service: LeagueService, season_id: str, out_dir: Path, race_id: str | None = None
) -> list[Path]:
    """Write the standings CSVs and return their paths."""
    scope = Scope.for_race(race_id) if race_id else Scope.season_to_date()
    board = service.leaderboard(season_id, scope)
    suffix = race_id or "season"

    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for label, rows in (
        ("participants", board.participants),
        ("pilots", board.pilots),
        ("teams", board.teams),
    ):
        path = out_dir / f"{season_id}_{suffix}_{label}.csv"
        standings_frame(rows).to_csv(path)
        written.append(path)
        logger.info("Wrote %d %s rows to %s", len(rows), label, path)
    return written


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("seasons", type=Path, help="JSON file of season records")
    parser.add_argument("selections", type=Path, help="JSON file of team selections")
    parser.add_argument("season_id", help="Season to export")
    parser.add_argument("--out", type=Path, default=Path("results"), help="Output directory")
    parser.add_argument("--race", default=None, help="Export a single race instead")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    service = LeagueService(
        JsonFileSeasonStore(args.seasons),
        JsonFileTeamSelectionStore(args.selections),
        rules=load_league_rules(),
    )
    try:
        export_leaderboard(service, args.season_id, args.out, args.race)
    except LeagueRuleError as exc:
        raise SystemExit(exc.message) from exc


if __name__ == "__main__":
    main()
