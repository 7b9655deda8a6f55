"""CLI entrypoint for the fantasy F1 league rules engine."""

from __future__ import annotations

import logging
import sys

from league_engine import __version__
from league_engine.config import load_league_rules
from league_engine.core.errors import OperationResult
from league_engine.core.leaderboard import Scope, standings_frame
from league_engine.core.race import race_short_code
from league_engine.core.season import Season
from league_engine.service import LeagueService
from league_engine.storage.season_store import InMemorySeasonStore
from league_engine.storage.selection_store import InMemoryTeamSelectionStore

# team -> [(pilot, value group, in draft pool)]
ROSTER: dict[str, list[tuple[str, str, bool]]] = {
    "Red Bull Racing": [("Max Verstappen", "A", True), ("Yuki Tsunoda", "C", True)],
    "Ferrari": [("Charles Leclerc", "A", True), ("Lewis Hamilton", "B", True)],
    "McLaren": [("Lando Norris", "B", True), ("Oscar Piastri", "A", False)],
}

RACES: list[tuple[str, str]] = [
    ("Bahrain Grand Prix", "2026-03-01"),
    ("Saudi Arabian Grand Prix", "2026-03-08"),
]

RESULTS: dict[str, dict[str, float]] = {
    "Bahrain Grand Prix": {
        "Max Verstappen": 25,
        "Charles Leclerc": 18,
        "Lando Norris": 15,
        "Lewis Hamilton": 12,
        "Yuki Tsunoda": 0,
    },
    "Saudi Arabian Grand Prix": {
        "Charles Leclerc": 25,
        "Lando Norris": 18,
        "Max Verstappen": 15,
        "Yuki Tsunoda": 4,
        "Lewis Hamilton": 0,
    },
}

PICKS: dict[str, list[str]] = {
    "alice@example.com": [
        "Max Verstappen", "Charles Leclerc", "Lando Norris", "Lewis Hamilton", "Yuki Tsunoda",
    ],
    "bob@example.com": [
        "Charles Leclerc", "Max Verstappen", "Lewis Hamilton", "Lando Norris", "Yuki Tsunoda",
    ],
}


def _check(result: OperationResult) -> Season:
    if not result.success:
        raise SystemExit(f"[{result.code.value}] {result.message}")
    if result.message:
        print(f"  - {result.message}")
    return result.season


def _slot_of(season: Season, name: str) -> str:
    return next(p.slot_id for p in season.pilots if p.name == name)


def main() -> None:
    """Run a demonstration of one league season from draft to standings."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"Fantasy F1 League Rules Engine v{__version__}")
    print("=" * 56)

    service = LeagueService(
        InMemorySeasonStore(), InMemoryTeamSelectionStore(), rules=load_league_rules()
    )

    # -- Draft setup ----------------------------------------------------------
    print("\nSetting up the draft season:")
    season = _check(service.create_draft_season("Demo League", 2026, 20.0))
    season = _check(
        service.save_draft_config(season.id, 3, 5, {"A": 2, "B": 2, "C": 1})
    )
    for name, date in RACES:
        season = _check(service.add_race(season.id, name, date))
    for team_name, pilots in ROSTER.items():
        season = _check(service.add_team(season.id, team_name))
        team_id = next(t.id for t in season.teams if t.name == team_name)
        for pilot_name, group, _ in pilots:
            season = _check(service.add_pilot(season.id, team_id, pilot_name, group))
    for pilots in ROSTER.values():
        for pilot_name, _, in_pool in pilots:
            if in_pool:
                pilot_id = next(p.id for p in season.pilots if p.name == pilot_name)
                season = _check(service.toggle_pilot_draft_selection(season.id, pilot_id))

    issues = service.activation_issues(season.id)
    print(f"\nActivation issues: {issues or 'none'}")
    season = _check(service.activate_season(season.id, confirmed=True))

    # -- Picks and scores -----------------------------------------------------
    print("\nParticipant picks:")
    for email, names in PICKS.items():
        _check(
            service.admin_save_team_selection(
                season.id, email, [_slot_of(season, n) for n in names]
            )
        )

    print("\nRace results:")
    for race in season.races:
        for pilot_name, points in RESULTS[race.name].items():
            season = _check(
                service.record_race_score(
                    season.id, race.id, _slot_of(season, pilot_name), points
                )
            )

    # -- Standings ------------------------------------------------------------
    for race in season.races:
        board = service.leaderboard(season.id, Scope.for_race(race.id))
        print(f"\n[{race_short_code(race.name)}] {race.name}")
        print(standings_frame(board.participants).to_string())

    board = service.leaderboard(season.id)
    print("\nSeason to date - participants")
    print(standings_frame(board.participants).to_string())
    print("\nSeason to date - pilots")
    print(standings_frame(board.pilots).to_string())
    print("\nSeason to date - teams")
    print(standings_frame(board.teams).to_string())


if __name__ == "__main__":
    sys.exit(main() or 0)
