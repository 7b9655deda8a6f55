"""Scoring ledger: per-race, per-slot points and their aggregates.

Points are recorded against slot ids.  Each entry also stores who held the
slot at the time, for display; aggregates only ever look at the slot id
and the points, so later roster changes never alter a total.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from league_engine.core.errors import invalid, locked, not_found
from league_engine.core.pilot import Pilot
from league_engine.core.race import RaceScore, RaceScoreEntry
from league_engine.core.season import Season, SeasonStatus
from league_engine.core.team import Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PilotPointsRow:
    """One row of the pilot points matrix."""

    rank: int
    slot_id: str
    pilot_name: str
    team_name: str
    selected_for_draft: bool
    total_points: float
    points_by_race: tuple[float, ...]


def _validate_points(points: object) -> float:
    if isinstance(points, bool) or not isinstance(points, (int, float)):
        raise invalid("Points must be a valid number.")
    if not math.isfinite(points):
        raise invalid("Points must be a valid number.")
    return points


def _scorable_slot(season: Season, slot_id: str) -> tuple[Team, Pilot]:
    found = season.find_slot(slot_id)
    if found is None or not found[1].selected_for_draft:
        raise not_found(f"Pilot slot '{slot_id}' is not in the draft pool.")
    return found


def _ensure_scoring_open(season: Season, race_id: str) -> None:
    if season.status is not SeasonStatus.ACTIVE:
        raise locked("Race scores can only be edited in the active season.")
    if season.find_race(race_id) is None:
        raise not_found("Race not found.")


def _entry(team: Team, pilot: Pilot, points: float) -> RaceScoreEntry:
    return RaceScoreEntry(
        slot_id=pilot.slot_id,
        pilot_id=pilot.id,
        pilot_name=pilot.name,
        team_id=team.id,
        team_name=team.name,
        points=points,
    )


def _sorted_entries(entries: Iterable[RaceScoreEntry]) -> tuple[RaceScoreEntry, ...]:
    # sorted() is stable, so equal points keep insertion order
    return tuple(sorted(entries, key=lambda e: e.points, reverse=True))


def _store_race_score(season: Season, score: RaceScore, lock: bool) -> Season:
    if season.race_score(score.race_id) is None:
        race_scores = season.race_scores + (score,)
    else:
        race_scores = tuple(
            score if s.race_id == score.race_id else s for s in season.race_scores
        )
    races = season.races
    if lock:
        races = tuple(
            replace(r, locked=True) if r.id == score.race_id else r for r in races
        )
    return replace(season, race_scores=race_scores, races=races)


def record_race_score(
    season: Season, race_id: str, slot_id: str, points: float
) -> Season:
    """Insert or overwrite the score of one slot in one race.

    Entries are re-sorted by points, highest first.  The race is locked
    when this is its first entry.  Points are stored as entered, including
    negative or fractional values.  Edits to an already locked race are
    accepted.
    """
    _ensure_scoring_open(season, race_id)
    value = _validate_points(points)
    team, pilot = _scorable_slot(season, slot_id)

    existing = season.race_score(race_id)
    entries = list(existing.entries) if existing else []
    first_entry = not entries
    new_entry = _entry(team, pilot, value)
    for idx, entry in enumerate(entries):
        if entry.slot_id == slot_id:
            entries[idx] = new_entry
            break
    else:
        entries.append(new_entry)

    score = RaceScore(race_id=race_id, entries=_sorted_entries(entries))
    logger.info(
        "Recorded %s pts for slot %s (%s) in race %s",
        value,
        slot_id,
        pilot.name,
        race_id,
    )
    return _store_race_score(season, score, lock=first_entry)


def record_race_scores(
    season: Season, race_id: str, points_by_slot: Mapping[str, float]
) -> Season:
    """Replace a race's whole score sheet.

    Every slot must be in the draft pool.  The race is locked when the
    sheet is non-empty.
    """
    _ensure_scoring_open(season, race_id)
    entries: list[RaceScoreEntry] = []
    for slot_id, points in points_by_slot.items():
        value = _validate_points(points)
        team, pilot = _scorable_slot(season, slot_id)
        entries.append(_entry(team, pilot, value))

    score = RaceScore(race_id=race_id, entries=_sorted_entries(entries))
    logger.info("Saved %d score entries for race %s", len(entries), race_id)
    return _store_race_score(season, score, lock=bool(entries))


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def race_points_by_slot(season: Season, race_id: str) -> dict[str, float]:
    """Points per slot for a single race."""
    score = season.race_score(race_id)
    if score is None:
        return {}
    return {entry.slot_id: entry.points for entry in score.entries}


def season_totals_by_slot(
    season: Season, race_ids: Iterable[str] | None = None
) -> dict[str, float]:
    """Sum each slot's points across the season's race scores.

    Args:
        season: Season snapshot.
        race_ids: Optional subset of races to include; all races otherwise.

    Returns:
        Mapping from slot id to total points.  The result does not depend
        on the order races were scored in.
    """
    wanted = set(race_ids) if race_ids is not None else None
    collected: dict[str, list[float]] = defaultdict(list)
    for score in season.race_scores:
        if wanted is not None and score.race_id not in wanted:
            continue
        for entry in score.entries:
            collected[entry.slot_id].append(entry.points)
    # fsum is correctly rounded, so the total is the same in any race order
    return {slot_id: math.fsum(values) for slot_id, values in collected.items()}


def scored_race_ids(season: Season) -> list[str]:
    """Ids of races with at least one score entry, in calendar order."""
    scored = {s.race_id for s in season.race_scores if s.entries}
    return [race.id for race in season.races if race.id in scored]


def pilot_points_matrix(
    season: Season, include_unselected: bool = False
) -> list[PilotPointsRow]:
    """Per-pilot totals and per-race points in calendar order.

    Rows are ranked by total points, then pilot name.  Only pilots in the
    draft pool are listed unless *include_unselected* is set.
    """
    by_race = {race.id: race_points_by_slot(season, race.id) for race in season.races}

    rows: list[tuple[str, str, str, bool, float, tuple[float, ...]]] = []
    for team, pilot in season.iter_pilots():
        if not include_unselected and not pilot.selected_for_draft:
            continue
        points = tuple(by_race[race.id].get(pilot.slot_id, 0) for race in season.races)
        rows.append(
            (
                pilot.slot_id,
                pilot.name,
                team.name,
                pilot.selected_for_draft,
                math.fsum(points),
                points,
            )
        )

    rows.sort(key=lambda r: (-r[4], r[1]))
    return [
        PilotPointsRow(
            rank=idx,
            slot_id=slot_id,
            pilot_name=name,
            team_name=team_name,
            selected_for_draft=selected,
            total_points=total,
            points_by_race=points,
        )
        for idx, (slot_id, name, team_name, selected, total, points) in enumerate(
            rows, start=1
        )
    ]
