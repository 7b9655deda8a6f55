"""Leaderboard ranker for participants, pilots and constructor teams.

Participants are ordered by a strict total order:

1. Higher total points over their picks.
2. Pick points compared position by position in pick order, over the
   first ``positions`` picks; a missing pick counts as ``-1``.
3. The pilot rank of the participant's first zero-point pick; lower wins,
   and a participant without one counts as ranked last.
4. Participant name, ascending and case-insensitive.

Names are unique, so no two participants ever compare equal and ranks are
never shared.
"""

from __future__ import annotations

import functools
import math
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

import pandas as pd

from league_engine.core.errors import not_found
from league_engine.core.scoring import scored_race_ids, season_totals_by_slot
from league_engine.core.season import Season
from league_engine.core.selection import TeamSelection

RANKED_PICK_POSITIONS: int = 8
_MISSING_PICK_POINTS: float = -1.0


class ScopeKind(str, Enum):
    RACE = "race"
    SEASON = "season"


@dataclass(frozen=True)
class Scope:
    """Reporting window: one race, or season-to-date over scored races."""

    kind: ScopeKind
    race_id: str | None = None

    @classmethod
    def for_race(cls, race_id: str) -> "Scope":
        return cls(kind=ScopeKind.RACE, race_id=race_id)

    @classmethod
    def season_to_date(cls) -> "Scope":
        return cls(kind=ScopeKind.SEASON)


@dataclass(frozen=True)
class PilotStanding:
    rank: int
    slot_id: str
    pilot_name: str
    team_id: str
    team_name: str
    points: float


@dataclass(frozen=True)
class TeamStanding:
    rank: int
    team_id: str
    team_name: str
    points: float


@dataclass(frozen=True)
class ParticipantPick:
    """One pick as seen in a scope.

    Attributes:
        slot_id: Picked slot.
        points: Points the slot earned in the scope.
        pilot_rank: The slot's position in the pilot standings for the
            scope; ``math.inf`` when the slot is not ranked.
    """

    slot_id: str
    points: float
    pilot_rank: float


@dataclass(frozen=True)
class ParticipantEntry:
    name: str
    picks: tuple[ParticipantPick, ...] = ()
    locked: bool = False

    @property
    def total_points(self) -> float:
        return math.fsum(pick.points for pick in self.picks)


@dataclass(frozen=True)
class ParticipantStanding:
    rank: int
    name: str
    total_points: float
    locked: bool
    picks: tuple[ParticipantPick, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class Leaderboard:
    scope: Scope
    race_ids: tuple[str, ...]
    participants: list[ParticipantStanding]
    pilots: list[PilotStanding]
    teams: list[TeamStanding]


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------


def scope_race_ids(season: Season, scope: Scope) -> list[str]:
    """Races counted by *scope*."""
    if scope.kind is ScopeKind.RACE:
        if scope.race_id is None or season.find_race(scope.race_id) is None:
            raise not_found("Race not found.")
        return [scope.race_id]
    return scored_race_ids(season)


def scope_points(season: Season, scope: Scope) -> dict[str, float]:
    """Points per slot within *scope*."""
    return season_totals_by_slot(season, scope_race_ids(season, scope))


# ---------------------------------------------------------------------------
# Pilot and team standings
# ---------------------------------------------------------------------------


def _name_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def pilot_standings(season: Season, points_by_slot: Mapping[str, float]) -> list[PilotStanding]:
    """Rank draft-pool pilots (and any other scored slot) by points, then name."""
    rows = [
        (pilot.slot_id, pilot.name, team.id, team.name, points_by_slot.get(pilot.slot_id, 0))
        for team, pilot in season.iter_pilots()
        if pilot.selected_for_draft or pilot.slot_id in points_by_slot
    ]
    rows.sort(key=lambda r: (-r[4], _name_key(r[1])))
    return [
        PilotStanding(
            rank=idx,
            slot_id=slot_id,
            pilot_name=name,
            team_id=team_id,
            team_name=team_name,
            points=points,
        )
        for idx, (slot_id, name, team_id, team_name, points) in enumerate(rows, start=1)
    ]


def team_standings(pilots: Sequence[PilotStanding]) -> list[TeamStanding]:
    """Sum pilot standings by constructor team."""
    collected: dict[str, list[float]] = defaultdict(list)
    names: dict[str, str] = {}
    for row in pilots:
        collected[row.team_id].append(row.points)
        names[row.team_id] = row.team_name
    totals = {tid: math.fsum(values) for tid, values in collected.items()}

    ordered = sorted(totals, key=lambda tid: (-totals[tid], _name_key(names[tid])))
    return [
        TeamStanding(rank=idx, team_id=tid, team_name=names[tid], points=totals[tid])
        for idx, tid in enumerate(ordered, start=1)
    ]


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------


def _first_zero_pick_rank(entry: ParticipantEntry) -> float:
    for pick in entry.picks:
        if pick.points == 0:
            return pick.pilot_rank
    return math.inf


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def compare_participants(
    a: ParticipantEntry,
    b: ParticipantEntry,
    positions: int = RANKED_PICK_POSITIONS,
) -> int:
    """Return a negative number when *a* ranks above *b*, positive otherwise.

    Only returns ``0`` when both entries have the same name.
    """
    diff = _sign(b.total_points - a.total_points)
    if diff:
        return diff

    for idx in range(positions):
        pa = a.picks[idx].points if idx < len(a.picks) else _MISSING_PICK_POINTS
        pb = b.picks[idx].points if idx < len(b.picks) else _MISSING_PICK_POINTS
        diff = _sign(pb - pa)
        if diff:
            return diff

    rank_a = _first_zero_pick_rank(a)
    rank_b = _first_zero_pick_rank(b)
    if rank_a != rank_b:
        return -1 if rank_a < rank_b else 1

    name_a, name_b = _name_key(a.name), _name_key(b.name)
    if name_a != name_b:
        return -1 if name_a < name_b else 1
    return 0


def rank_participants(
    entries: Sequence[ParticipantEntry],
    positions: int = RANKED_PICK_POSITIONS,
) -> list[ParticipantStanding]:
    """Order participants and number them 1..n without shared ranks."""
    ordered = sorted(
        entries,
        key=functools.cmp_to_key(lambda x, y: compare_participants(x, y, positions)),
    )
    return [
        ParticipantStanding(
            rank=idx,
            name=entry.name,
            total_points=entry.total_points,
            locked=entry.locked,
            picks=entry.picks,
        )
        for idx, entry in enumerate(ordered, start=1)
    ]


def participant_entry(
    name: str,
    selection: TeamSelection,
    points_by_slot: Mapping[str, float],
    pilot_ranks: Mapping[str, int],
) -> ParticipantEntry:
    picks = tuple(
        ParticipantPick(
            slot_id=slot_id,
            points=points_by_slot.get(slot_id, 0),
            pilot_rank=pilot_ranks.get(slot_id, math.inf),
        )
        for slot_id in selection.slot_ids
    )
    return ParticipantEntry(name=name, picks=picks, locked=selection.locked)


def build_leaderboard(
    season: Season,
    selections: Mapping[str, TeamSelection],
    scope: Scope,
    positions: int = RANKED_PICK_POSITIONS,
) -> Leaderboard:
    """Compute participant, pilot and team standings for a scope.

    Args:
        season: Season snapshot.
        selections: Team selections keyed by participant name (email).
        scope: Reporting window.
        positions: Picks compared position by position on a points tie.
    """
    race_ids = scope_race_ids(season, scope)
    points = season_totals_by_slot(season, race_ids)
    pilots = pilot_standings(season, points)
    ranks = {row.slot_id: row.rank for row in pilots}

    entries = [
        participant_entry(name, selection, points, ranks)
        for name, selection in selections.items()
    ]
    return Leaderboard(
        scope=scope,
        race_ids=tuple(race_ids),
        participants=rank_participants(entries, positions),
        pilots=pilots,
        teams=team_standings(pilots),
    )


def standings_frame(rows: Sequence[Any]) -> pd.DataFrame:
    """Tabulate a list of standings rows, one column per field.

    Nested pick details are left out.
    """
    records = [asdict(row) for row in rows]
    for record in records:
        record.pop("picks", None)
    frame = pd.DataFrame.from_records(records)
    if "rank" in frame.columns:
        frame = frame.set_index("rank")
    return frame
