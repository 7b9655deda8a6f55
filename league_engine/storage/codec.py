"""Conversion between season snapshots and plain JSON-compatible records.

Records read back from storage are never trusted as-is.
:func:`normalize_season` checks the shape of each record and either
returns a valid :class:`Season` or says why the record was discarded.
Recoverable defects (a bad value group, an out-of-range limit, a missing
flag, a pilot outside the enabled groups) are repaired with defaults; a
record without its identifying fields is discarded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Optional

from league_engine.core.draft_config import plan_draft_adjustments
from league_engine.core.pilot import UNASSIGNED, VALUE_GROUPS, Pilot
from league_engine.core.race import Race, RaceScore, RaceScoreEntry
from league_engine.core.season import DraftConfig, Season, SeasonStatus
from league_engine.core.selection import TeamSelection
from league_engine.core.slots import allocate_slot_id
from league_engine.core.team import Team

DEFAULT_VALUE_GROUP_COUNT: int = 5
DEFAULT_DRAFT_PILOT_COUNT: int = 9

_STATUSES = {s.value: s for s in SeasonStatus}


@dataclass(frozen=True)
class NormalizedSeason:
    """Tagged result of normalising one stored record."""

    season: Optional[Season] = None
    discarded_reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.season is not None


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def pilot_to_dict(pilot: Pilot) -> dict[str, Any]:
    return {
        "id": pilot.id,
        "slotId": pilot.slot_id,
        "name": pilot.name,
        "valueGroup": pilot.value_group,
        "selectedForDraft": pilot.selected_for_draft,
    }


def season_to_dict(season: Season) -> dict[str, Any]:
    """Encode a season as a JSON-compatible dict."""
    config = season.draft_config
    return {
        "id": season.id,
        "name": season.name,
        "year": season.year,
        "entryFee": season.entry_fee,
        "status": season.status.value,
        "draftConfig": {
            "valueGroupCount": config.value_group_count,
            "draftPilotCount": config.draft_pilot_count,
            "groupLimits": {g: config.group_limits.get(g, 0) for g in VALUE_GROUPS},
        },
        "races": [
            {"id": r.id, "name": r.name, "date": r.date, "locked": r.locked}
            for r in season.races
        ],
        "raceScores": [
            {
                "raceId": score.race_id,
                "entries": [
                    {
                        "slotId": e.slot_id,
                        "pilotId": e.pilot_id,
                        "pilotName": e.pilot_name,
                        "teamId": e.team_id,
                        "teamName": e.team_name,
                        "points": e.points,
                    }
                    for e in score.entries
                ],
            }
            for score in season.race_scores
        ],
        "teams": [
            {
                "id": t.id,
                "name": t.name,
                "pilots": [pilot_to_dict(p) for p in t.pilots],
            }
            for t in season.teams
        ],
        "adminOverrides": {"editingEnabled": season.editing_enabled},
    }


def selection_to_dict(selection: TeamSelection) -> dict[str, Any]:
    return {
        "selectedSlotIds": list(selection.slot_ids),
        "locked": selection.locked,
        "updatedAt": selection.updated_at,
    }


# ---------------------------------------------------------------------------
# Decoding with normalisation
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _clamped_int(value: Any, lo: int, hi: int, default: int) -> int:
    if not _is_number(value):
        return default
    return max(lo, min(hi, math.floor(value)))


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _normalize_config(raw: Any) -> DraftConfig:
    data = raw if isinstance(raw, dict) else {}
    groups = _clamped_int(data.get("valueGroupCount"), 1, 5, DEFAULT_VALUE_GROUP_COUNT)
    picks = _clamped_int(data.get("draftPilotCount"), 1, 20, DEFAULT_DRAFT_PILOT_COUNT)
    raw_limits = data.get("groupLimits")
    raw_limits = raw_limits if isinstance(raw_limits, dict) else {}
    limits = {g: _clamped_int(raw_limits.get(g), 0, picks, picks) for g in VALUE_GROUPS}
    return DraftConfig(value_group_count=groups, draft_pilot_count=picks, group_limits=limits)


def _normalize_pilot(raw: Any, taken_slots: set[str]) -> Optional[Pilot]:
    if not isinstance(raw, dict):
        return None
    pilot_id, name = raw.get("id"), raw.get("name")
    if not _non_empty_str(pilot_id) or not isinstance(name, str):
        return None

    slot_id = raw.get("slotId")
    if not _non_empty_str(slot_id) or slot_id in taken_slots:
        # records written before slots existed get one derived from the name
        slot_id = allocate_slot_id(name, taken_slots)
    taken_slots.add(slot_id)

    group = raw.get("valueGroup")
    if group not in VALUE_GROUPS:
        group = UNASSIGNED
    selected = raw.get("selectedForDraft") is True and group != UNASSIGNED
    return Pilot(
        id=pilot_id, slot_id=slot_id, name=name, value_group=group, selected_for_draft=selected
    )


def _normalize_team(raw: Any, taken_slots: set[str]) -> Optional[Team]:
    if not isinstance(raw, dict):
        return None
    team_id, name = raw.get("id"), raw.get("name")
    if not _non_empty_str(team_id) or not _non_empty_str(name):
        return None
    raw_pilots = raw.get("pilots")
    pilots = []
    for item in raw_pilots if isinstance(raw_pilots, list) else []:
        pilot = _normalize_pilot(item, taken_slots)
        if pilot is not None:
            pilots.append(pilot)
    return Team(id=team_id, name=name, pilots=tuple(pilots))


def _normalize_race(raw: Any) -> Optional[Race]:
    if not isinstance(raw, dict):
        return None
    race_id, name = raw.get("id"), raw.get("name")
    if not _non_empty_str(race_id) or not _non_empty_str(name):
        return None
    date = raw.get("date")
    return Race(
        id=race_id,
        name=name,
        date=date if isinstance(date, str) else "",
        locked=raw.get("locked") is True,
    )


def _normalize_entry(raw: Any) -> Optional[RaceScoreEntry]:
    if not isinstance(raw, dict):
        return None
    slot_id, points = raw.get("slotId"), raw.get("points")
    if not _non_empty_str(slot_id) or not _is_number(points):
        return None

    def text(key: str) -> str:
        value = raw.get(key)
        return value if isinstance(value, str) else ""

    return RaceScoreEntry(
        slot_id=slot_id,
        pilot_id=text("pilotId"),
        pilot_name=text("pilotName"),
        team_id=text("teamId"),
        team_name=text("teamName"),
        points=points,
    )


def _normalize_score(raw: Any, race_ids: set[str]) -> Optional[RaceScore]:
    if not isinstance(raw, dict) or raw.get("raceId") not in race_ids:
        return None
    raw_entries = raw.get("entries")
    entries = []
    seen: set[str] = set()
    for item in raw_entries if isinstance(raw_entries, list) else []:
        entry = _normalize_entry(item)
        if entry is not None and entry.slot_id not in seen:
            entries.append(entry)
            seen.add(entry.slot_id)
    entries.sort(key=lambda e: e.points, reverse=True)
    return RaceScore(race_id=raw["raceId"], entries=tuple(entries))


def normalize_season(raw: Any) -> NormalizedSeason:
    """Check one stored record and rebuild it as a :class:`Season`."""
    if not isinstance(raw, dict):
        return NormalizedSeason(discarded_reason="record is not an object")
    season_id, name = raw.get("id"), raw.get("name")
    if not _non_empty_str(season_id):
        return NormalizedSeason(discarded_reason="missing id")
    if not isinstance(name, str):
        return NormalizedSeason(discarded_reason=f"season {season_id}: missing name")
    year, fee = raw.get("year"), raw.get("entryFee")
    if not _is_number(year) or not _is_number(fee):
        return NormalizedSeason(
            discarded_reason=f"season {season_id}: year and entryFee must be numbers"
        )
    status = _STATUSES.get(raw.get("status"))
    if status is None:
        return NormalizedSeason(
            discarded_reason=f"season {season_id}: unknown status {raw.get('status')!r}"
        )

    raw_races = raw.get("races")
    races = [r for r in map(_normalize_race, raw_races if isinstance(raw_races, list) else []) if r]

    taken_slots: set[str] = set()
    raw_teams = raw.get("teams")
    teams = []
    for item in raw_teams if isinstance(raw_teams, list) else []:
        team = _normalize_team(item, taken_slots)
        if team is not None:
            teams.append(team)

    race_ids = {r.id for r in races}
    raw_scores = raw.get("raceScores")
    scores = []
    seen_races: set[str] = set()
    for item in raw_scores if isinstance(raw_scores, list) else []:
        score = _normalize_score(item, race_ids)
        if score is not None and score.race_id not in seen_races:
            scores.append(score)
            seen_races.add(score.race_id)

    overrides = raw.get("adminOverrides")
    editing = isinstance(overrides, dict) and overrides.get("editingEnabled") is True

    config = _normalize_config(raw.get("draftConfig"))
    season = Season(
        id=season_id,
        name=name,
        year=int(year),
        entry_fee=fee,
        status=status,
        draft_config=config,
        races=tuple(races),
        race_scores=tuple(scores),
        teams=tuple(teams),
        editing_enabled=editing and status is SeasonStatus.ACTIVE,
    )
    # pilots outside the enabled groups or over the limits leave the pool
    adjustments = plan_draft_adjustments(season, config)
    if adjustments.pilots:
        season = season.with_pilots(adjustments.pilots)
    return NormalizedSeason(season=season)


def enforce_single_active(seasons: list[Season]) -> tuple[list[Season], list[str]]:
    """Keep the first active season and complete any later ones.

    Returns:
        The repaired list and the ids of the seasons that were completed.
    """
    repaired: list[Season] = []
    completed: list[str] = []
    seen_active = False
    for season in seasons:
        if season.status is SeasonStatus.ACTIVE:
            if seen_active:
                season = replace(
                    season, status=SeasonStatus.COMPLETED, editing_enabled=False
                )
                completed.append(season.id)
            seen_active = True
        repaired.append(season)
    return repaired, completed


def selection_from_dict(raw: Any) -> Optional[TeamSelection]:
    """Rebuild a stored team selection; ``None`` for a malformed record."""
    if not isinstance(raw, dict):
        return None
    raw_ids = raw.get("selectedSlotIds")
    slot_ids = tuple(s for s in raw_ids if isinstance(s, str)) if isinstance(raw_ids, list) else ()
    updated_at = raw.get("updatedAt")
    return TeamSelection(
        slot_ids=slot_ids,
        locked=bool(raw.get("locked")),
        updated_at=updated_at if isinstance(updated_at, str) else "",
    )
