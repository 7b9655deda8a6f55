"""Slot registry: stable roster positions and the pilots occupying them.

Every race score is keyed by a slot id.  A slot id is allocated once, when
a pilot is first added to a roster, and is never regenerated.  Handing a
seat to a different pilot, or swapping two pilots between seats, changes
who occupies a slot but never the slot itself, so points already scored
stay where they were earned.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import replace

from league_engine.core.errors import invalid, not_found
from league_engine.core.pilot import UNASSIGNED, Pilot
from league_engine.core.season import (
    Season,
    ensure_override_enabled,
    ensure_roster_editable,
    new_id,
)

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name.lower())
    ascii_only = decomposed.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only).strip("-")
    return slug or "pilot"


def known_slot_ids(season: Season) -> set[str]:
    """Every slot id the season has ever used, on rosters or in scores."""
    ids = {pilot.slot_id for pilot in season.pilots}
    for score in season.race_scores:
        ids.update(entry.slot_id for entry in score.entries)
    return ids


def allocate_slot_id(name: str, taken: set[str]) -> str:
    """Derive a slot id from *name* that does not collide with *taken*.

    ``"Max Verstappen"`` becomes ``"slot-max-verstappen"``; a collision
    appends ``-2``, ``-3`` and so on.
    """
    base = f"slot-{_slugify(name)}"
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def _ensure_unique_name(season: Season, name: str, ignore_slot: str | None = None) -> None:
    for pilot in season.pilots:
        if pilot.slot_id == ignore_slot:
            continue
        if pilot.name.lower() == name.lower():
            raise invalid(f"Pilot '{name}' already exists in this season.")


def add_pilot(
    season: Season,
    team_id: str,
    name: str,
    value_group: str = UNASSIGNED,
) -> Season:
    """Add a pilot to a team roster in a freshly allocated slot.

    New pilots start outside the draft pool.
    """
    ensure_roster_editable(season)
    stripped = (name or "").strip()
    if not stripped:
        raise invalid("Pilot name is required.")
    team = season.find_team(team_id)
    if team is None:
        raise not_found("Team not found.")
    if value_group != UNASSIGNED and value_group not in season.draft_config.active_groups:
        raise invalid(f"Value group '{value_group}' is not active for this season.")
    _ensure_unique_name(season, stripped)

    pilot = Pilot(
        id=new_id("pilot"),
        slot_id=allocate_slot_id(stripped, known_slot_ids(season)),
        name=stripped,
        value_group=value_group,
        selected_for_draft=False,
    )
    teams = tuple(
        replace(t, pilots=t.pilots + (pilot,)) if t.id == team_id else t
        for t in season.teams
    )
    logger.debug("Allocated slot %s for pilot %s", pilot.slot_id, pilot.name)
    return replace(season, teams=teams)


def replace_in_slot(season: Season, slot_id: str, new_name: str) -> Season:
    """Hand the seat at *slot_id* to a new pilot identity.

    The new pilot keeps the slot id, value group and draft selection of
    the seat.  Race scores are untouched.
    """
    ensure_override_enabled(season)
    found = season.find_slot(slot_id)
    if found is None:
        raise not_found("Pilot slot not found.")
    _, current = found

    stripped = (new_name or "").strip()
    if not stripped:
        raise invalid("Replacement pilot name is required.")
    if stripped.lower() == current.name.lower():
        raise invalid(f"'{stripped}' already occupies this slot.")
    _ensure_unique_name(season, stripped, ignore_slot=slot_id)

    replacement = replace(current, id=new_id("pilot"), name=stripped)
    logger.info(
        "Slot %s: %s replaced by %s", slot_id, current.name, replacement.name
    )
    return season.with_pilots({slot_id: replacement})


def transfer_by_swap(season: Season, slot_id_a: str, slot_id_b: str) -> Season:
    """Swap the pilots occupying two slots.

    Afterwards the pilot who sat at A sits at B and vice versa.  Each slot
    keeps its id, team, value group and draft selection; only the
    occupant identity (id and name) moves.  Swapping the same two slots
    again restores the original assignment.
    """
    ensure_override_enabled(season)
    if slot_id_a == slot_id_b:
        raise invalid("Choose two different slots to swap.")
    found_a = season.find_slot(slot_id_a)
    found_b = season.find_slot(slot_id_b)
    if found_a is None or found_b is None:
        raise not_found("Pilot slot not found.")
    _, pilot_a = found_a
    _, pilot_b = found_b

    logger.info(
        "Swapped %s (%s) and %s (%s)",
        pilot_a.name,
        slot_id_a,
        pilot_b.name,
        slot_id_b,
    )
    return season.with_pilots(
        {
            slot_id_a: replace(pilot_a, id=pilot_b.id, name=pilot_b.name),
            slot_id_b: replace(pilot_b, id=pilot_a.id, name=pilot_a.name),
        }
    )
