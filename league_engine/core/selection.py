"""Team selection validator for league participants.

Participants pick pilots from the draft pool.  Each enabled value group has
a pick requirement and the picks must add up to the required total.  All
functions here work on the state they are given; loading and saving
selections is the caller's business.
"""

from __future__ import annotations

import datetime as dt
from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Mapping, Sequence

from league_engine.core.errors import (
    ErrorCode,
    LeagueRuleError,
    locked,
    not_found,
    violation,
)
from league_engine.core.season import DraftConfig, Season


class SelectionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PoolPilot:
    """A pilot available for picking."""

    slot_id: str
    pilot_name: str
    team_name: str
    value_group: str


@dataclass(frozen=True)
class TeamSelection:
    """A participant's picks for one season.

    Attributes:
        slot_ids: Picked slots in the order they were picked.
        locked: Set once the participant confirms; no edits afterwards.
        updated_at: ISO-8601 timestamp of the last change.
    """

    slot_ids: tuple[str, ...] = ()
    locked: bool = False
    updated_at: str = ""


def _timestamp(now: dt.datetime | None) -> str:
    return (now or dt.datetime.now(dt.timezone.utc)).isoformat()


def build_draft_pool(season: Season) -> list[PoolPilot]:
    """Pilots selected for the draft whose value group is enabled."""
    enabled = set(season.draft_config.active_groups)
    return [
        PoolPilot(
            slot_id=pilot.slot_id,
            pilot_name=pilot.name,
            team_name=team.name,
            value_group=pilot.value_group,
        )
        for team, pilot in season.iter_pilots()
        if pilot.selected_for_draft and pilot.value_group in enabled
    ]


def group_requirements(config: DraftConfig) -> dict[str, int]:
    """Pick requirement for every enabled group."""
    return {group: config.limit_for(group) for group in config.active_groups}


def required_total(requirements: Mapping[str, int]) -> int:
    return sum(requirements.values())


def _pool_index(pool: Iterable[PoolPilot]) -> dict[str, PoolPilot]:
    return {p.slot_id: p for p in pool}


def selected_by_group(pool: Sequence[PoolPilot], slot_ids: Iterable[str]) -> Counter[str]:
    index = _pool_index(pool)
    counts: Counter[str] = Counter()
    for slot_id in slot_ids:
        pilot = index.get(slot_id)
        if pilot is not None:
            counts[pilot.value_group] += 1
    return counts


def normalize_selection(selection: TeamSelection, pool: Sequence[PoolPilot]) -> TeamSelection:
    """Drop picks that are no longer in the draft pool, and duplicates."""
    index = _pool_index(pool)
    seen: set[str] = set()
    kept: list[str] = []
    for slot_id in selection.slot_ids:
        if slot_id in index and slot_id not in seen:
            kept.append(slot_id)
            seen.add(slot_id)
    if len(kept) == len(selection.slot_ids):
        return selection
    return replace(selection, slot_ids=tuple(kept))


def toggle_selection(
    pool: Sequence[PoolPilot],
    current: TeamSelection,
    slot_id: str,
    requirements: Mapping[str, int],
    total_required: int,
    now: dt.datetime | None = None,
) -> TeamSelection:
    """Pick or un-pick one pilot.

    Un-picking is always allowed while the selection is unlocked.  Picking
    is rejected when the pilot's group already meets its requirement or
    the selection already holds *total_required* picks.
    """
    if current.locked:
        raise locked("Team selection is locked.")
    pilot = _pool_index(pool).get(slot_id)
    if pilot is None:
        raise not_found("Pilot is not in the draft pool.")

    if slot_id in current.slot_ids:
        remaining = tuple(s for s in current.slot_ids if s != slot_id)
        return replace(current, slot_ids=remaining, updated_at=_timestamp(now))

    group = pilot.value_group
    required = requirements.get(group, 0)
    if selected_by_group(pool, current.slot_ids)[group] >= required:
        raise violation(f"Group {group} already has {required} selected pilots.")
    if len(current.slot_ids) >= total_required:
        raise violation(f"You can select maximum {total_required} pilots.")
    return replace(
        current, slot_ids=current.slot_ids + (slot_id,), updated_at=_timestamp(now)
    )


def can_confirm(
    pool: Sequence[PoolPilot],
    selection: TeamSelection,
    requirements: Mapping[str, int],
    total_required: int,
) -> bool:
    """True when the picks meet every group requirement exactly."""
    if selection.locked:
        return False
    if len(selection.slot_ids) != total_required:
        return False
    counts = selected_by_group(pool, selection.slot_ids)
    return all(counts[group] == required for group, required in requirements.items())


def confirm_selection(
    pool: Sequence[PoolPilot],
    selection: TeamSelection,
    requirements: Mapping[str, int],
    total_required: int,
    confirmed: bool,
    now: dt.datetime | None = None,
) -> TeamSelection:
    """Lock a complete selection.  This cannot be undone by the participant."""
    if selection.locked:
        raise locked("Team selection is already locked.")
    if not can_confirm(pool, selection, requirements, total_required):
        raise violation("Complete all group requirements before confirming.")
    if not confirmed:
        raise LeagueRuleError(
            ErrorCode.CONFIRMATION_REQUIRED,
            "Confirm to lock your team selection; it cannot be edited afterwards.",
        )
    return replace(selection, locked=True, updated_at=_timestamp(now))


def admin_save_selection(
    pool: Sequence[PoolPilot],
    slot_ids: Sequence[str],
    requirements: Mapping[str, int],
    total_required: int,
    now: dt.datetime | None = None,
) -> TeamSelection:
    """Overwrite a participant's picks on their behalf.

    Picks outside the draft pool are dropped.  The saved selection is
    locked exactly when it is complete.
    """
    cleaned = normalize_selection(TeamSelection(slot_ids=tuple(slot_ids)), pool)
    counts = selected_by_group(pool, cleaned.slot_ids)
    for group, count in counts.items():
        required = requirements.get(group, 0)
        if count > required:
            raise violation(f"Group {group} already has {required} selected pilots.")
    if len(cleaned.slot_ids) > total_required:
        raise violation(f"You can select maximum {total_required} pilots.")

    return TeamSelection(
        slot_ids=cleaned.slot_ids,
        locked=len(cleaned.slot_ids) == total_required,
        updated_at=_timestamp(now),
    )


def selection_status(selection: TeamSelection | None, total_required: int) -> SelectionStatus:
    if selection is None or not selection.slot_ids:
        return SelectionStatus.NOT_STARTED
    if len(selection.slot_ids) >= total_required:
        return SelectionStatus.COMPLETE
    return SelectionStatus.IN_PROGRESS
