"""Draft configuration validator and draft-pool edits.

Saving new draft rules runs in two phases:

1. :func:`plan_draft_adjustments` walks the roster against the new rules and
   returns the pilots that must change, counted by reason.
2. :func:`apply_draft_config` validates the rules, plans, and rebuilds the
   season with the planned pilots in place.

Cascade rules, applied in roster order:

- A pilot whose group is no longer enabled is moved to ``unassigned`` and
  leaves the draft pool.
- A pilot still in the pool stays only while its group has room under the
  new group limit and the pool has room under the new pick count.
  Unassigned pilots are never moved into a remaining group automatically.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Mapping

from league_engine.core.errors import invalid, not_found, violation
from league_engine.core.pilot import UNASSIGNED, VALUE_GROUPS, Pilot
from league_engine.core.season import DraftConfig, Season, ensure_draft

logger = logging.getLogger(__name__)

MIN_VALUE_GROUPS, MAX_VALUE_GROUPS = 1, 5
MIN_DRAFT_PILOTS, MAX_DRAFT_PILOTS = 1, 20
MIN_GROUP_LIMIT, MAX_GROUP_LIMIT = 0, 99


@dataclass(frozen=True)
class DraftAdjustments:
    """Side effects of saving draft rules.

    Attributes:
        moved_to_unassigned: Pilots whose group was disabled.
        unselected_by_group_limits: Pool pilots dropped because their group
            was over its new limit.
        unselected_by_draft_limit: Pool pilots dropped because the pool was
            over the new pick count.
        pilots: Rebuilt pilots keyed by slot id.
    """

    moved_to_unassigned: int = 0
    unselected_by_group_limits: int = 0
    unselected_by_draft_limit: int = 0
    pilots: dict[str, Pilot] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return (
            self.moved_to_unassigned
            + self.unselected_by_group_limits
            + self.unselected_by_draft_limit
        )

    def summary(self) -> list[str]:
        """Human-readable lines describing each non-zero adjustment."""
        lines: list[str] = []
        if self.moved_to_unassigned:
            lines.append(f"{self.moved_to_unassigned} pilot(s) moved to unassigned.")
        if self.unselected_by_group_limits:
            lines.append(
                f"{self.unselected_by_group_limits} pilot(s) unselected by group limits."
            )
        if self.unselected_by_draft_limit:
            lines.append(
                f"{self.unselected_by_draft_limit} pilot(s) unselected by draft limit."
            )
        return lines


def _as_int(value: object, label: str, lo: int, hi: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise invalid(f"{label} must be an integer between {lo} and {hi}.")
    if isinstance(value, float) and not value.is_integer():
        raise invalid(f"{label} must be an integer between {lo} and {hi}.")
    number = int(value)
    if not lo <= number <= hi:
        raise invalid(f"{label} must be an integer between {lo} and {hi}.")
    return number


def validate_draft_config(
    value_group_count: object,
    draft_pilot_count: object,
    group_limits: Mapping[str, object],
    fallback_limits: Mapping[str, int] | None = None,
) -> DraftConfig:
    """Validate raw draft rules and return the resulting :class:`DraftConfig`.

    Group letters absent from *group_limits* take their value from
    *fallback_limits* (the season's current limits), then ``0``.

    Raises:
        LeagueRuleError: VALIDATION_FAILED for malformed or out-of-range
            numbers, INVARIANT_VIOLATION when the pick count differs from
            the sum of the enabled group limits.
    """
    groups = _as_int(value_group_count, "Value groups", MIN_VALUE_GROUPS, MAX_VALUE_GROUPS)
    picks = _as_int(draft_pilot_count, "Draft pilots", MIN_DRAFT_PILOTS, MAX_DRAFT_PILOTS)

    unknown = set(group_limits) - set(VALUE_GROUPS)
    if unknown:
        raise invalid(f"Unknown value group(s): {', '.join(sorted(unknown))}.")

    fallback = fallback_limits or {}
    limits: dict[str, int] = {}
    for letter in VALUE_GROUPS:
        raw = group_limits.get(letter, fallback.get(letter, 0))
        limits[letter] = _as_int(
            raw, f"Group {letter} limit", MIN_GROUP_LIMIT, MAX_GROUP_LIMIT
        )

    config = DraftConfig(
        value_group_count=groups, draft_pilot_count=picks, group_limits=limits
    )
    total = config.active_limit_total
    if picks != total:
        raise violation(
            f"Draft pilots must equal total active group limits ({total})."
        )
    return config


def plan_draft_adjustments(season: Season, config: DraftConfig) -> DraftAdjustments:
    """Compute which pilots change when *config* replaces the season's rules."""
    enabled = set(config.active_groups)
    moved = by_group = by_draft = 0
    changed: dict[str, Pilot] = {}
    group_counts: Counter[str] = Counter()
    selected_total = 0

    for pilot in season.pilots:
        if pilot.value_group != UNASSIGNED and pilot.value_group not in enabled:
            changed[pilot.slot_id] = replace(
                pilot, value_group=UNASSIGNED, selected_for_draft=False
            )
            moved += 1
            continue

        if not pilot.selected_for_draft:
            continue

        group = pilot.value_group
        if group_counts[group] >= config.limit_for(group):
            changed[pilot.slot_id] = replace(pilot, selected_for_draft=False)
            by_group += 1
        elif selected_total >= config.draft_pilot_count:
            changed[pilot.slot_id] = replace(pilot, selected_for_draft=False)
            by_draft += 1
        else:
            group_counts[group] += 1
            selected_total += 1

    return DraftAdjustments(
        moved_to_unassigned=moved,
        unselected_by_group_limits=by_group,
        unselected_by_draft_limit=by_draft,
        pilots=changed,
    )


def apply_draft_config(
    season: Season,
    value_group_count: object,
    draft_pilot_count: object,
    group_limits: Mapping[str, object],
) -> tuple[Season, DraftAdjustments]:
    """Validate and apply new draft rules to a draft season.

    Returns:
        The updated season and the adjustments made to its pilots.
    """
    ensure_draft(season)
    config = validate_draft_config(
        value_group_count,
        draft_pilot_count,
        group_limits,
        fallback_limits=season.draft_config.group_limits,
    )
    adjustments = plan_draft_adjustments(season, config)
    updated = replace(season.with_pilots(adjustments.pilots), draft_config=config)
    logger.debug(
        "Draft config for %s: %d moved, %d over group limit, %d over draft limit",
        season.id,
        adjustments.moved_to_unassigned,
        adjustments.unselected_by_group_limits,
        adjustments.unselected_by_draft_limit,
    )
    return updated, adjustments


# ---------------------------------------------------------------------------
# Draft pool edits
# ---------------------------------------------------------------------------


def pool_counts(season: Season, exclude_slot: str | None = None) -> tuple[int, Counter[str]]:
    """Count selected pilots overall and per group."""
    by_group: Counter[str] = Counter()
    total = 0
    for pilot in season.pilots:
        if pilot.selected_for_draft and pilot.slot_id != exclude_slot:
            by_group[pilot.value_group] += 1
            total += 1
    return total, by_group


def _find_pilot(season: Season, pilot_id: str) -> Pilot:
    found = season.find_pilot(pilot_id)
    if found is None:
        raise not_found("Pilot not found.")
    return found[1]


def set_pilot_value_group(season: Season, pilot_id: str, value_group: str) -> Season:
    """Move a pilot to another value group, or to ``unassigned``.

    Unassigning also removes the pilot from the draft pool.
    """
    ensure_draft(season)
    pilot = _find_pilot(season, pilot_id)
    config = season.draft_config
    if value_group != UNASSIGNED and value_group not in config.active_groups:
        raise invalid(f"Value group '{value_group}' is not active for this season.")

    if value_group == UNASSIGNED:
        updated = replace(pilot, value_group=UNASSIGNED, selected_for_draft=False)
    else:
        if pilot.selected_for_draft and value_group != pilot.value_group:
            _, by_group = pool_counts(season, exclude_slot=pilot.slot_id)
            if by_group[value_group] >= config.limit_for(value_group):
                raise violation(
                    f"Group {value_group} already has "
                    f"{config.limit_for(value_group)} selected pilots."
                )
        updated = replace(pilot, value_group=value_group)
    return season.with_pilots({pilot.slot_id: updated})


def toggle_pilot_draft_selection(season: Season, pilot_id: str) -> Season:
    """Add a pilot to the draft pool, or remove it if already there."""
    ensure_draft(season)
    pilot = _find_pilot(season, pilot_id)
    if pilot.selected_for_draft:
        return season.with_pilots({pilot.slot_id: replace(pilot, selected_for_draft=False)})

    if pilot.value_group == UNASSIGNED:
        raise invalid("Assign a value group before selecting the pilot for the draft.")
    config = season.draft_config
    total, by_group = pool_counts(season)
    if total >= config.draft_pilot_count:
        raise violation(
            f"Draft pool already has {config.draft_pilot_count} selected pilots."
        )
    if by_group[pilot.value_group] >= config.limit_for(pilot.value_group):
        raise violation(
            f"Group {pilot.value_group} already has "
            f"{config.limit_for(pilot.value_group)} selected pilots."
        )
    return season.with_pilots({pilot.slot_id: replace(pilot, selected_for_draft=True)})
