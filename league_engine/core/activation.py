"""Activation gate and season lifecycle transitions.

A draft season becomes active only when :func:`evaluate_activation` finds
nothing blocking.  At most one season is active at a time; activating a
season completes whichever season was active before.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import Sequence

from league_engine.core.errors import invalid, locked, violation
from league_engine.core.pilot import UNASSIGNED
from league_engine.core.season import Season, SeasonStatus, find_season

logger = logging.getLogger(__name__)


def evaluate_activation(season: Season) -> list[str]:
    """Return every issue blocking activation; empty when eligible."""
    issues: list[str] = []
    config = season.draft_config
    pilots = season.pilots

    if season.status is not SeasonStatus.DRAFT:
        issues.append("Only draft seasons can be activated.")
    if not season.races:
        issues.append("Add at least one race.")
    if not season.teams:
        issues.append("Add at least one team.")
    if not pilots:
        issues.append("Add at least one pilot.")

    unassigned = sum(1 for p in pilots if p.value_group == UNASSIGNED)
    if unassigned:
        issues.append(f"{unassigned} pilot(s) have no value group.")

    selected = [p for p in pilots if p.selected_for_draft]
    if len(selected) != config.draft_pilot_count:
        issues.append(
            f"Select exactly {config.draft_pilot_count} pilots for the draft "
            f"(currently {len(selected)})."
        )

    limit_total = config.active_limit_total
    if config.draft_pilot_count != limit_total:
        issues.append(
            f"Draft pilots ({config.draft_pilot_count}) must equal total active "
            f"group limits ({limit_total})."
        )

    by_group = Counter(p.value_group for p in selected)
    for group in config.active_groups:
        if by_group[group] > config.limit_for(group):
            issues.append(
                f"Group {group} has {by_group[group]} selected pilots "
                f"(limit {config.limit_for(group)})."
            )
    return issues


def activate_season(seasons: Sequence[Season], season_id: str) -> list[Season]:
    """Promote a draft season to active.

    Any other active season is completed.  The editing override of the
    newly active season is reset.

    Returns:
        The full season list with the transition applied.
    """
    season = find_season(seasons, season_id)
    issues = evaluate_activation(season)
    if issues:
        raise violation("Season cannot be activated: " + " ".join(issues))

    updated: list[Season] = []
    for item in seasons:
        if item.id == season_id:
            updated.append(
                replace(item, status=SeasonStatus.ACTIVE, editing_enabled=False)
            )
        elif item.status is SeasonStatus.ACTIVE:
            logger.info("Season %s completed by activation of %s", item.id, season_id)
            updated.append(replace(item, status=SeasonStatus.COMPLETED))
        else:
            updated.append(item)
    return updated


def deactivate_season(season: Season) -> Season:
    """Complete an active season."""
    if season.status is not SeasonStatus.ACTIVE:
        raise locked("Only the active season can be deactivated.")
    return replace(season, status=SeasonStatus.COMPLETED, editing_enabled=False)


def revert_to_draft(season: Season) -> Season:
    """Send an active or completed season back to draft."""
    if season.status is SeasonStatus.DRAFT:
        raise invalid("Season is already a draft.")
    return replace(season, status=SeasonStatus.DRAFT, editing_enabled=False)
