"""Tests for the team selection validator."""

import datetime as dt

import pytest

from league_engine.core.errors import ErrorCode, LeagueRuleError
from league_engine.core.pilot import Pilot
from league_engine.core.season import DraftConfig, Season
from league_engine.core.selection import (
    PoolPilot,
    SelectionStatus,
    TeamSelection,
    admin_save_selection,
    build_draft_pool,
    can_confirm,
    confirm_selection,
    group_requirements,
    normalize_selection,
    required_total,
    selection_status,
    toggle_selection,
)
from league_engine.core.team import Team

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_NOW = dt.datetime(2026, 3, 1, 12, 0, tzinfo=dt.timezone.utc)

# A: 2 picks, B: 1 pick
_REQS = {"A": 2, "B": 1}
_TOTAL = 3


def _pool() -> list[PoolPilot]:
    return [
        PoolPilot("a1", "Alpha One", "Team 1", "A"),
        PoolPilot("a2", "Alpha Two", "Team 1", "A"),
        PoolPilot("a3", "Alpha Three", "Team 2", "A"),
        PoolPilot("b1", "Bravo One", "Team 2", "B"),
        PoolPilot("b2", "Bravo Two", "Team 3", "B"),
    ]


def _pick(*slot_ids: str, locked: bool = False) -> TeamSelection:
    return TeamSelection(slot_ids=slot_ids, locked=locked)


def _toggle(current: TeamSelection, slot_id: str) -> TeamSelection:
    return toggle_selection(_pool(), current, slot_id, _REQS, _TOTAL, now=_NOW)


# ---------------------------------------------------------------------------
# Pool and requirements
# ---------------------------------------------------------------------------


def test_pool_holds_selected_pilots_of_active_groups() -> None:
    """Unselected pilots and pilots in disabled groups are not pickable."""
    pilots = (
        Pilot("p1", "s1", "One", "A", True),
        Pilot("p2", "s2", "Two", "B", False),
        Pilot("p3", "s3", "Three", "C", True),
    )
    season = Season(
        id="x",
        name="League",
        year=2026,
        entry_fee=1.0,
        draft_config=DraftConfig(2, 1, {"A": 1, "B": 0}),
        teams=(Team(id="t", name="Team", pilots=pilots),),
    )
    assert [p.slot_id for p in build_draft_pool(season)] == ["s1"]


def test_requirements_follow_active_groups() -> None:
    """Requirements cover enabled groups only."""
    config = DraftConfig(2, 3, {"A": 2, "B": 1, "C": 4})
    reqs = group_requirements(config)
    assert reqs == {"A": 2, "B": 1}
    assert required_total(reqs) == 3


# ---------------------------------------------------------------------------
# Toggling
# ---------------------------------------------------------------------------


def test_toggle_adds_in_pick_order() -> None:
    """Picks are appended in the order they are made."""
    sel = _toggle(_toggle(TeamSelection(), "b1"), "a2")
    assert sel.slot_ids == ("b1", "a2")
    assert sel.updated_at == _NOW.isoformat()


def test_toggle_rejects_full_group() -> None:
    """A group at its requirement blocks further picks in it."""
    with pytest.raises(LeagueRuleError, match="Group A already has 2") as err:
        _toggle(_pick("a1", "a2"), "a3")
    assert err.value.code is ErrorCode.INVARIANT_VIOLATION


def test_toggle_rejects_when_total_reached() -> None:
    """The total cap applies even if a group still has room."""
    reqs = {"A": 3, "B": 1}
    with pytest.raises(LeagueRuleError, match="maximum 3 pilots"):
        toggle_selection(_pool(), _pick("a1", "a2", "b1"), "a3", reqs, 3)


def test_toggle_removes_existing_pick() -> None:
    """Picking an already picked pilot un-picks it."""
    assert _toggle(_pick("a1", "b1"), "a1").slot_ids == ("b1",)


def test_toggle_rejected_when_locked() -> None:
    """Locked selections cannot change, not even by un-picking."""
    with pytest.raises(LeagueRuleError) as err:
        _toggle(_pick("a1", locked=True), "a1")
    assert err.value.code is ErrorCode.LOCKED_FOR_EDITING


def test_toggle_unknown_slot() -> None:
    """Slots outside the pool are NotFound."""
    with pytest.raises(LeagueRuleError) as err:
        _toggle(TeamSelection(), "zz")
    assert err.value.code is ErrorCode.NOT_FOUND


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------


def test_can_confirm_requires_exact_group_counts() -> None:
    """The right total with the wrong mix is not confirmable."""
    assert can_confirm(_pool(), _pick("a1", "a2", "b1"), _REQS, _TOTAL)
    assert not can_confirm(_pool(), _pick("a1", "b1", "b2"), _REQS, _TOTAL)
    assert not can_confirm(_pool(), _pick("a1", "b1"), _REQS, _TOTAL)


def test_confirm_locks_selection() -> None:
    """Confirming a complete selection locks it."""
    sel = confirm_selection(_pool(), _pick("a1", "a2", "b1"), _REQS, _TOTAL, True, now=_NOW)
    assert sel.locked
    assert not can_confirm(_pool(), sel, _REQS, _TOTAL)


def test_confirm_needs_explicit_flag() -> None:
    """Without the confirmation flag nothing is locked."""
    with pytest.raises(LeagueRuleError) as err:
        confirm_selection(_pool(), _pick("a1", "a2", "b1"), _REQS, _TOTAL, False)
    assert err.value.code is ErrorCode.CONFIRMATION_REQUIRED


def test_confirm_incomplete_rejected() -> None:
    """Incomplete selections cannot be confirmed."""
    with pytest.raises(LeagueRuleError, match="Complete all group requirements"):
        confirm_selection(_pool(), _pick("a1"), _REQS, _TOTAL, True)


# ---------------------------------------------------------------------------
# Admin edits and normalisation
# ---------------------------------------------------------------------------


def test_admin_save_locks_only_when_complete() -> None:
    """Admin-saved selections lock exactly when complete."""
    partial = admin_save_selection(_pool(), ["a1"], _REQS, _TOTAL, now=_NOW)
    full = admin_save_selection(_pool(), ["a1", "b2", "a3"], _REQS, _TOTAL, now=_NOW)
    assert not partial.locked
    assert full.locked
    assert full.slot_ids == ("a1", "b2", "a3")


def test_admin_save_enforces_quotas() -> None:
    """Admins cannot exceed a group requirement either."""
    with pytest.raises(LeagueRuleError, match="Group B"):
        admin_save_selection(_pool(), ["b1", "b2"], _REQS, _TOTAL)


def test_normalize_drops_stale_and_duplicate_picks() -> None:
    """Picks no longer in the pool are dropped, order is kept."""
    sel = normalize_selection(_pick("gone", "a2", "a2", "b1"), _pool())
    assert sel.slot_ids == ("a2", "b1")


def test_selection_status() -> None:
    """Status is derived from the number of picks."""
    assert selection_status(None, _TOTAL) is SelectionStatus.NOT_STARTED
    assert selection_status(_pick("a1"), _TOTAL) is SelectionStatus.IN_PROGRESS
    assert selection_status(_pick("a1", "a2", "b1"), _TOTAL) is SelectionStatus.COMPLETE
