"""Tests for the draft configuration validator and its pilot cascade."""

import pytest

from league_engine.core.draft_config import (
    apply_draft_config,
    plan_draft_adjustments,
    set_pilot_value_group,
    toggle_pilot_draft_selection,
    validate_draft_config,
)
from league_engine.core.errors import ErrorCode, LeagueRuleError
from league_engine.core.pilot import UNASSIGNED, Pilot
from league_engine.core.season import DraftConfig, Season, SeasonStatus
from league_engine.core.team import Team

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ZERO = {"A": 0, "B": 0, "C": 0, "D": 0, "E": 0}


def _limits(**kwargs: int) -> dict[str, int]:
    return {**_ZERO, **kwargs}


def _pilot(n: int, group: str, selected: bool = True) -> Pilot:
    return Pilot(
        id=f"p{n}",
        slot_id=f"slot-{n}",
        name=f"Pilot {n}",
        value_group=group,
        selected_for_draft=selected and group != UNASSIGNED,
    )


def _season(pilots: list[Pilot], config: DraftConfig | None = None) -> Season:
    config = config or DraftConfig(
        value_group_count=3, draft_pilot_count=6, group_limits=_limits(A=2, B=2, C=2)
    )
    return Season(
        id="s1",
        name="Test League",
        year=2026,
        entry_fee=10.0,
        draft_config=config,
        teams=(Team(id="t1", name="Team", pilots=tuple(pilots)),),
    )


def _by_id(season: Season) -> dict[str, Pilot]:
    return {p.id: p for p in season.pilots}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_pick_count_must_match_active_limits() -> None:
    """Two groups limited 2+1 cannot carry five picks."""
    with pytest.raises(
        LeagueRuleError, match=r"must equal total active group limits \(3\)"
    ) as err:
        validate_draft_config(2, 5, _limits(A=2, B=1))
    assert err.value.code is ErrorCode.INVARIANT_VIOLATION


def test_inactive_group_limits_are_ignored() -> None:
    """Limits of disabled groups do not count toward the total."""
    config = validate_draft_config(2, 3, _limits(A=2, B=1, C=7))
    assert config.active_groups == ("A", "B")
    assert config.active_limit_total == 3
    assert config.group_limits["C"] == 7


@pytest.mark.parametrize(
    "groups, picks, limits",
    [
        (0, 1, _limits(A=1)),
        (6, 1, _limits(A=1)),
        (1, 21, _limits(A=21)),
        (1, 2.5, _limits(A=2)),
        (1, True, _limits(A=1)),
        (1, 1, _limits(A=100)),
        (1, "1", _limits(A=1)),
    ],
)
def test_malformed_numbers_rejected(groups: object, picks: object, limits: dict) -> None:
    """Out-of-range, fractional and non-numeric values are validation failures."""
    with pytest.raises(LeagueRuleError) as err:
        validate_draft_config(groups, picks, limits)
    assert err.value.code is ErrorCode.VALIDATION_FAILED


def test_integral_floats_accepted() -> None:
    """2.0 is as good as 2."""
    config = validate_draft_config(1.0, 2.0, _limits(A=2.0))
    assert config.draft_pilot_count == 2


def test_unknown_group_letter_rejected() -> None:
    """Only A-E exist."""
    with pytest.raises(LeagueRuleError, match="Unknown value group"):
        validate_draft_config(1, 1, {"A": 1, "F": 0})


def test_apply_rejected_outside_draft() -> None:
    """Draft rules are frozen once the season leaves draft."""
    season = Season(
        id="s1", name="Test League", year=2026, entry_fee=10.0, status=SeasonStatus.ACTIVE
    )
    with pytest.raises(LeagueRuleError) as err:
        apply_draft_config(season, 1, 1, _limits(A=1))
    assert err.value.code is ErrorCode.LOCKED_FOR_EDITING


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------


def test_disabled_group_moves_pilots_to_unassigned() -> None:
    """Pilots of a group that is switched off lose group and selection."""
    season = _season([_pilot(1, "A"), _pilot(2, "C"), _pilot(3, "C", selected=False)])
    updated, adj = apply_draft_config(season, 2, 2, _limits(A=1, B=1))
    pilots = _by_id(updated)
    assert adj.moved_to_unassigned == 2
    for pid in ("p2", "p3"):
        assert pilots[pid].value_group == UNASSIGNED
        assert not pilots[pid].selected_for_draft
    assert pilots["p1"].selected_for_draft


def test_group_limit_unselects_in_roster_order() -> None:
    """The first pilots in roster order keep their place under a lower limit."""
    season = _season([_pilot(1, "A"), _pilot(2, "A"), _pilot(3, "B"), _pilot(4, "B")])
    updated, adj = apply_draft_config(season, 2, 3, _limits(A=1, B=2))
    pilots = _by_id(updated)
    assert adj.unselected_by_group_limits == 1
    assert pilots["p1"].selected_for_draft
    assert not pilots["p2"].selected_for_draft
    assert pilots["p2"].value_group == "A"


def test_zero_limit_group_unselects_its_pilots() -> None:
    """An enabled group with limit 0 keeps none of its pool pilots."""
    config = DraftConfig(3, 6, _limits(A=2, B=2, C=2))
    season = _season([_pilot(n, g) for n, g in enumerate("AABBCC", start=1)], config)
    updated, adj = apply_draft_config(season, 3, 4, _limits(A=2, B=2, C=0))
    assert adj.unselected_by_group_limits == 2
    assert adj.unselected_by_draft_limit == 0
    assert sum(p.selected_for_draft for p in updated.pilots) == 4


def test_draft_limit_counter() -> None:
    """The global cap is counted separately from group caps."""
    season = _season([_pilot(1, "A"), _pilot(2, "A"), _pilot(3, "B")])
    plan = plan_draft_adjustments(season, DraftConfig(2, 2, _limits(A=2, B=2)))
    assert plan.unselected_by_draft_limit == 1
    assert set(plan.pilots) == {"slot-3"}


def test_unassigned_pilots_are_not_auto_reassigned() -> None:
    """Cascaded pilots stay unassigned when their group comes back."""
    season = _season([_pilot(1, "C")])
    shrunk, _ = apply_draft_config(season, 2, 2, _limits(A=1, B=1))
    grown, adj = apply_draft_config(shrunk, 3, 3, _limits(A=1, B=1, C=1))
    assert _by_id(grown)["p1"].value_group == UNASSIGNED
    assert adj.total == 0


def test_reapplying_config_is_idempotent() -> None:
    """Applying the same rules twice makes no further adjustments."""
    season = _season([_pilot(n, g) for n, g in enumerate("AAABBCD", start=1)])
    once, first = apply_draft_config(season, 2, 3, _limits(A=2, B=1))
    twice, second = apply_draft_config(once, 2, 3, _limits(A=2, B=1))
    assert first.total > 0
    assert second.total == 0
    assert twice == once


def test_summary_lists_nonzero_adjustments() -> None:
    """The summary mentions only the reasons that applied."""
    season = _season([_pilot(1, "C")])
    _, adj = apply_draft_config(season, 2, 2, _limits(A=1, B=1))
    assert adj.summary() == ["1 pilot(s) moved to unassigned."]


# ---------------------------------------------------------------------------
# Pool edits
# ---------------------------------------------------------------------------


def test_toggle_rejects_unassigned_pilot() -> None:
    """A pilot needs a group before entering the pool."""
    season = _season([_pilot(1, UNASSIGNED)])
    with pytest.raises(LeagueRuleError) as err:
        toggle_pilot_draft_selection(season, "p1")
    assert err.value.code is ErrorCode.VALIDATION_FAILED


def test_toggle_respects_group_limit() -> None:
    """A full group blocks further selections in it."""
    season = _season([_pilot(1, "A"), _pilot(2, "A"), _pilot(3, "A", selected=False)])
    with pytest.raises(LeagueRuleError, match="Group A already has 2") as err:
        toggle_pilot_draft_selection(season, "p3")
    assert err.value.code is ErrorCode.INVARIANT_VIOLATION


def test_toggle_respects_pick_count() -> None:
    """A full pool blocks any further selection."""
    config = DraftConfig(2, 2, _limits(A=1, B=1))
    season = _season([_pilot(1, "A"), _pilot(2, "B"), _pilot(3, "B", selected=False)], config)
    with pytest.raises(LeagueRuleError, match="already has 2 selected"):
        toggle_pilot_draft_selection(season, "p3")


def test_toggle_unselect_always_allowed() -> None:
    """Removing a pilot from the pool never fails in draft."""
    season = _season([_pilot(1, "A")])
    updated = toggle_pilot_draft_selection(season, "p1")
    assert not _by_id(updated)["p1"].selected_for_draft


def test_unassigning_clears_selection() -> None:
    """Moving a pilot to unassigned removes it from the pool."""
    updated = set_pilot_value_group(_season([_pilot(1, "A")]), "p1", UNASSIGNED)
    pilot = _by_id(updated)["p1"]
    assert (pilot.value_group, pilot.selected_for_draft) == (UNASSIGNED, False)


def test_regrouping_into_full_group_rejected() -> None:
    """A selected pilot cannot move into a group already at its limit."""
    season = _season([_pilot(1, "A"), _pilot(2, "B"), _pilot(3, "B")])
    with pytest.raises(LeagueRuleError) as err:
        set_pilot_value_group(season, "p1", "B")
    assert err.value.code is ErrorCode.INVARIANT_VIOLATION


def test_regrouping_into_inactive_group_rejected() -> None:
    """Only enabled groups are valid targets."""
    with pytest.raises(LeagueRuleError, match="not active"):
        set_pilot_value_group(_season([_pilot(1, "A")]), "p1", "E")
