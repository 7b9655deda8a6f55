"""Tests for the slot registry: allocation, replacement and transfers."""

from dataclasses import replace

import pytest

from league_engine.core.errors import ErrorCode, LeagueRuleError
from league_engine.core.pilot import Pilot
from league_engine.core.race import Race, RaceScore, RaceScoreEntry
from league_engine.core.scoring import record_race_score, season_totals_by_slot
from league_engine.core.season import Season, SeasonStatus
from league_engine.core.slots import (
    add_pilot,
    allocate_slot_id,
    replace_in_slot,
    transfer_by_swap,
)
from league_engine.core.team import Team

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _pilot(pid: str, name: str, group: str = "A") -> Pilot:
    return Pilot(
        id=pid, slot_id=f"slot-{pid}", name=name, value_group=group, selected_for_draft=True
    )


def _season(status: SeasonStatus = SeasonStatus.ACTIVE, editing: bool = True) -> Season:
    return Season(
        id="s1",
        name="Test League",
        year=2026,
        entry_fee=10.0,
        status=status,
        races=(Race(id="r1", name="Bahrain GP"),),
        teams=(
            Team(id="t1", name="Red Bull", pilots=(_pilot("p1", "Max Verstappen"),)),
            Team(id="t2", name="Ferrari", pilots=(_pilot("p2", "Charles Leclerc", "B"),)),
        ),
        editing_enabled=editing,
    )


def _occupants(season: Season) -> dict[str, tuple[str, str]]:
    return {p.slot_id: (p.id, p.name) for p in season.pilots}


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


def test_slot_id_derived_from_name() -> None:
    """Slot ids are slugs of the pilot name."""
    assert allocate_slot_id("Max Verstappen", set()) == "slot-max-verstappen"
    assert allocate_slot_id("Sergio Pérez", set()) == "slot-sergio-perez"


def test_slot_id_collision_gets_suffix() -> None:
    """Colliding slugs get -2, -3 and so on."""
    taken = {"slot-max", "slot-max-2"}
    assert allocate_slot_id("Max", taken) == "slot-max-3"


def test_add_pilot_allocates_distinct_slot_and_id() -> None:
    """A new pilot gets a fresh slot id separate from its pilot id."""
    season = add_pilot(_season(SeasonStatus.DRAFT, editing=False), "t1", "Yuki Tsunoda")
    pilot = next(p for p in season.pilots if p.name == "Yuki Tsunoda")
    assert pilot.slot_id == "slot-yuki-tsunoda"
    assert pilot.id != pilot.slot_id
    assert not pilot.selected_for_draft


def test_add_pilot_never_reuses_scored_slot() -> None:
    """Slots referenced by scores stay taken even with no occupant."""
    entry = RaceScoreEntry("slot-someone", "p-old", "Someone", "t1", "Red Bull", 4)
    season = replace(
        _season(SeasonStatus.DRAFT),
        race_scores=(RaceScore(race_id="r1", entries=(entry,)),),
    )
    season = add_pilot(season, "t2", "Someone")
    pilot = next(p for p in season.pilots if p.name == "Someone")
    assert pilot.slot_id == "slot-someone-2"


def test_add_pilot_rejects_duplicate_name() -> None:
    """Pilot names are unique within a season."""
    with pytest.raises(LeagueRuleError, match="already exists") as err:
        add_pilot(_season(SeasonStatus.DRAFT), "t1", "max verstappen")
    assert err.value.code is ErrorCode.VALIDATION_FAILED


def test_add_pilot_locked_when_active_without_override() -> None:
    """Active seasons need the editing override for roster changes."""
    with pytest.raises(LeagueRuleError) as err:
        add_pilot(_season(editing=False), "t1", "New Pilot")
    assert err.value.code is ErrorCode.LOCKED_FOR_EDITING


# ---------------------------------------------------------------------------
# Replacement
# ---------------------------------------------------------------------------


def test_replace_keeps_slot_group_and_selection() -> None:
    """The new occupant inherits everything about the seat but the identity."""
    before = _season()
    after = replace_in_slot(before, "slot-p1", "Liam Lawson")
    _, old = before.find_slot("slot-p1")
    _, new = after.find_slot("slot-p1")
    assert new.name == "Liam Lawson"
    assert new.id != old.id
    assert (new.slot_id, new.value_group, new.selected_for_draft) == (
        old.slot_id,
        old.value_group,
        old.selected_for_draft,
    )


def test_replace_preserves_scoring_history() -> None:
    """Score entries and totals for the slot are untouched by a replacement."""
    season = record_race_score(_season(), "r1", "slot-p1", 25)
    after = replace_in_slot(season, "slot-p1", "Liam Lawson")
    assert after.race_scores == season.race_scores
    assert season_totals_by_slot(after) == season_totals_by_slot(season)


def test_replace_requires_override() -> None:
    """Replacement is only allowed in an active season with editing enabled."""
    for season in (_season(editing=False), _season(SeasonStatus.DRAFT, editing=False)):
        with pytest.raises(LeagueRuleError) as err:
            replace_in_slot(season, "slot-p1", "Liam Lawson")
        assert err.value.code is ErrorCode.LOCKED_FOR_EDITING


def test_replace_unknown_slot() -> None:
    """An unresolved slot id is NotFound."""
    with pytest.raises(LeagueRuleError) as err:
        replace_in_slot(_season(), "slot-nope", "Liam Lawson")
    assert err.value.code is ErrorCode.NOT_FOUND


def test_replace_with_same_name_rejected() -> None:
    """Replacing a pilot with themselves is a validation failure."""
    with pytest.raises(LeagueRuleError, match="already occupies"):
        replace_in_slot(_season(), "slot-p1", "Max Verstappen")


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------


def test_swap_exchanges_identities() -> None:
    """After a swap each slot holds the other pilot's identity."""
    before = _season()
    after = transfer_by_swap(before, "slot-p1", "slot-p2")
    assert _occupants(after) == {
        "slot-p1": ("p2", "Charles Leclerc"),
        "slot-p2": ("p1", "Max Verstappen"),
    }
    # the seats themselves do not move
    assert after.find_slot("slot-p1")[0].id == "t1"
    assert after.find_slot("slot-p1")[1].value_group == "A"


def test_swap_is_self_inverse() -> None:
    """Swapping the same slots twice restores the original roster."""
    before = _season()
    once = transfer_by_swap(before, "slot-p1", "slot-p2")
    twice = transfer_by_swap(once, "slot-p2", "slot-p1")
    assert twice == before


def test_swap_same_slot_rejected() -> None:
    """A slot cannot be swapped with itself."""
    with pytest.raises(LeagueRuleError) as err:
        transfer_by_swap(_season(), "slot-p1", "slot-p1")
    assert err.value.code is ErrorCode.VALIDATION_FAILED


def test_swap_unknown_slot_rejected() -> None:
    """Both slots must resolve."""
    with pytest.raises(LeagueRuleError) as err:
        transfer_by_swap(_season(), "slot-p1", "slot-missing")
    assert err.value.code is ErrorCode.NOT_FOUND


def test_swap_requires_override() -> None:
    """Transfers share the replacement permission gate."""
    with pytest.raises(LeagueRuleError) as err:
        transfer_by_swap(_season(editing=False), "slot-p1", "slot-p2")
    assert err.value.code is ErrorCode.LOCKED_FOR_EDITING
