"""Pilot model for the fantasy league rules engine.

A pilot carries two identifiers with different lifetimes: ``id`` names the
person currently driving and changes when the seat is handed to someone
else, while ``slot_id`` names the roster position and never changes once
allocated.  Race scores are keyed by ``slot_id``.
"""

from __future__ import annotations

from dataclasses import dataclass

VALUE_GROUPS: tuple[str, ...] = ("A", "B", "C", "D", "E")
UNASSIGNED: str = "unassigned"


def active_groups(value_group_count: int) -> tuple[str, ...]:
    """Return the first *value_group_count* group letters."""
    return VALUE_GROUPS[: max(0, value_group_count)]


@dataclass(frozen=True)
class Pilot:
    """Immutable snapshot of one roster position and its current occupant.

    Attributes:
        id: Identity of the pilot occupying the slot.
        slot_id: Stable roster-position identifier.
        name: Display name of the occupant.
        value_group: Draft tier letter, or ``"unassigned"``.
        selected_for_draft: Whether the pilot is in the draft pool.
    """

    id: str
    slot_id: str
    name: str
    value_group: str = UNASSIGNED
    selected_for_draft: bool = False

    def __post_init__(self) -> None:
        """Validate pilot fields."""
        if not self.id:
            raise ValueError("Pilot id must not be empty.")
        if not self.slot_id:
            raise ValueError("Pilot slot_id must not be empty.")
        if self.value_group != UNASSIGNED and self.value_group not in VALUE_GROUPS:
            raise ValueError(f"Unknown value group '{self.value_group}'.")
        if self.selected_for_draft and self.value_group == UNASSIGNED:
            raise ValueError("An unassigned pilot cannot be selected for the draft.")

    @property
    def is_assigned(self) -> bool:
        return self.value_group != UNASSIGNED
