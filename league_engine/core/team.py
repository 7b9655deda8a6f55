"""Constructor team model for the fantasy league rules engine."""

from __future__ import annotations

from dataclasses import dataclass

from league_engine.core.pilot import Pilot


@dataclass(frozen=True)
class Team:
    """A constructor team and its ordered pilot roster.

    Attributes:
        id: Team identifier.
        name: Constructor name.
        pilots: Roster positions in insertion order.
    """

    id: str
    name: str
    pilots: tuple[Pilot, ...] = ()

    def __post_init__(self) -> None:
        """Validate team fields."""
        if not self.id:
            raise ValueError("Team id must not be empty.")
        if not self.name:
            raise ValueError("Team name must not be empty.")

    def __repr__(self) -> str:
        pilot_names = ", ".join(p.name for p in self.pilots)
        return f"Team(name={self.name!r}, pilots=[{pilot_names}])"
