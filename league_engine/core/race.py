"""Race calendar and race-score records for the fantasy league rules engine.

A :class:`RaceScoreEntry` keeps a snapshot of who occupied the slot when
the points were entered.  The slot may since have been handed to another
pilot; the entry still belongs to the slot.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

# Keyword table for short race codes.  First matching rule wins.
_RACE_CODE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("australia", "melbourne"), "AUS"),
    (("china", "shanghai"), "CHN"),
    (("japan", "suzuka"), "JPN"),
    (("bahrain", "sakhir"), "BHR"),
    (("saudi", "jeddah"), "SAU"),
    (("usa", "united states", "miami", "vegas", "austin"), "USA"),
    (("italy", "italia", "imola", "monza", "emilia"), "ITA"),
    (("monaco", "monte carlo"), "MON"),
    (("spain", "espana", "barcelona"), "ESP"),
    (("canada", "montreal"), "CAN"),
    (("austria", "spielberg"), "AUT"),
    (("britain", "british", "silverstone", "uk"), "GBR"),
    (("belgium", "spa"), "BEL"),
    (("hungary", "hungarian", "budapest"), "HUN"),
    (("netherlands", "dutch", "zandvoort"), "NED"),
    (("azerbaijan", "baku"), "AZE"),
    (("singapore", "marina bay"), "SGP"),
    (("qatar", "lusail"), "QAT"),
    (("mexico", "mexico city"), "MEX"),
    (("brazil", "sao paulo", "interlagos"), "BRA"),
    (("abu dhabi", "yas marina", "uae"), "UAE"),
)

_FILLER_WORDS = frozenset({"gp", "grand", "prix", "race"})


@dataclass(frozen=True)
class Race:
    """One calendar round.

    Attributes:
        id: Race identifier.
        name: Race name, e.g. ``"Bahrain GP"``.
        date: ISO date string, or empty when not yet scheduled.
        locked: Set once the first score for this race is recorded.
    """

    id: str
    name: str
    date: str = ""
    locked: bool = False

    def __post_init__(self) -> None:
        """Validate race fields."""
        if not self.id:
            raise ValueError("Race id must not be empty.")
        if not self.name:
            raise ValueError("Race name must not be empty.")


@dataclass(frozen=True)
class RaceScoreEntry:
    """Points earned by one slot in one race.

    Attributes:
        slot_id: Roster position the points belong to.
        pilot_id: Occupant identity when the points were entered.
        pilot_name: Occupant name when the points were entered.
        team_id: Team of the slot when the points were entered.
        team_name: Team name when the points were entered.
        points: Points awarded; any finite number.
    """

    slot_id: str
    pilot_id: str
    pilot_name: str
    team_id: str
    team_name: str
    points: float


@dataclass(frozen=True)
class RaceScore:
    """All score entries for one race, highest points first."""

    race_id: str
    entries: tuple[RaceScoreEntry, ...] = ()

    def points_for(self, slot_id: str) -> float | None:
        for entry in self.entries:
            if entry.slot_id == slot_id:
                return entry.points
        return None


def _normalize_name(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s-]", " ", stripped)
    return re.sub(r"\s+", " ", cleaned).strip()


def race_short_code(race_name: str) -> str:
    """Return a three-letter code for a race name.

    Known venues map through a keyword table (``"Monza GP"`` -> ``"ITA"``).
    Otherwise the first three letters of the name, ignoring filler words
    such as "grand prix", are used; ``"RCE"`` when nothing remains.
    """
    normalized = _normalize_name(race_name)
    for keywords, code in _RACE_CODE_RULES:
        if any(keyword in normalized for keyword in keywords):
            return code

    words = [w for w in normalized.split(" ") if w and w not in _FILLER_WORDS]
    fallback = "".join(words)[:3].upper()
    return fallback or "RCE"
