"""Tests for race short codes and race records."""

import pytest

from league_engine.core.race import Race, RaceScore, RaceScoreEntry, race_short_code


def test_known_venues_use_keyword_table() -> None:
    """Venue keywords map to their country code."""
    assert race_short_code("Bahrain Grand Prix") == "BHR"
    assert race_short_code("Monza GP") == "ITA"
    assert race_short_code("Las Vegas Grand Prix") == "USA"
    assert race_short_code("Abu Dhabi Grand Prix") == "UAE"


def test_accents_are_ignored() -> None:
    """Accented names match their plain keyword."""
    assert race_short_code("Grande Prêmio de São Paulo") == "BRA"


def test_unknown_name_uses_leading_letters() -> None:
    """Filler words are skipped before taking three letters."""
    assert race_short_code("Grand Prix of Portugal") == "OFP"
    assert race_short_code("Portimao GP") == "POR"


def test_empty_name_falls_back() -> None:
    """A name with nothing usable gets the generic code."""
    assert race_short_code("Grand Prix") == "RCE"
    assert race_short_code("") == "RCE"


def test_race_requires_id_and_name() -> None:
    """Race records reject empty identifiers."""
    with pytest.raises(ValueError, match="id"):
        Race(id="", name="Bahrain")
    with pytest.raises(ValueError, match="name"):
        Race(id="r1", name="")


def test_points_for_looks_up_slot() -> None:
    """RaceScore.points_for returns None for slots without an entry."""
    entry = RaceScoreEntry("slot-a", "p1", "A", "t1", "Team", 12.5)
    score = RaceScore(race_id="r1", entries=(entry,))
    assert score.points_for("slot-a") == 12.5
    assert score.points_for("slot-b") is None
