"""Configuration loader for the fantasy league rules engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
RULES_PATH: Path = DATA_DIR / "league_rules.yaml"

# key -> (minimum, maximum) accepted value
_FIELD_RANGES: dict[str, tuple[int, int]] = {
    "default_value_group_count": (1, 5),
    "default_draft_pilot_count": (1, 20),
    "default_group_limit": (0, 99),
    "ranked_pick_positions": (1, 20),
    "min_season_year": (1900, 2100),
    "max_years_ahead": (0, 50),
    "min_season_name_length": (1, 100),
}


@dataclass(frozen=True)
class LeagueRules:
    """League-wide defaults and bounds.

    Attributes:
        default_value_group_count: Value groups enabled on a new season.
        default_draft_pilot_count: Draft picks required on a new season.
        default_group_limit: Pick limit assigned to every group on a new
            season.
        ranked_pick_positions: Number of picks compared position by
            position when two participants tie on points.
        min_season_year: Earliest accepted season year.
        max_years_ahead: How many years past the current one a season
            may be created for.
        min_season_name_length: Minimum length of a stripped season name.
    """

    default_value_group_count: int = 5
    default_draft_pilot_count: int = 9
    default_group_limit: int = 9
    ranked_pick_positions: int = 8
    min_season_year: int = 1950
    max_years_ahead: int = 3
    min_season_name_length: int = 3


DEFAULT_RULES = LeagueRules()


def load_league_rules(path: Path | None = None) -> LeagueRules:
    """Load league rules from a YAML file.

    Keys missing from the file keep their built-in default.

    Args:
        path: Optional override for the rules file path.

    Returns:
        A :class:`LeagueRules` instance.

    Raises:
        FileNotFoundError: If the rules file does not exist.
        ValueError: If a key is unknown, not an integer, or out of range.
    """
    rules_path = path or RULES_PATH
    if not rules_path.exists():
        raise FileNotFoundError(f"League rules file not found: {rules_path}")

    with open(rules_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, dict):
        raise ValueError(f"League rules file {rules_path} must contain a mapping")

    values: dict[str, int] = {}
    for key, val in data.items():
        if key not in _FIELD_RANGES:
            raise ValueError(f"Unknown league rule '{key}'")
        # bool is an int subclass; reject it explicitly
        if isinstance(val, bool) or not isinstance(val, int):
            raise ValueError(
                f"League rule '{key}' must be an integer, got {type(val).__name__}"
            )
        lo, hi = _FIELD_RANGES[key]
        if not lo <= val <= hi:
            raise ValueError(f"League rule '{key}' must be in [{lo}, {hi}], got {val}")
        values[key] = val

    return LeagueRules(**values)
