"""Storage collaborators for seasons and participant team selections."""

from league_engine.storage.codec import NormalizedSeason, normalize_season, season_to_dict
from league_engine.storage.season_store import (
    InMemorySeasonStore,
    JsonFileSeasonStore,
    SeasonStore,
)
from league_engine.storage.selection_store import (
    InMemoryTeamSelectionStore,
    JsonFileTeamSelectionStore,
    TeamSelectionStore,
)

__all__ = [
    "InMemorySeasonStore",
    "InMemoryTeamSelectionStore",
    "JsonFileSeasonStore",
    "JsonFileTeamSelectionStore",
    "NormalizedSeason",
    "SeasonStore",
    "TeamSelectionStore",
    "normalize_season",
    "season_to_dict",
]
