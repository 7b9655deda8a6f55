"""Season store contract and its implementations.

The engine reads every season, changes the affected ones in memory, and
writes every season back.  There is no version check: two writers working
from the same snapshot overwrite each other, the last write winning.  One
admin per season at a time is assumed.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from league_engine.core.season import Season
from league_engine.storage.codec import (
    enforce_single_active,
    normalize_season,
    season_to_dict,
)

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write *payload* next to *path*, then swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)
        fh.flush()
        os.fsync(fh.fileno())
    os.replace(tmp, path)


class SeasonStore(Protocol):
    def get_all(self) -> list[Season]:
        ...

    def get_by_id(self, season_id: str) -> Optional[Season]:
        ...

    def write_all(self, seasons: Iterable[Season]) -> None:
        ...


class InMemorySeasonStore:
    """Season store backed by a list, for tests and embedding."""

    def __init__(self, seasons: Iterable[Season] | None = None) -> None:
        self._seasons: list[Season] = list(seasons or [])

    def get_all(self) -> list[Season]:
        return list(self._seasons)

    def get_by_id(self, season_id: str) -> Optional[Season]:
        return next((s for s in self._seasons if s.id == season_id), None)

    def write_all(self, seasons: Iterable[Season]) -> None:
        self._seasons = list(seasons)


class JsonFileSeasonStore:
    """Season store persisted as a JSON array in a single file.

    Records that fail normalisation are skipped with a warning.  A file
    that is not valid JSON is an error, so that a later write never
    replaces data that could not be read.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def get_all(self) -> list[Season]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Season file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ValueError(f"Season file {self.path} must contain a JSON array")

        seasons: list[Season] = []
        for idx, raw in enumerate(data):
            result = normalize_season(raw)
            if result.season is None:
                logger.warning(
                    "Discarded season record %d in %s: %s",
                    idx,
                    self.path,
                    result.discarded_reason,
                )
                continue
            seasons.append(result.season)

        seasons, completed = enforce_single_active(seasons)
        for season_id in completed:
            logger.warning(
                "Season %s in %s was also active; loaded as completed",
                season_id,
                self.path,
            )
        return seasons

    def get_by_id(self, season_id: str) -> Optional[Season]:
        return next((s for s in self.get_all() if s.id == season_id), None)

    def write_all(self, seasons: Iterable[Season]) -> None:
        write_json_atomic(self.path, [season_to_dict(s) for s in seasons])
