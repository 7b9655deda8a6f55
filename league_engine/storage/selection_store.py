"""Team selection store contract and its implementations.

Selections are keyed by ``<prefix>.<season id>.<email>`` with the email
lower-cased.  Listing a season's selections is a scan over that key
prefix; the leaderboard needs it to enumerate participants.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from league_engine.core.selection import TeamSelection
from league_engine.storage.codec import selection_from_dict, selection_to_dict
from league_engine.storage.season_store import write_json_atomic

logger = logging.getLogger(__name__)

KEY_PREFIX: str = "f1league.teamSelection"


def selection_key(season_id: str, email: str) -> str:
    return f"{KEY_PREFIX}.{season_id}.{email.strip().lower()}"


def _season_prefix(season_id: str) -> str:
    return f"{KEY_PREFIX}.{season_id}."


class TeamSelectionStore(Protocol):
    def get(self, season_id: str, email: str) -> Optional[TeamSelection]:
        ...

    def set(self, season_id: str, email: str, selection: TeamSelection) -> None:
        ...

    def list_for_season(self, season_id: str) -> dict[str, TeamSelection]:
        ...


def _scan(records: dict[str, object], season_id: str, origin: str) -> dict[str, TeamSelection]:
    prefix = _season_prefix(season_id)
    found: dict[str, TeamSelection] = {}
    for key, raw in records.items():
        if not key.startswith(prefix):
            continue
        selection = selection_from_dict(raw)
        if selection is None:
            logger.warning("Ignored malformed team selection %s in %s", key, origin)
            continue
        found[key[len(prefix):]] = selection
    return found


class InMemoryTeamSelectionStore:
    """Selection store backed by a flat key/record dict."""

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}

    def get(self, season_id: str, email: str) -> Optional[TeamSelection]:
        raw = self._records.get(selection_key(season_id, email))
        return selection_from_dict(raw) if raw is not None else None

    def set(self, season_id: str, email: str, selection: TeamSelection) -> None:
        self._records[selection_key(season_id, email)] = selection_to_dict(selection)

    def list_for_season(self, season_id: str) -> dict[str, TeamSelection]:
        return _scan(self._records, season_id, "memory")


class JsonFileTeamSelectionStore:
    """Selection store persisted as one JSON object of key -> record."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ValueError(
                    f"Selection file {self.path} is not valid JSON: {exc}"
                ) from exc
        if not isinstance(data, dict):
            raise ValueError(f"Selection file {self.path} must contain a JSON object")
        return data

    def get(self, season_id: str, email: str) -> Optional[TeamSelection]:
        raw = self._load().get(selection_key(season_id, email))
        return selection_from_dict(raw) if raw is not None else None

    def set(self, season_id: str, email: str, selection: TeamSelection) -> None:
        records = self._load()
        records[selection_key(season_id, email)] = selection_to_dict(selection)
        write_json_atomic(self.path, records)

    def list_for_season(self, season_id: str) -> dict[str, TeamSelection]:
        return _scan(self._load(), season_id, str(self.path))
