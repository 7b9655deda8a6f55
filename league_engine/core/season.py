"""Season model and season-level edits for the fantasy league rules engine.

A :class:`Season` is an immutable snapshot.  Every edit below takes a
snapshot and returns a new one built with :func:`dataclasses.replace`,
raising :class:`LeagueRuleError` before anything is built when a check
fails.
"""

from __future__ import annotations

import datetime as dt
import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional, Sequence

from league_engine.config import DEFAULT_RULES, LeagueRules
from league_engine.core.errors import conflict, invalid, locked, not_found
from league_engine.core.pilot import VALUE_GROUPS, Pilot, active_groups
from league_engine.core.race import Race, RaceScore
from league_engine.core.team import Team


class SeasonStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DraftConfig:
    """Draft rules of a season.

    Attributes:
        value_group_count: Number of enabled value groups (1-5); the
            enabled groups are the first letters of ``A``-``E``.
        draft_pilot_count: Number of pilots in the draft pool and of picks
            each participant makes (1-20).
        group_limits: Pick quota per group letter.  Letters beyond
            ``value_group_count`` keep their stored value but are ignored.
    """

    value_group_count: int
    draft_pilot_count: int
    group_limits: dict[str, int] = field(default_factory=dict)

    @property
    def active_groups(self) -> tuple[str, ...]:
        return active_groups(self.value_group_count)

    def limit_for(self, group: str) -> int:
        return max(0, self.group_limits.get(group, 0))

    @property
    def active_limit_total(self) -> int:
        return sum(self.limit_for(g) for g in self.active_groups)


def default_draft_config(rules: LeagueRules = DEFAULT_RULES) -> DraftConfig:
    """Return the draft configuration given to a newly created season."""
    return DraftConfig(
        value_group_count=rules.default_value_group_count,
        draft_pilot_count=rules.default_draft_pilot_count,
        group_limits={g: rules.default_group_limit for g in VALUE_GROUPS},
    )


@dataclass(frozen=True)
class Season:
    """One league season and everything configured for it.

    Attributes:
        id: Season identifier.
        name: Display name.
        year: Championship year.
        entry_fee: Fee participants pay to enter.
        status: Lifecycle status.
        draft_config: Draft rules.
        races: Calendar in running order.
        race_scores: One record per race that has score entries.
        teams: Constructor teams and their rosters.
        editing_enabled: Admin override allowing calendar and roster
            edits while the season is active.
    """

    id: str
    name: str
    year: int
    entry_fee: float
    status: SeasonStatus = SeasonStatus.DRAFT
    draft_config: DraftConfig = field(default_factory=default_draft_config)
    races: tuple[Race, ...] = ()
    race_scores: tuple[RaceScore, ...] = ()
    teams: tuple[Team, ...] = ()
    editing_enabled: bool = False

    # -- Lookups --------------------------------------------------------------

    def iter_pilots(self) -> Iterator[tuple[Team, Pilot]]:
        """Yield ``(team, pilot)`` pairs in roster order."""
        for team in self.teams:
            for pilot in team.pilots:
                yield team, pilot

    @property
    def pilots(self) -> list[Pilot]:
        return [pilot for _, pilot in self.iter_pilots()]

    def find_team(self, team_id: str) -> Optional[Team]:
        return next((t for t in self.teams if t.id == team_id), None)

    def find_race(self, race_id: str) -> Optional[Race]:
        return next((r for r in self.races if r.id == race_id), None)

    def find_pilot(self, pilot_id: str) -> Optional[tuple[Team, Pilot]]:
        return next(
            ((t, p) for t, p in self.iter_pilots() if p.id == pilot_id), None
        )

    def find_slot(self, slot_id: str) -> Optional[tuple[Team, Pilot]]:
        return next(
            ((t, p) for t, p in self.iter_pilots() if p.slot_id == slot_id), None
        )

    def race_score(self, race_id: str) -> Optional[RaceScore]:
        return next((s for s in self.race_scores if s.race_id == race_id), None)

    # -- Rebuilding -----------------------------------------------------------

    def with_pilots(self, updated: dict[str, Pilot]) -> "Season":
        """Return a copy with pilots replaced by slot id.

        *updated* maps a slot id to the pilot that should sit in that
        position; positions not named keep their current pilot.
        """
        if not updated:
            return self
        teams = tuple(
            replace(
                team,
                pilots=tuple(updated.get(p.slot_id, p) for p in team.pilots),
            )
            for team in self.teams
        )
        return replace(self, teams=teams)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Edit gates
# ---------------------------------------------------------------------------


def ensure_draft(season: Season) -> None:
    if season.status is not SeasonStatus.DRAFT:
        raise locked("Only draft seasons can be edited.")


def ensure_roster_editable(season: Season) -> None:
    """Allow calendar/roster edits while draft, or active with the override."""
    if season.status is SeasonStatus.DRAFT:
        return
    if season.status is SeasonStatus.ACTIVE and season.editing_enabled:
        return
    raise locked(
        "Calendar and pilots can only be edited in draft, "
        "or in an active season with admin editing enabled."
    )


def ensure_override_enabled(season: Season) -> None:
    """Allow edits reserved for an active season with the override on."""
    if season.status is not SeasonStatus.ACTIVE or not season.editing_enabled:
        raise locked(
            "Pilot replacements and transfers require an active season "
            "with admin editing enabled."
        )


def find_season(seasons: Sequence[Season], season_id: str) -> Season:
    season = next((s for s in seasons if s.id == season_id), None)
    if season is None:
        raise not_found("Season not found.")
    return season


# ---------------------------------------------------------------------------
# Season info
# ---------------------------------------------------------------------------


def validate_season_info(
    name: str,
    year: int,
    entry_fee: float,
    rules: LeagueRules = DEFAULT_RULES,
    today: dt.date | None = None,
) -> str:
    """Validate season info fields and return the stripped name."""
    stripped = (name or "").strip()
    if len(stripped) < rules.min_season_name_length:
        raise invalid(
            f"Name must have at least {rules.min_season_name_length} characters."
        )

    max_year = (today or dt.date.today()).year + rules.max_years_ahead
    if (
        isinstance(year, bool)
        or not isinstance(year, int)
        or not rules.min_season_year <= year <= max_year
    ):
        raise invalid(f"Year must be between {rules.min_season_year} and {max_year}.")

    if (
        isinstance(entry_fee, bool)
        or not isinstance(entry_fee, (int, float))
        or not math.isfinite(entry_fee)
        or entry_fee <= 0
    ):
        raise invalid("Fee must be a number greater than 0.")
    return stripped


def create_draft_season(
    seasons: Sequence[Season],
    season_id: str,
    name: str,
    year: int,
    entry_fee: float,
    rules: LeagueRules = DEFAULT_RULES,
    today: dt.date | None = None,
) -> Season:
    """Build a new draft season with the default draft configuration.

    Raises:
        LeagueRuleError: VALIDATION_FAILED for bad info fields, CONFLICT
            when the id or the name+year pair is already taken.
    """
    if not season_id or not season_id.strip():
        raise invalid("Season id is required.")
    stripped = validate_season_info(name, year, entry_fee, rules, today)

    if any(s.id == season_id for s in seasons):
        raise conflict(f"A season with id '{season_id}' already exists.")
    if any(s.name.lower() == stripped.lower() and s.year == year for s in seasons):
        raise conflict(f"Season '{stripped} {year}' already exists.")

    return Season(
        id=season_id,
        name=stripped,
        year=year,
        entry_fee=entry_fee,
        status=SeasonStatus.DRAFT,
        draft_config=default_draft_config(rules),
    )


def update_season_info(
    seasons: Sequence[Season],
    season: Season,
    name: str,
    year: int,
    entry_fee: float,
    rules: LeagueRules = DEFAULT_RULES,
    today: dt.date | None = None,
) -> Season:
    ensure_draft(season)
    stripped = validate_season_info(name, year, entry_fee, rules, today)
    if any(
        s.id != season.id and s.name.lower() == stripped.lower() and s.year == year
        for s in seasons
    ):
        raise conflict(f"Season '{stripped} {year}' already exists.")
    return replace(season, name=stripped, year=year, entry_fee=entry_fee)


def set_editing_override(season: Season, enabled: bool) -> Season:
    """Turn the active-season editing override on or off."""
    if season.status is not SeasonStatus.ACTIVE:
        raise locked("Editing override is only available for the active season.")
    return replace(season, editing_enabled=bool(enabled))


# ---------------------------------------------------------------------------
# Calendar and teams
# ---------------------------------------------------------------------------


def add_race(season: Season, name: str, date: str = "") -> Season:
    ensure_roster_editable(season)
    stripped = (name or "").strip()
    if not stripped:
        raise invalid("Race name is required.")
    if date:
        try:
            dt.date.fromisoformat(date)
        except ValueError:
            raise invalid("Race date must be an ISO date (YYYY-MM-DD).") from None
    if any(r.name.lower() == stripped.lower() for r in season.races):
        raise invalid(f"Race '{stripped}' already exists in this season.")

    race = Race(id=new_id("race"), name=stripped, date=date or "")
    return replace(season, races=season.races + (race,))


def add_team(season: Season, name: str) -> Season:
    ensure_draft(season)
    stripped = (name or "").strip()
    if not stripped:
        raise invalid("Team name is required.")
    if any(t.name.lower() == stripped.lower() for t in season.teams):
        raise invalid(f"Team '{stripped}' already exists in this season.")

    team = Team(id=new_id("team"), name=stripped)
    return replace(season, teams=season.teams + (team,))


def remove_season(seasons: Sequence[Season], season_id: str) -> list[Season]:
    """Return *seasons* without the given season."""
    find_season(seasons, season_id)
    return [s for s in seasons if s.id != season_id]
