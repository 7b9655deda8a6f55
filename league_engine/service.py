"""League service: every admin and participant operation behind one object.

:class:`LeagueService` owns a season store and a team selection store.
Each mutating method reads every season, applies one core edit to the
snapshot, and writes everything back only if the edit succeeded.  Rule
rejections come back as an :class:`OperationResult`; nothing raises to
the caller for a rejected command.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Mapping, Optional, Sequence

from league_engine.config import DEFAULT_RULES, LeagueRules
from league_engine.core import activation, draft_config, scoring, season as season_ops
from league_engine.core import selection as selection_ops
from league_engine.core import slots
from league_engine.core.errors import (
    ErrorCode,
    LeagueRuleError,
    OperationResult,
    invalid,
    locked,
    not_found,
)
from league_engine.core.leaderboard import Leaderboard, Scope, build_leaderboard
from league_engine.core.season import Season, SeasonStatus
from league_engine.core.selection import TeamSelection
from league_engine.storage.season_store import SeasonStore
from league_engine.storage.selection_store import TeamSelectionStore

logger = logging.getLogger(__name__)

SeasonEdit = Callable[[Season], Season]


def _confirmation_required(action: str) -> LeagueRuleError:
    return LeagueRuleError(
        ErrorCode.CONFIRMATION_REQUIRED, f"Confirm before you {action}."
    )


class LeagueService:
    """Admin and participant operations over injected stores.

    Args:
        seasons: Store holding every season record.
        selections: Store holding participant team selections.
        rules: League defaults and season-info bounds.
        today: Clock used for the season year window; defaults to the
            current date.
    """

    def __init__(
        self,
        seasons: SeasonStore,
        selections: TeamSelectionStore,
        rules: LeagueRules = DEFAULT_RULES,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.seasons = seasons
        self.selections = selections
        self.rules = rules
        self._today = today

    # -- Plumbing -------------------------------------------------------------

    def _rejected(self, action: str, error: LeagueRuleError) -> OperationResult:
        logger.warning("%s rejected: %s", action, error)
        return OperationResult.rejected(error)

    def _edit(
        self,
        action: str,
        season_id: str,
        edit: SeasonEdit,
        message: Optional[str] = None,
    ) -> OperationResult:
        """Apply *edit* to one season and persist the whole list."""
        all_seasons = self.seasons.get_all()
        try:
            current = season_ops.find_season(all_seasons, season_id)
            updated = edit(current)
        except LeagueRuleError as exc:
            return self._rejected(action, exc)

        self.seasons.write_all(updated if s.id == season_id else s for s in all_seasons)
        return OperationResult.ok(season=updated, message=message)

    def _replace_all(
        self, action: str, build: Callable[[list[Season]], list[Season]]
    ) -> tuple[Optional[list[Season]], Optional[OperationResult]]:
        all_seasons = self.seasons.get_all()
        try:
            updated = build(all_seasons)
        except LeagueRuleError as exc:
            return None, self._rejected(action, exc)
        self.seasons.write_all(updated)
        return updated, None

    def get_season(self, season_id: str) -> Optional[Season]:
        return self.seasons.get_by_id(season_id)

    def list_seasons(self) -> list[Season]:
        return self.seasons.get_all()

    def active_season(self) -> Optional[Season]:
        return next(
            (s for s in self.seasons.get_all() if s.status is SeasonStatus.ACTIVE), None
        )

    # -- Season info ----------------------------------------------------------

    def create_draft_season(
        self, name: str, year: int, entry_fee: float, season_id: Optional[str] = None
    ) -> OperationResult:
        """Create a draft season and place it first in the store."""
        all_seasons = self.seasons.get_all()
        try:
            created = season_ops.create_draft_season(
                all_seasons,
                season_id or season_ops.new_id("season"),
                name,
                year,
                entry_fee,
                self.rules,
                self._today(),
            )
        except LeagueRuleError as exc:
            return self._rejected("Create season", exc)

        self.seasons.write_all([created, *all_seasons])
        logger.info("Season %s created (%s %d)", created.id, created.name, created.year)
        return OperationResult.ok(season=created, message="Season created.")

    def update_season_info(
        self, season_id: str, name: str, year: int, entry_fee: float
    ) -> OperationResult:
        all_seasons = self.seasons.get_all()
        return self._edit(
            "Update season info",
            season_id,
            lambda s: season_ops.update_season_info(
                all_seasons, s, name, year, entry_fee, self.rules, self._today()
            ),
            message="Season info saved.",
        )

    def set_editing_override(self, season_id: str, enabled: bool) -> OperationResult:
        result = self._edit(
            "Editing override",
            season_id,
            lambda s: season_ops.set_editing_override(s, enabled),
            message="Editing enabled." if enabled else "Editing disabled.",
        )
        if result.success:
            logger.info("Season %s editing override set to %s", season_id, bool(enabled))
        return result

    # -- Calendar, roster and draft rules -------------------------------------

    def add_race(self, season_id: str, name: str, date: str = "") -> OperationResult:
        return self._edit(
            "Add race", season_id, lambda s: season_ops.add_race(s, name, date), "Race added."
        )

    def add_team(self, season_id: str, name: str) -> OperationResult:
        return self._edit(
            "Add team", season_id, lambda s: season_ops.add_team(s, name), "Team added."
        )

    def add_pilot(
        self, season_id: str, team_id: str, name: str, value_group: str = "unassigned"
    ) -> OperationResult:
        return self._edit(
            "Add pilot",
            season_id,
            lambda s: slots.add_pilot(s, team_id, name, value_group),
            "Pilot added.",
        )

    def set_pilot_value_group(
        self, season_id: str, pilot_id: str, value_group: str
    ) -> OperationResult:
        return self._edit(
            "Set value group",
            season_id,
            lambda s: draft_config.set_pilot_value_group(s, pilot_id, value_group),
        )

    def toggle_pilot_draft_selection(self, season_id: str, pilot_id: str) -> OperationResult:
        return self._edit(
            "Toggle draft selection",
            season_id,
            lambda s: draft_config.toggle_pilot_draft_selection(s, pilot_id),
        )

    def save_draft_config(
        self,
        season_id: str,
        value_group_count: object,
        draft_pilot_count: object,
        group_limits: Mapping[str, object],
    ) -> OperationResult:
        """Validate and save draft rules, cascading onto the pilot pool.

        The result message lists how many pilots the cascade changed.
        """
        adjustments: list[draft_config.DraftAdjustments] = []

        def edit(season: Season) -> Season:
            updated, changes = draft_config.apply_draft_config(
                season, value_group_count, draft_pilot_count, group_limits
            )
            adjustments.append(changes)
            return updated

        result = self._edit("Save draft rules", season_id, edit)
        if not result.success:
            return result
        changes = adjustments[0]
        logger.info(
            "Draft rules saved for %s (%d pilots adjusted)", season_id, changes.total
        )
        message = " ".join(["Draft rules saved.", *changes.summary()])
        return OperationResult.ok(season=result.season, message=message)

    # -- Slots ----------------------------------------------------------------

    def replace_pilot_in_slot(
        self, season_id: str, slot_id: str, new_name: str
    ) -> OperationResult:
        return self._edit(
            "Replace pilot",
            season_id,
            lambda s: slots.replace_in_slot(s, slot_id, new_name),
            "Pilot replaced. Points already scored stay with the slot.",
        )

    def transfer_pilots(self, season_id: str, slot_id_a: str, slot_id_b: str) -> OperationResult:
        return self._edit(
            "Transfer pilots",
            season_id,
            lambda s: slots.transfer_by_swap(s, slot_id_a, slot_id_b),
            "Pilots swapped.",
        )

    # -- Scoring --------------------------------------------------------------

    def record_race_score(
        self, season_id: str, race_id: str, slot_id: str, points: float
    ) -> OperationResult:
        was_locked: list[bool] = []

        def edit(season: Season) -> Season:
            race = season.find_race(race_id)
            was_locked.append(race is not None and race.locked)
            return scoring.record_race_score(season, race_id, slot_id, points)

        result = self._edit("Record score", season_id, edit)
        if not result.success:
            return result
        if not was_locked[0]:
            message = "Score saved. Race auto-locked because scoring started."
        else:
            message = "Score saved."
        return OperationResult.ok(season=result.season, message=message)

    def record_race_scores(
        self, season_id: str, race_id: str, points_by_slot: Mapping[str, float]
    ) -> OperationResult:
        return self._edit(
            "Record race sheet",
            season_id,
            lambda s: scoring.record_race_scores(s, race_id, points_by_slot),
            "Race scores saved.",
        )

    # -- Lifecycle ------------------------------------------------------------

    def activation_issues(self, season_id: str) -> list[str]:
        season = self.seasons.get_by_id(season_id)
        if season is None:
            return ["Season not found."]
        return activation.evaluate_activation(season)

    def activate_season(self, season_id: str, confirmed: bool = False) -> OperationResult:
        """Make a draft season the active one, completing any other."""

        def build(all_seasons: list[Season]) -> list[Season]:
            season_ops.find_season(all_seasons, season_id)
            if not confirmed:
                raise _confirmation_required("activate the season")
            return activation.activate_season(all_seasons, season_id)

        updated, rejection = self._replace_all("Activate season", build)
        if rejection is not None:
            return rejection
        logger.info("Season %s activated", season_id)
        return OperationResult.ok(
            season=season_ops.find_season(updated, season_id), message="Season activated."
        )

    def deactivate_season(self, season_id: str, confirmed: bool = False) -> OperationResult:
        def edit(season: Season) -> Season:
            if not confirmed:
                raise _confirmation_required("deactivate the season")
            return activation.deactivate_season(season)

        result = self._edit("Deactivate season", season_id, edit, "Season completed.")
        if result.success:
            logger.info("Season %s deactivated", season_id)
        return result

    def revert_to_draft(self, season_id: str, confirmed: bool = False) -> OperationResult:
        def edit(season: Season) -> Season:
            if not confirmed:
                raise _confirmation_required("revert the season to draft")
            return activation.revert_to_draft(season)

        result = self._edit("Revert to draft", season_id, edit, "Season reverted to draft.")
        if result.success:
            logger.info("Season %s reverted to draft", season_id)
        return result

    def delete_season(
        self, season_id: str, confirmed: bool = False, confirmation_text: str = ""
    ) -> OperationResult:
        """Remove a season permanently.

        Needs both the confirmation flag and the season id typed back as
        *confirmation_text*.
        """

        def build(all_seasons: list[Season]) -> list[Season]:
            season_ops.find_season(all_seasons, season_id)
            if not confirmed:
                raise _confirmation_required("delete the season")
            if confirmation_text != season_id:
                raise invalid("Type the season id to confirm deletion.")
            return season_ops.remove_season(all_seasons, season_id)

        _, rejection = self._replace_all("Delete season", build)
        if rejection is not None:
            return rejection
        logger.info("Season %s deleted", season_id)
        return OperationResult.ok(message="Season deleted.")

    # -- Participant selections -----------------------------------------------

    def _selection_context(self, season_id: str) -> tuple[Season, list, dict[str, int], int]:
        season = self.seasons.get_by_id(season_id)
        if season is None:
            raise not_found("Season not found.")
        pool = selection_ops.build_draft_pool(season)
        requirements = selection_ops.group_requirements(season.draft_config)
        return season, pool, requirements, selection_ops.required_total(requirements)

    def get_team_selection(self, season_id: str, email: str) -> Optional[TeamSelection]:
        """Stored selection of one participant, cleaned against the pool."""
        stored = self.selections.get(season_id, email)
        season = self.seasons.get_by_id(season_id)
        if stored is None or season is None:
            return stored
        return selection_ops.normalize_selection(stored, selection_ops.build_draft_pool(season))

    def _save_selection(
        self,
        action: str,
        season_id: str,
        email: str,
        build: Callable[[list, TeamSelection, dict[str, int], int], TeamSelection],
        message: str,
    ) -> OperationResult:
        try:
            season, pool, requirements, total = self._selection_context(season_id)
            if season.status is not SeasonStatus.ACTIVE:
                raise locked("Team selection is only open for the active season.")
            current = selection_ops.normalize_selection(
                self.selections.get(season_id, email) or TeamSelection(), pool
            )
            updated = build(pool, current, requirements, total)
        except LeagueRuleError as exc:
            return self._rejected(action, exc)
        self.selections.set(season_id, email, updated)
        return OperationResult.ok(season=season, message=message)

    def toggle_team_selection(self, season_id: str, email: str, slot_id: str) -> OperationResult:
        return self._save_selection(
            "Toggle pick",
            season_id,
            email,
            lambda pool, current, reqs, total: selection_ops.toggle_selection(
                pool, current, slot_id, reqs, total
            ),
            "Selection saved.",
        )

    def confirm_team_selection(
        self, season_id: str, email: str, confirmed: bool = False
    ) -> OperationResult:
        result = self._save_selection(
            "Confirm selection",
            season_id,
            email,
            lambda pool, current, reqs, total: selection_ops.confirm_selection(
                pool, current, reqs, total, confirmed
            ),
            "Team selection confirmed and locked.",
        )
        if result.success:
            logger.info("Selection of %s locked for season %s", email.lower(), season_id)
        return result

    def admin_save_team_selection(
        self, season_id: str, email: str, slot_ids: Sequence[str]
    ) -> OperationResult:
        return self._save_selection(
            "Admin save selection",
            season_id,
            email,
            lambda pool, current, reqs, total: selection_ops.admin_save_selection(
                pool, slot_ids, reqs, total
            ),
            "Team selection saved.",
        )

    # -- Read models ----------------------------------------------------------

    def leaderboard(self, season_id: str, scope: Optional[Scope] = None) -> Leaderboard:
        """Standings for a season.

        Raises:
            LeagueRuleError: NOT_FOUND for an unknown season or race.
        """
        season = self.seasons.get_by_id(season_id)
        if season is None:
            raise not_found("Season not found.")
        pool = selection_ops.build_draft_pool(season)
        selections = {
            email: selection_ops.normalize_selection(sel, pool)
            for email, sel in self.selections.list_for_season(season_id).items()
        }
        return build_leaderboard(
            season,
            selections,
            scope or Scope.season_to_date(),
            positions=self.rules.ranked_pick_positions,
        )
