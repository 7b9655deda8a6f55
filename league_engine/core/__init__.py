"""Core rules modules for the fantasy league engine."""

from league_engine.core.activation import (
    activate_season,
    deactivate_season,
    evaluate_activation,
    revert_to_draft,
)
from league_engine.core.draft_config import (
    DraftAdjustments,
    apply_draft_config,
    plan_draft_adjustments,
    validate_draft_config,
)
from league_engine.core.errors import ErrorCode, LeagueRuleError, OperationResult
from league_engine.core.leaderboard import (
    Leaderboard,
    Scope,
    build_leaderboard,
    compare_participants,
    rank_participants,
    standings_frame,
)
from league_engine.core.pilot import UNASSIGNED, VALUE_GROUPS, Pilot
from league_engine.core.race import Race, RaceScore, RaceScoreEntry, race_short_code
from league_engine.core.scoring import (
    pilot_points_matrix,
    record_race_score,
    record_race_scores,
    season_totals_by_slot,
)
from league_engine.core.season import DraftConfig, Season, SeasonStatus
from league_engine.core.selection import TeamSelection
from league_engine.core.slots import allocate_slot_id, replace_in_slot, transfer_by_swap
from league_engine.core.team import Team

__all__ = [
    "DraftAdjustments",
    "DraftConfig",
    "ErrorCode",
    "Leaderboard",
    "LeagueRuleError",
    "OperationResult",
    "Pilot",
    "Race",
    "RaceScore",
    "RaceScoreEntry",
    "Scope",
    "Season",
    "SeasonStatus",
    "Team",
    "TeamSelection",
    "UNASSIGNED",
    "VALUE_GROUPS",
    "activate_season",
    "allocate_slot_id",
    "apply_draft_config",
    "build_leaderboard",
    "compare_participants",
    "deactivate_season",
    "evaluate_activation",
    "pilot_points_matrix",
    "plan_draft_adjustments",
    "race_short_code",
    "rank_participants",
    "record_race_score",
    "record_race_scores",
    "replace_in_slot",
    "revert_to_draft",
    "season_totals_by_slot",
    "standings_frame",
    "transfer_by_swap",
    "validate_draft_config",
]
