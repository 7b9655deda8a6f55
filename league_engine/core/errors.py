"""Rejection taxonomy and the operation result returned to callers.

Core functions raise :class:`LeagueRuleError` before building any new
state.  The service layer converts it into an :class:`OperationResult`, so
callers only ever see return values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from league_engine.core.season import Season


class ErrorCode(str, Enum):
    """Stable machine-readable rejection codes."""

    LOCKED_FOR_EDITING = "LOCKED_FOR_EDITING"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    CONFLICT = "CONFLICT"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"


@dataclass
class LeagueRuleError(Exception):
    """A recoverable rejection of a league operation.

    Attributes:
        code: Rejection category.
        message: Human-readable text shown verbatim to the admin.
        details: Optional structured context for logging.
    """

    code: ErrorCode
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


def locked(message: str) -> LeagueRuleError:
    return LeagueRuleError(ErrorCode.LOCKED_FOR_EDITING, message)


def invalid(message: str) -> LeagueRuleError:
    return LeagueRuleError(ErrorCode.VALIDATION_FAILED, message)


def not_found(message: str) -> LeagueRuleError:
    return LeagueRuleError(ErrorCode.NOT_FOUND, message)


def violation(message: str) -> LeagueRuleError:
    return LeagueRuleError(ErrorCode.INVARIANT_VIOLATION, message)


def conflict(message: str) -> LeagueRuleError:
    return LeagueRuleError(ErrorCode.CONFLICT, message)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating operation.

    Attributes:
        success: Whether the operation was applied.
        message: Text for the admin; on failure, the rejection reason.
        season: The updated season on success (absent for deletions).
        code: Rejection code on failure.
    """

    success: bool
    message: Optional[str] = None
    season: Optional["Season"] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def ok(
        cls, season: Optional["Season"] = None, message: Optional[str] = None
    ) -> "OperationResult":
        return cls(success=True, message=message, season=season)

    @classmethod
    def rejected(cls, error: LeagueRuleError) -> "OperationResult":
        return cls(success=False, message=error.message, code=error.code)
