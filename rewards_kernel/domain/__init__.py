"""
Pure domain layer.

This module contains value objects and domain logic with NO dependencies
on:
- ORM (SQLAlchemy)
- Database
- I/O

Time enters only through an injected Clock.  All domain objects are
immutable and deterministic.
"""

from rewards_kernel.domain.access import (
    CallerContext,
    Role,
    ensure_can_manage_sector,
    ensure_collaborator_access,
    ensure_sector_access,
)
from rewards_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rewards_kernel.domain.contestation import (
    CONTESTATION_TRANSITIONS,
    TERMINAL_CONTESTATION_STATUSES,
    Contestation,
    ContestationReason,
    ContestationStatus,
    can_transition,
    check_transition,
    resolve_reason,
)
from rewards_kernel.domain.goals import (
    GoalScope,
    GoalSnapshot,
    GoalType,
    SectorGoal,
    validate_goal_definition,
)
from rewards_kernel.domain.periods import GoalPeriod, PeriodBucket, bucket_for, period_key
from rewards_kernel.domain.submissions import (
    Submission,
    checklist_item_key,
    parse_submission_date,
)

__all__ = [
    # Access
    "CallerContext",
    "Role",
    "ensure_can_manage_sector",
    "ensure_collaborator_access",
    "ensure_sector_access",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Contestation
    "CONTESTATION_TRANSITIONS",
    "TERMINAL_CONTESTATION_STATUSES",
    "Contestation",
    "ContestationReason",
    "ContestationStatus",
    "can_transition",
    "check_transition",
    "resolve_reason",
    # Goals
    "GoalPeriod",
    "GoalScope",
    "GoalSnapshot",
    "GoalType",
    "SectorGoal",
    "validate_goal_definition",
    # Periods
    "PeriodBucket",
    "bucket_for",
    "period_key",
    # Submissions
    "Submission",
    "checklist_item_key",
    "parse_submission_date",
]
