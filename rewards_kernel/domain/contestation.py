"""
Contestation domain types (``rewards_kernel.domain.contestation``).

Responsibility
--------------
A manager's dispute of one goal's fulfillment inside one submission.
Defines the contestation lifecycle state machine, the predefined reasons,
and the record itself.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``CONTESTATION_TRANSITIONS`` defines the only valid status transitions.
  ``PENDING`` is initial; ``RESOLVED`` and ``DISMISSED`` are terminal and
  have no outgoing edges.
* Only ``PENDING`` contestations block payment of their
  (goal, submission) pair.  ``RESOLVED`` forfeits it, ``DISMISSED``
  releases it.
* A contestation always has a non-blank reason.  For ``OTHER`` the
  manager's own text is the reason; otherwise the predefined label is.

Failure modes
-------------
* ``check_transition`` raises ``ContestationAlreadyClosedError`` from a
  terminal status and ``InvalidContestationTransitionError`` for any other
  edge not in the table.
* ``resolve_reason`` raises ``ContestationValidationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from rewards_kernel.domain.labels import CONTESTATION_REASON_LABELS
from rewards_kernel.exceptions import (
    ContestationAlreadyClosedError,
    ContestationValidationError,
    InvalidContestationTransitionError,
)


class ContestationStatus(str, Enum):
    """Contestation lifecycle states."""

    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


CONTESTATION_TRANSITIONS: dict[ContestationStatus, frozenset[ContestationStatus]] = {
    ContestationStatus.PENDING: frozenset({
        ContestationStatus.RESOLVED,
        ContestationStatus.DISMISSED,
    }),
    ContestationStatus.RESOLVED: frozenset(),
    ContestationStatus.DISMISSED: frozenset(),
}

TERMINAL_CONTESTATION_STATUSES: frozenset[ContestationStatus] = frozenset({
    ContestationStatus.RESOLVED,
    ContestationStatus.DISMISSED,
})


class ContestationReason(str, Enum):
    """Predefined reasons a manager can pick."""

    NOT_DONE = "not_done"
    INCORRECT_WAY = "incorrect_way"
    INCOMPLETE = "incomplete"
    POOR_QUALITY = "poor_quality"
    MISSING_PROOF = "missing_proof"
    OTHER = "other"


def can_transition(
    from_status: ContestationStatus | str,
    to_status: ContestationStatus | str,
) -> bool:
    return ContestationStatus(to_status) in CONTESTATION_TRANSITIONS[
        ContestationStatus(from_status)
    ]


def check_transition(
    contestation_id: UUID | str,
    from_status: ContestationStatus | str,
    to_status: ContestationStatus | str,
) -> None:
    from_status = ContestationStatus(from_status)
    to_status = ContestationStatus(to_status)
    if from_status in TERMINAL_CONTESTATION_STATUSES:
        raise ContestationAlreadyClosedError(str(contestation_id), from_status.value)
    if not can_transition(from_status, to_status):
        raise InvalidContestationTransitionError(
            str(contestation_id), from_status.value, to_status.value
        )


def resolve_reason(
    reason_code: ContestationReason | str,
    custom_text: str | None = None,
) -> str:
    """
    Text stored as the contestation reason.

    A predefined code stores its label; free text given with it is kept
    after the label as ``"<label>: <text>"``.  ``OTHER`` stores the free
    text alone.

    Raises:
        ContestationValidationError: Unknown code, or ``OTHER`` without text.
    """
    try:
        code = ContestationReason(reason_code)
    except ValueError:
        raise ContestationValidationError(
            "reason_code", f"unknown reason {reason_code!r}"
        ) from None

    text = (custom_text or "").strip()
    if code is ContestationReason.OTHER:
        if not text:
            raise ContestationValidationError(
                "reason", "a description is required for 'other'"
            )
        return text
    label = CONTESTATION_REASON_LABELS[code.value]
    return f"{label}: {text}" if text else label


@dataclass(frozen=True)
class Contestation:
    """Immutable view of a contestation record."""

    id: UUID
    goal_id: UUID
    submission_id: UUID
    collaborator_id: str
    manager_id: str
    reason: str
    reason_code: ContestationReason = ContestationReason.OTHER
    status: ContestationStatus = ContestationStatus.PENDING
    response: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ContestationStatus(self.status))
        object.__setattr__(self, "reason_code", ContestationReason(self.reason_code))

    @property
    def pair(self) -> tuple[str, str]:
        """(goal_id, submission_id) as strings."""
        return (str(self.goal_id), str(self.submission_id))

    @property
    def is_pending(self) -> bool:
        return self.status is ContestationStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_CONTESTATION_STATUSES
