"""
Submission domain types (``rewards_kernel.domain.submissions``).

Responsibility
--------------
The daily checklist a collaborator submits: answers keyed by goal id (or
``"<goal_id>:<item_index>"`` for checklist items), an observation, proof
file references per goal, and the goal snapshots taken at submission time.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* At most one submission per (collaborator, day).  Enforced by the store's
  unique constraint, not here.
* Submissions are append-only; nothing in the kernel mutates one.
* ``sort_key`` orders submissions deterministically: by day, then by
  creation time, then by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from rewards_kernel.domain.goals import GoalSnapshot
from rewards_kernel.exceptions import SubmissionValidationError

Answer = bool | int | float | str | Decimal

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def checklist_item_key(goal_id: UUID | str, item_index: int) -> str:
    """Answer key of one checklist item."""
    return f"{goal_id}:{item_index}"


def parse_submission_date(value: Any) -> date:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise SubmissionValidationError("date", f"not a calendar day: {value!r}")


@dataclass(frozen=True)
class Submission:
    """One collaborator's checklist for one day."""

    id: UUID
    collaborator_ref: str
    sector_id: str
    submission_date: date
    checklist_answers: Mapping[str, Answer] = field(default_factory=dict)
    observation: str = ""
    proof_file_refs: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    goal_snapshots: Mapping[str, GoalSnapshot] = field(default_factory=dict)
    created_at: datetime | None = None

    def answer_for(self, key: UUID | str) -> Answer | None:
        return self.checklist_answers.get(str(key))

    def snapshot_for(self, goal_id: UUID | str) -> GoalSnapshot | None:
        return self.goal_snapshots.get(str(goal_id))

    def proofs_for(self, goal_id: UUID | str) -> tuple[str, ...]:
        return tuple(self.proof_file_refs.get(str(goal_id), ()))

    @property
    def sort_key(self) -> tuple[date, datetime, str]:
        created = self.created_at or _EPOCH
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (self.submission_date, created, str(self.id))
