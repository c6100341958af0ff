"""
Goal domain types (``rewards_kernel.domain.goals``).

Responsibility
--------------
Pure value objects for sector goals: goal type and scope enums, the
``SectorGoal`` record, and the ``GoalSnapshot`` captured onto every
submission so that later edits to a goal never rewrite history.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  May import
only from ``domain/periods``, ``domain/currency`` and ``exceptions``.

Invariants enforced
-------------------
* ``target_value`` is always a ``Decimal``; it is fixed at 1 for
  ``BOOLEAN_CHECKLIST`` and ``TASK_COMPLETION`` goals.
* ``validate_goal_definition`` rejects, at creation/update time, a
  non-positive target for ``NUMERIC``/``PERCENTAGE``, an empty checklist
  for ``BOOLEAN_CHECKLIST``, a reward outside the currency bounds, and an
  ``INDIVIDUAL`` goal with no assignee.  Records loaded from the store are
  not re-validated; the engine tolerates a zero target.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import UUID

from rewards_kernel.domain.currency import is_valid_cents
from rewards_kernel.domain.periods import GoalPeriod
from rewards_kernel.exceptions import GoalValidationError

__all__ = [
    "GoalPeriod",
    "GoalScope",
    "GoalSnapshot",
    "GoalType",
    "SectorGoal",
    "validate_goal_definition",
]

_ONE = Decimal("1")


class GoalType(str, Enum):
    """How completion of a goal is measured."""

    NUMERIC = "numeric"
    BOOLEAN_CHECKLIST = "boolean_checklist"
    TASK_COMPLETION = "task_completion"
    PERCENTAGE = "percentage"


UNIT_TARGET_TYPES: frozenset[GoalType] = frozenset({
    GoalType.BOOLEAN_CHECKLIST,
    GoalType.TASK_COMPLETION,
})


class GoalScope(str, Enum):
    """Who a goal applies to."""

    SECTOR = "sector"
    INDIVIDUAL = "individual"


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value))


@dataclass(frozen=True)
class GoalSnapshot:
    """The parts of a goal that decide completion and reward.

    Captured at submission time and stored with the submission.
    """

    goal_type: GoalType
    target_value: Decimal
    period: GoalPeriod
    reward_amount_cents: int
    checklist_items: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "goal_type", GoalType(self.goal_type))
        object.__setattr__(self, "period", GoalPeriod(self.period))
        object.__setattr__(self, "target_value", _as_decimal(self.target_value))
        object.__setattr__(self, "checklist_items", tuple(self.checklist_items))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.goal_type.value,
            "target_value": str(self.target_value),
            "period": self.period.value,
            "reward_amount_cents": self.reward_amount_cents,
            "checklist_items": list(self.checklist_items),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GoalSnapshot:
        return cls(
            goal_type=GoalType(data["type"]),
            target_value=_as_decimal(data["target_value"]),
            period=GoalPeriod(data["period"]),
            reward_amount_cents=int(data["reward_amount_cents"]),
            checklist_items=tuple(data.get("checklist_items") or ()),
        )


@dataclass(frozen=True)
class SectorGoal:
    """A goal defined for a sector, or for one collaborator in it."""

    id: UUID
    sector_id: str
    type: GoalType
    title: str
    target_value: Decimal
    period: GoalPeriod
    reward_amount_cents: int
    checklist_items: tuple[str, ...] = ()
    is_active: bool = True
    scope: GoalScope = GoalScope.SECTOR
    assigned_collaborator_id: str | None = None
    description: str = ""
    unit: str = ""
    category: str = ""
    require_proof: bool = False
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        goal_type = GoalType(self.type)
        object.__setattr__(self, "type", goal_type)
        object.__setattr__(self, "period", GoalPeriod(self.period))
        object.__setattr__(self, "scope", GoalScope(self.scope))
        object.__setattr__(self, "checklist_items", tuple(self.checklist_items))
        if goal_type in UNIT_TARGET_TYPES:
            object.__setattr__(self, "target_value", _ONE)
        else:
            object.__setattr__(self, "target_value", _as_decimal(self.target_value))

    def applies_to(self, collaborator_id: str) -> bool:
        """Sector goals apply to everyone; individual goals to their assignee."""
        if self.scope is GoalScope.SECTOR:
            return True
        return self.assigned_collaborator_id == collaborator_id

    def snapshot(self) -> GoalSnapshot:
        return GoalSnapshot(
            goal_type=self.type,
            target_value=self.target_value,
            period=self.period,
            reward_amount_cents=self.reward_amount_cents,
            checklist_items=self.checklist_items,
        )

    def with_snapshot(self, snapshot: GoalSnapshot) -> SectorGoal:
        """This goal as it was defined when ``snapshot`` was taken."""
        return replace(
            self,
            type=snapshot.goal_type,
            target_value=snapshot.target_value,
            period=snapshot.period,
            reward_amount_cents=snapshot.reward_amount_cents,
            checklist_items=snapshot.checklist_items,
        )


def validate_goal_definition(
    goal_type: GoalType | str,
    target_value: Any,
    reward_amount_cents: Any,
    checklist_items: tuple[str, ...] | list[str] = (),
    scope: GoalScope | str = GoalScope.SECTOR,
    assigned_collaborator_id: str | None = None,
    title: str = "",
) -> None:
    """
    Check a goal definition before it is written.

    Raises:
        GoalValidationError: On the first violated rule.
    """
    try:
        goal_type = GoalType(goal_type)
    except ValueError:
        raise GoalValidationError("type", f"unknown goal type {goal_type!r}")
    try:
        scope = GoalScope(scope)
    except ValueError:
        raise GoalValidationError("scope", f"unknown scope {scope!r}")

    if not title or not title.strip():
        raise GoalValidationError("title", "must not be empty")

    if goal_type not in UNIT_TARGET_TYPES:
        try:
            target = _as_decimal(target_value)
        except (InvalidOperation, TypeError, ValueError):
            raise GoalValidationError("target_value", f"not a number: {target_value!r}")
        if not target.is_finite() or target <= 0:
            raise GoalValidationError("target_value", "must be greater than zero")

    if goal_type is GoalType.BOOLEAN_CHECKLIST:
        items = [item for item in checklist_items if item and item.strip()]
        if not items or len(items) != len(checklist_items):
            raise GoalValidationError(
                "checklist_items", "checklist goals need non-blank items"
            )

    if not is_valid_cents(reward_amount_cents):
        raise GoalValidationError(
            "reward_amount_cents", f"out of range: {reward_amount_cents!r}"
        )

    if scope is GoalScope.INDIVIDUAL and not assigned_collaborator_id:
        raise GoalValidationError(
            "assigned_collaborator_id", "individual goals need an assignee"
        )
