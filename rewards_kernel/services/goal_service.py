"""
GoalService -- goal catalog write side.

Responsibility:
    Creates and edits sector goals and toggles them active or inactive.
    Every write validates the full resulting definition first.

Architecture position:
    Kernel > Services -- imperative shell.  Reads go through
    ``selectors.goal_selector.GoalCatalog``.

Invariants enforced:
    - ``target_value > 0`` for NUMERIC and PERCENTAGE goals.
    - BOOLEAN_CHECKLIST goals have at least one non-blank item.
    - ``reward_amount_cents`` within [0, max_reward_cents].
    - INDIVIDUAL goals name their assignee.
    - Only managers of the goal's sector and admins may write.
    - Flush-only: never commits.

Failure modes:
    - GoalValidationError on an invalid definition.
    - GoalNotFoundError on update/toggle of an unknown goal.
    - SectorAccessDeniedError when the caller may not manage the sector.
"""

from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from rewards_kernel.domain.access import CallerContext, ensure_can_manage_sector
from rewards_kernel.domain.clock import Clock
from rewards_kernel.domain.currency import MAX_CENTS
from rewards_kernel.domain.goals import (
    GoalPeriod,
    GoalScope,
    GoalType,
    SectorGoal,
    validate_goal_definition,
)
from rewards_kernel.exceptions import GoalNotFoundError, GoalValidationError
from rewards_kernel.logging_config import get_logger
from rewards_kernel.models.goal import SectorGoalModel
from rewards_kernel.services.base import BaseService

logger = get_logger("services.goal")

_UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "type",
    "target_value",
    "unit",
    "category",
    "period",
    "checklist_items",
    "reward_amount_cents",
    "scope",
    "assigned_collaborator_id",
    "require_proof",
    "is_active",
})


class GoalService(BaseService[SectorGoalModel]):
    """
    Goal definition writes.

    Contract:
        Returns frozen ``SectorGoal`` DTOs.  Submissions already made keep
        the goal snapshot taken when they were created, so edits here
        never change past rewards.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        max_reward_cents: int = MAX_CENTS,
    ):
        super().__init__(session, clock)
        self._max_reward_cents = max_reward_cents

    def _validate(self, **definition: Any) -> None:
        validate_goal_definition(**definition)
        reward = definition["reward_amount_cents"]
        if reward > self._max_reward_cents:
            raise GoalValidationError(
                "reward_amount_cents",
                f"{reward} exceeds the configured maximum {self._max_reward_cents}",
            )

    def _load(self, goal_id: UUID) -> SectorGoalModel:
        model = self.session.get(SectorGoalModel, goal_id)
        if model is None:
            raise GoalNotFoundError(str(goal_id))
        return model

    def create_goal(
        self,
        sector_id: str,
        goal_type: GoalType | str,
        title: str,
        period: GoalPeriod | str,
        reward_amount_cents: int,
        target_value: Decimal | int | str = 1,
        checklist_items: Sequence[str] = (),
        scope: GoalScope | str = GoalScope.SECTOR,
        assigned_collaborator_id: str | None = None,
        description: str = "",
        unit: str = "",
        category: str = "",
        require_proof: bool = False,
        caller: CallerContext | None = None,
    ) -> SectorGoal:
        """
        Create an active goal.

        Raises:
            GoalValidationError: Definition violates a catalog invariant.
            SectorAccessDeniedError: Caller may not manage ``sector_id``.
        """
        if caller is not None:
            ensure_can_manage_sector(caller, sector_id)

        try:
            period = GoalPeriod(period)
        except ValueError:
            raise GoalValidationError("period", f"unknown period {period!r}") from None

        self._validate(
            goal_type=goal_type,
            target_value=target_value,
            reward_amount_cents=reward_amount_cents,
            checklist_items=tuple(checklist_items),
            scope=scope,
            assigned_collaborator_id=assigned_collaborator_id,
            title=title,
        )

        goal = SectorGoal(
            id=uuid4(),
            sector_id=sector_id,
            type=GoalType(goal_type),
            title=title.strip(),
            target_value=target_value,
            period=period,
            reward_amount_cents=reward_amount_cents,
            checklist_items=tuple(item.strip() for item in checklist_items),
            is_active=True,
            scope=GoalScope(scope),
            assigned_collaborator_id=(
                assigned_collaborator_id if GoalScope(scope) is GoalScope.INDIVIDUAL else None
            ),
            description=description,
            unit=unit,
            category=category,
            require_proof=require_proof,
            created_at=self._clock.now(),
        )

        model = SectorGoalModel.from_dto(
            goal, created_by=caller.profile_id if caller is not None else None
        )
        self.session.add(model)
        self.session.flush()

        logger.info(
            "goal_created",
            extra={
                "goal_id": str(goal.id),
                "sector_id": sector_id,
                "goal_type": goal.type.value,
                "period": goal.period.value,
                "scope": goal.scope.value,
                "reward_amount_cents": goal.reward_amount_cents,
            },
        )
        return model.to_dto()

    def update_goal(
        self,
        goal_id: UUID,
        changes: dict[str, Any],
        caller: CallerContext | None = None,
    ) -> SectorGoal:
        """
        Apply ``changes`` to a goal after validating the merged definition.

        Raises:
            GoalNotFoundError: Unknown goal.
            GoalValidationError: Unknown field, or the result is invalid.
            SectorAccessDeniedError: Caller may not manage the goal's sector.
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise GoalValidationError(
                ", ".join(sorted(unknown)), "field cannot be updated"
            )

        model = self._load(goal_id)
        if caller is not None:
            ensure_can_manage_sector(caller, model.sector_id)

        current = model.to_dto()
        merged = {
            "goal_type": changes.get("type", current.type),
            "target_value": changes.get("target_value", current.target_value),
            "reward_amount_cents": changes.get(
                "reward_amount_cents", current.reward_amount_cents
            ),
            "checklist_items": tuple(
                changes.get("checklist_items", current.checklist_items)
            ),
            "scope": changes.get("scope", current.scope),
            "assigned_collaborator_id": changes.get(
                "assigned_collaborator_id", current.assigned_collaborator_id
            ),
            "title": changes.get("title", current.title),
        }
        self._validate(**merged)
        if "period" in changes:
            try:
                GoalPeriod(changes["period"])
            except ValueError:
                raise GoalValidationError(
                    "period", f"unknown period {changes['period']!r}"
                ) from None

        for name, value in changes.items():
            if isinstance(value, (GoalType, GoalPeriod, GoalScope)):
                value = value.value
            elif name == "checklist_items":
                value = [item.strip() for item in value]
            elif name == "target_value":
                value = Decimal(str(value))
            setattr(model, name, value)
        if GoalType(model.type) in (GoalType.BOOLEAN_CHECKLIST, GoalType.TASK_COMPLETION):
            model.target_value = Decimal("1")
        if GoalScope(model.scope) is GoalScope.SECTOR:
            model.assigned_collaborator_id = None
        model.touch(self._clock.now())
        self.session.flush()

        logger.info(
            "goal_updated",
            extra={
                "goal_id": str(goal_id),
                "sector_id": model.sector_id,
                "changed_fields": sorted(changes),
            },
        )
        return model.to_dto()

    def set_active(
        self,
        goal_id: UUID,
        is_active: bool,
        caller: CallerContext | None = None,
    ) -> SectorGoal:
        """Activate or deactivate a goal.  Inactive goals earn nothing."""
        model = self._load(goal_id)
        if caller is not None:
            ensure_can_manage_sector(caller, model.sector_id)

        model.is_active = is_active
        model.touch(self._clock.now())
        self.session.flush()

        logger.info(
            "goal_activated" if is_active else "goal_deactivated",
            extra={"goal_id": str(goal_id), "sector_id": model.sector_id},
        )
        return model.to_dto()
