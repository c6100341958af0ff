"""
Module: rewards_kernel.selectors.goal_selector
Responsibility: Read access to the goal catalog.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Inactive goals are never returned by ``list_active_goals``.
    - A collaborator sees sector-scope goals of their sector plus the
      individual goals assigned to them, never another collaborator's.

Failure modes:
    - GoalNotFoundError from ``get_goal``.
    - CatalogNotConfiguredError when the ``sector_goals`` table is missing.
    - SectorAccessDeniedError when the caller is outside the requested scope.
"""

from uuid import UUID

from sqlalchemy import and_, or_, select

from rewards_kernel.domain.access import (
    CallerContext,
    Role,
    ensure_collaborator_access,
    ensure_sector_access,
)
from rewards_kernel.domain.goals import GoalScope, SectorGoal
from rewards_kernel.exceptions import GoalNotFoundError, SectorAccessDeniedError
from rewards_kernel.logging_config import get_logger
from rewards_kernel.models.goal import SectorGoalModel
from rewards_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.goal")


class GoalCatalog(BaseSelector[SectorGoalModel]):
    """
    Read-only goal queries.

    All list methods return goals ordered by creation time, then id.
    When a ``caller`` is passed, its scope is checked before querying.
    """

    collection = "sector_goals"

    _ORDER = (SectorGoalModel.created_at, SectorGoalModel.id)

    def list_active_goals(
        self,
        sector_id: str,
        collaborator_id: str | None = None,
        caller: CallerContext | None = None,
    ) -> list[SectorGoal]:
        """
        Active goals of a sector.

        With ``collaborator_id``: the sector-scope goals plus the individual
        goals assigned to that collaborator.  Without it: every active goal
        of the sector (manager view).  A collaborator caller is always
        narrowed to their own id.
        """
        if caller is not None:
            ensure_sector_access(caller, sector_id)
            if caller.role is Role.COLLABORATOR:
                if collaborator_id not in (None, caller.profile_id):
                    raise SectorAccessDeniedError(
                        caller.role.value, f"goals of collaborator {collaborator_id}"
                    )
                collaborator_id = caller.profile_id

        stmt = select(SectorGoalModel).where(
            SectorGoalModel.sector_id == sector_id,
            SectorGoalModel.is_active.is_(True),
        )
        if collaborator_id is not None:
            stmt = stmt.where(
                or_(
                    SectorGoalModel.scope == GoalScope.SECTOR.value,
                    and_(
                        SectorGoalModel.scope == GoalScope.INDIVIDUAL.value,
                        SectorGoalModel.assigned_collaborator_id == collaborator_id,
                    ),
                )
            )

        with self._reading():
            rows = self.session.execute(stmt.order_by(*self._ORDER)).scalars().all()

        logger.debug(
            "active_goals_listed",
            extra={
                "sector_id": sector_id,
                "collaborator_id": collaborator_id,
                "count": len(rows),
            },
        )
        return [row.to_dto() for row in rows]

    def list_goals(
        self,
        sector_id: str,
        include_inactive: bool = True,
        caller: CallerContext | None = None,
    ) -> list[SectorGoal]:
        """All goals of a sector, for the goal management screen."""
        if caller is not None:
            ensure_sector_access(caller, sector_id)

        stmt = select(SectorGoalModel).where(SectorGoalModel.sector_id == sector_id)
        if not include_inactive:
            stmt = stmt.where(SectorGoalModel.is_active.is_(True))

        with self._reading():
            rows = self.session.execute(stmt.order_by(*self._ORDER)).scalars().all()
        return [row.to_dto() for row in rows]

    def list_individual_goals(
        self,
        collaborator_id: str,
        caller: CallerContext | None = None,
        collaborator_sector_id: str | None = None,
    ) -> list[SectorGoal]:
        """Individual goals assigned to one collaborator, active or not."""
        if caller is not None:
            ensure_collaborator_access(caller, collaborator_id, collaborator_sector_id)

        stmt = select(SectorGoalModel).where(
            SectorGoalModel.scope == GoalScope.INDIVIDUAL.value,
            SectorGoalModel.assigned_collaborator_id == collaborator_id,
        )
        with self._reading():
            rows = self.session.execute(stmt.order_by(*self._ORDER)).scalars().all()
        return [row.to_dto() for row in rows]

    def get_goal(self, goal_id: UUID) -> SectorGoal:
        """
        Raises:
            GoalNotFoundError: No goal with that id.
        """
        with self._reading():
            row = self.session.get(SectorGoalModel, goal_id)
        if row is None:
            raise GoalNotFoundError(str(goal_id))
        return row.to_dto()

    def get_goals(self, goal_ids: list[UUID]) -> dict[str, SectorGoal]:
        """Goals by id (as string); unknown ids are absent from the result."""
        if not goal_ids:
            return {}
        with self._reading():
            rows = self.session.execute(
                select(SectorGoalModel).where(SectorGoalModel.id.in_(goal_ids))
            ).scalars().all()
        return {str(row.id): row.to_dto() for row in rows}
