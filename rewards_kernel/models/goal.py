"""
Module: rewards_kernel.models.goal
Responsibility: ORM persistence for sector goals.

Architecture position: Kernel > Models.  May import from db/base.py only
    (domain types are imported lazily for DTO conversion).

Invariants enforced:
    - DB check constraints limit ``type``, ``period`` and ``scope`` to their
      enum values and ``reward_amount_cents`` to [0, 99999999].
    - Goals are never deleted; deactivation flips ``is_active``.

Failure modes:
    - IntegrityError on a check constraint violation.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewards_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from rewards_kernel.domain.goals import SectorGoal


class SectorGoalModel(TrackedBase):
    """Persistent goal definition.

    Contract:
        Rows are mutated only through GoalService, which validates the
        definition first.  Submissions keep their own snapshot of the
        fields that decide completion and reward.
    """

    __tablename__ = "sector_goals"

    __table_args__ = (
        CheckConstraint(
            "type IN ('numeric', 'boolean_checklist', 'task_completion', 'percentage')",
            name="ck_sector_goals_valid_type",
        ),
        CheckConstraint(
            "period IN ('daily', 'weekly', 'monthly', 'quarterly', 'yearly')",
            name="ck_sector_goals_valid_period",
        ),
        CheckConstraint(
            "scope IN ('sector', 'individual')",
            name="ck_sector_goals_valid_scope",
        ),
        CheckConstraint(
            "reward_amount_cents >= 0 AND reward_amount_cents <= 99999999",
            name="ck_sector_goals_reward_bounds",
        ),
        Index("ix_sector_goals_sector_active", "sector_id", "is_active"),
        Index("ix_sector_goals_assignee", "assigned_collaborator_id"),
    )

    sector_id: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    target_value: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    checklist_items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    reward_amount_cents: Mapped[int] = mapped_column(nullable=False, default=0)
    scope: Mapped[str] = mapped_column(String(20), nullable=False, default="sector")
    assigned_collaborator_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    require_proof: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<SectorGoal {self.id} {self.sector_id}/{self.type} '{self.title}'>"

    def to_dto(self) -> SectorGoal:
        """Convert ORM model to frozen domain DTO."""
        from rewards_kernel.domain.goals import (
            GoalPeriod,
            GoalScope,
            GoalType,
            SectorGoal,
        )

        return SectorGoal(
            id=self.id,
            sector_id=self.sector_id,
            type=GoalType(self.type),
            title=self.title,
            target_value=Decimal(str(self.target_value)),
            period=GoalPeriod(self.period),
            reward_amount_cents=int(self.reward_amount_cents),
            checklist_items=tuple(self.checklist_items or ()),
            is_active=bool(self.is_active),
            scope=GoalScope(self.scope),
            assigned_collaborator_id=self.assigned_collaborator_id,
            description=self.description or "",
            unit=self.unit or "",
            category=self.category or "",
            require_proof=bool(self.require_proof),
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: SectorGoal, created_by: str | None = None) -> SectorGoalModel:
        """Create ORM model from domain DTO."""
        model = cls(
            id=dto.id,
            sector_id=dto.sector_id,
            type=dto.type.value,
            title=dto.title,
            description=dto.description,
            target_value=dto.target_value,
            unit=dto.unit,
            category=dto.category,
            period=dto.period.value,
            checklist_items=list(dto.checklist_items),
            reward_amount_cents=dto.reward_amount_cents,
            scope=dto.scope.value,
            assigned_collaborator_id=dto.assigned_collaborator_id,
            require_proof=dto.require_proof,
            is_active=dto.is_active,
            created_by=created_by,
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def touch(self, when: datetime) -> None:
        self.updated_at = when
