"""
Module: rewards_kernel.models.contestation
Responsibility: ORM persistence for contestations.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - DB check constraint limits ``status`` and ``reason_code`` values;
      the service layer enforces transition rules.
    - Several contestations may reference the same (goal, submission)
      pair; the covering index serves the pending-pair lookup.

Failure modes:
    - IntegrityError on an invalid status or reason code.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewards_kernel.db.base import Base, UUIDString

if TYPE_CHECKING:
    from rewards_kernel.domain.contestation import Contestation


class ContestationModel(Base):
    """Persistent contestation.

    Contract:
        ``status`` moves pending -> resolved | dismissed exactly once.
        ``response`` and ``resolved_at`` are written by that transition.
    """

    __tablename__ = "contestations"

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'resolved', 'dismissed')",
            name="ck_contestations_valid_status",
        ),
        CheckConstraint(
            "reason_code IN ('not_done', 'incorrect_way', 'incomplete', "
            "'poor_quality', 'missing_proof', 'other')",
            name="ck_contestations_valid_reason_code",
        ),
        Index("ix_contestations_pair_status", "goal_id", "submission_id", "status"),
        Index("ix_contestations_collaborator_status", "collaborator_id", "status"),
        Index("ix_contestations_manager", "manager_id", "created_at"),
    )

    goal_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sector_goals.id"), nullable=False,
    )
    submission_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("submissions.id"), nullable=False,
    )
    collaborator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    manager_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reason_code: Mapped[str] = mapped_column(String(30), nullable=False, default="other")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Contestation {self.id} goal={self.goal_id} "
            f"submission={self.submission_id} status={self.status}>"
        )

    def to_dto(self) -> Contestation:
        """Convert ORM model to frozen domain DTO."""
        from rewards_kernel.domain.contestation import (
            Contestation,
            ContestationReason,
            ContestationStatus,
        )

        return Contestation(
            id=self.id,
            goal_id=self.goal_id,
            submission_id=self.submission_id,
            collaborator_id=self.collaborator_id,
            manager_id=self.manager_id,
            reason=self.reason,
            reason_code=ContestationReason(self.reason_code),
            status=ContestationStatus(self.status),
            response=self.response,
            created_at=self.created_at,
            resolved_at=self.resolved_at,
        )

    @classmethod
    def from_dto(cls, dto: Contestation) -> ContestationModel:
        """Create ORM model from domain DTO."""
        return cls(
            id=dto.id,
            goal_id=dto.goal_id,
            submission_id=dto.submission_id,
            collaborator_id=dto.collaborator_id,
            manager_id=dto.manager_id,
            reason=dto.reason,
            reason_code=dto.reason_code.value,
            status=dto.status.value,
            response=dto.response,
            created_at=dto.created_at,
            resolved_at=dto.resolved_at,
        )
