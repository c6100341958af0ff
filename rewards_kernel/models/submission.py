"""
Module: rewards_kernel.models.submission
Responsibility: ORM persistence for daily checklist submissions.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - UNIQUE(collaborator_ref, submission_date): at most one submission per
      collaborator per calendar day.  This constraint, not a prior read, is
      what rejects the second submission.
    - Append-only: no service updates or deletes a submission row.

Failure modes:
    - IntegrityError on a second submission for the same day.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Date, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rewards_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from rewards_kernel.domain.submissions import Submission


class SubmissionModel(TrackedBase):
    """Persistent submission.

    JSON columns:
        checklist_answers  {"<goal_id>": bool | number, "<goal_id>:<i>": bool}
        proof_file_refs    {"<goal_id>": ["<file id>", ...]}
        goal_snapshots     {"<goal_id>": GoalSnapshot.to_dict()}
    """

    __tablename__ = "submissions"

    __table_args__ = (
        UniqueConstraint(
            "collaborator_ref", "submission_date",
            name="uq_submissions_collaborator_day",
        ),
        Index("ix_submissions_sector_date", "sector_id", "submission_date"),
    )

    collaborator_ref: Mapped[str] = mapped_column(String(64), nullable=False)
    sector_id: Mapped[str] = mapped_column(String(50), nullable=False)
    submission_date: Mapped[date] = mapped_column(Date, nullable=False)
    checklist_answers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    observation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    proof_file_refs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    goal_snapshots: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Submission {self.id} {self.collaborator_ref} {self.submission_date}>"

    def to_dto(self) -> Submission:
        """Convert ORM model to frozen domain DTO."""
        from rewards_kernel.domain.goals import GoalSnapshot
        from rewards_kernel.domain.submissions import Submission

        return Submission(
            id=self.id,
            collaborator_ref=self.collaborator_ref,
            sector_id=self.sector_id,
            submission_date=self.submission_date,
            checklist_answers=dict(self.checklist_answers or {}),
            observation=self.observation or "",
            proof_file_refs={
                goal_id: tuple(refs)
                for goal_id, refs in (self.proof_file_refs or {}).items()
            },
            goal_snapshots={
                goal_id: GoalSnapshot.from_dict(data)
                for goal_id, data in (self.goal_snapshots or {}).items()
            },
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: Submission) -> SubmissionModel:
        """Create ORM model from domain DTO."""
        model = cls(
            id=dto.id,
            collaborator_ref=dto.collaborator_ref,
            sector_id=dto.sector_id,
            submission_date=dto.submission_date,
            checklist_answers=dict(dto.checklist_answers),
            observation=dto.observation,
            proof_file_refs={
                goal_id: list(refs) for goal_id, refs in dto.proof_file_refs.items()
            },
            goal_snapshots={
                goal_id: snapshot.to_dict()
                for goal_id, snapshot in dto.goal_snapshots.items()
            },
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model
