"""
Module: rewards_kernel.selectors.submission_selector
Responsibility: Read access to submissions.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Visibility follows the caller's role: a collaborator reads only their
      own submissions, a manager those of their sector, an admin all.
    - Results are ordered by (submission_date, created_at, id), the same
      order the reward engine uses to pick a period's latest submission.

Failure modes:
    - SubmissionNotFoundError from ``get_submission``.
    - CatalogNotConfiguredError when the ``submissions`` table is missing.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select

from rewards_kernel.domain.access import CallerContext, Role, ensure_collaborator_access
from rewards_kernel.domain.submissions import Submission
from rewards_kernel.exceptions import SubmissionNotFoundError
from rewards_kernel.models.submission import SubmissionModel
from rewards_kernel.selectors.base import BaseSelector


class SubmissionLedger(BaseSelector[SubmissionModel]):
    """Read-only submission queries."""

    collection = "submissions"

    _ORDER = (
        SubmissionModel.submission_date,
        SubmissionModel.created_at,
        SubmissionModel.id,
    )

    def _fetch(self, *criteria, start: date | None, end: date | None) -> list[Submission]:
        stmt = select(SubmissionModel).where(*criteria)
        if start is not None:
            stmt = stmt.where(SubmissionModel.submission_date >= start)
        if end is not None:
            stmt = stmt.where(SubmissionModel.submission_date <= end)
        with self._reading():
            rows = self.session.execute(stmt.order_by(*self._ORDER)).scalars().all()
        return [row.to_dto() for row in rows]

    def list_for_collaborator(
        self,
        collaborator_id: str,
        start: date | None = None,
        end: date | None = None,
        caller: CallerContext | None = None,
        collaborator_sector_id: str | None = None,
    ) -> list[Submission]:
        """One collaborator's submissions, optionally within [start, end]."""
        if caller is not None:
            ensure_collaborator_access(caller, collaborator_id, collaborator_sector_id)
        return self._fetch(
            SubmissionModel.collaborator_ref == collaborator_id, start=start, end=end
        )

    def list_for_sector(
        self,
        sector_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Submission]:
        return self._fetch(SubmissionModel.sector_id == sector_id, start=start, end=end)

    def list_visible_to(
        self,
        caller: CallerContext,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Submission]:
        """Everything the caller may read."""
        if caller.role is Role.ADMIN:
            return self._fetch(start=start, end=end)
        if caller.role is Role.MANAGER and caller.sector_id is not None:
            return self.list_for_sector(caller.sector_id, start, end)
        return self.list_for_collaborator(caller.profile_id, start, end)

    def get_submission(self, submission_id: UUID) -> Submission:
        """
        Raises:
            SubmissionNotFoundError: No submission with that id.
        """
        with self._reading():
            row = self.session.get(SubmissionModel, submission_id)
        if row is None:
            raise SubmissionNotFoundError(str(submission_id))
        return row.to_dto()

    def has_submission_on(self, collaborator_id: str, day: date) -> bool:
        """Whether the collaborator already submitted on ``day``."""
        with self._reading():
            found = self.session.execute(
                select(SubmissionModel.id).where(
                    SubmissionModel.collaborator_ref == collaborator_id,
                    SubmissionModel.submission_date == day,
                )
            ).first()
        return found is not None
