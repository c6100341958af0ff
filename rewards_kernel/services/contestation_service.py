"""
ContestationLedger -- contestation lifecycle and lookups.

Responsibility:
    Creates contestations, moves them through the lifecycle
    (PENDING -> RESOLVED | DISMISSED), and answers the lookups the reward
    engine and the dashboards need.

Architecture position:
    Kernel > Services -- imperative shell.  The reward engine receives the
    contestations of the submissions it evaluates from
    ``list_for_submissions``.

Invariants enforced:
    - ``CONTESTATION_TRANSITIONS`` is the only source of valid transitions;
      terminal contestations never change again.
    - A new contestation references an existing goal and an existing
      submission of the named collaborator.
    - ``created_at`` and ``resolved_at`` come from the injected clock.
    - Flush-only: never commits.

Failure modes:
    - ContestationValidationError: blank or unknown reason, reason too
      long, missing response when one is required, collaborator mismatch.
    - GoalNotFoundError / SubmissionNotFoundError on create.
    - ContestationNotFoundError on resolve/dismiss/get.
    - ContestationAlreadyClosedError on resolve/dismiss of a closed one.
    - SectorAccessDeniedError when the caller may not manage the sector.

Audit relevance:
    Creation and closing are logged with goal, submission, collaborator and
    manager ids so a withheld or forfeited reward can be traced back to the
    contestation that caused it.
"""

from typing import Iterable
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from rewards_kernel.domain.access import CallerContext, ensure_can_manage_sector
from rewards_kernel.domain.clock import Clock
from rewards_kernel.domain.contestation import (
    Contestation,
    ContestationReason,
    ContestationStatus,
    check_transition,
    resolve_reason,
)
from rewards_kernel.exceptions import (
    ContestationNotFoundError,
    ContestationValidationError,
    GoalNotFoundError,
    SubmissionNotFoundError,
)
from rewards_kernel.logging_config import LogContext, get_logger
from rewards_kernel.models.contestation import ContestationModel
from rewards_kernel.models.goal import SectorGoalModel
from rewards_kernel.models.submission import SubmissionModel
from rewards_kernel.services.base import BaseService

logger = get_logger("services.contestation")

DEFAULT_MAX_REASON_LENGTH = 1000


class ContestationLedger(BaseService[ContestationModel]):
    """
    Contestation persistence.

    Contract:
        Every public method returns frozen ``Contestation`` DTOs.  List
        methods return newest first.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        require_response: bool = False,
        max_reason_length: int = DEFAULT_MAX_REASON_LENGTH,
    ):
        super().__init__(session, clock)
        self._require_response = require_response
        self._max_reason_length = max_reason_length

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(
        self,
        goal_id: UUID,
        submission_id: UUID,
        collaborator_id: str,
        manager_id: str,
        reason: str | None = None,
        reason_code: ContestationReason | str = ContestationReason.OTHER,
        caller: CallerContext | None = None,
    ) -> Contestation:
        """
        Open a PENDING contestation of one goal within one submission.

        For a predefined ``reason_code`` the stored reason is its label,
        followed by ``reason`` when one is given; for ``OTHER`` it is
        ``reason`` alone, which must not be blank.

        Raises:
            ContestationValidationError: Reason or references invalid.
            GoalNotFoundError: Unknown goal.
            SubmissionNotFoundError: Unknown submission.
        """
        text = resolve_reason(reason_code, reason)
        if len(text) > self._max_reason_length:
            raise ContestationValidationError(
                "reason", f"longer than {self._max_reason_length} characters"
            )
        if not manager_id:
            raise ContestationValidationError("manager_id", "must not be empty")

        if self.session.get(SectorGoalModel, goal_id) is None:
            raise GoalNotFoundError(str(goal_id))
        submission = self.session.get(SubmissionModel, submission_id)
        if submission is None:
            raise SubmissionNotFoundError(str(submission_id))
        if submission.collaborator_ref != collaborator_id:
            raise ContestationValidationError(
                "collaborator_id", "does not match the submission's collaborator"
            )
        if caller is not None:
            ensure_can_manage_sector(caller, submission.sector_id)

        contestation = Contestation(
            id=uuid4(),
            goal_id=goal_id,
            submission_id=submission_id,
            collaborator_id=collaborator_id,
            manager_id=manager_id,
            reason=text,
            reason_code=ContestationReason(reason_code),
            status=ContestationStatus.PENDING,
            created_at=self._clock.now(),
        )
        model = ContestationModel.from_dto(contestation)
        self.session.add(model)
        self.session.flush()

        with LogContext.bind(
            contestation_id=contestation.id,
            collaborator_id=collaborator_id,
            goal_id=goal_id,
            submission_id=submission_id,
        ):
            logger.info(
                "contestation_created",
                extra={
                    "manager_id": manager_id,
                    "reason_code": contestation.reason_code.value,
                },
            )
        return model.to_dto()

    def resolve(
        self,
        contestation_id: UUID,
        manager_id: str,
        response: str | None = None,
        caller: CallerContext | None = None,
    ) -> Contestation:
        """PENDING -> RESOLVED: the dispute is upheld and the reward forfeited."""
        return self._close(
            contestation_id, ContestationStatus.RESOLVED, manager_id, response, caller
        )

    def dismiss(
        self,
        contestation_id: UUID,
        manager_id: str,
        response: str | None = None,
        caller: CallerContext | None = None,
    ) -> Contestation:
        """PENDING -> DISMISSED: the dispute is rejected and the reward released."""
        return self._close(
            contestation_id, ContestationStatus.DISMISSED, manager_id, response, caller
        )

    def _close(
        self,
        contestation_id: UUID,
        target: ContestationStatus,
        manager_id: str,
        response: str | None,
        caller: CallerContext | None,
    ) -> Contestation:
        model = self.session.execute(
            select(ContestationModel)
            .where(ContestationModel.id == contestation_id)
            .with_for_update()
        ).scalar_one_or_none()
        if model is None:
            raise ContestationNotFoundError(str(contestation_id))

        check_transition(contestation_id, model.status, target)

        response = (response or "").strip() or None
        if self._require_response and response is None:
            raise ContestationValidationError("response", "a response is required")

        if caller is not None:
            submission = self.session.get(SubmissionModel, model.submission_id)
            if submission is not None:
                ensure_can_manage_sector(caller, submission.sector_id)

        from_status = model.status
        model.status = target.value
        model.response = response
        model.resolved_at = self._clock.now()
        self.session.flush()

        with LogContext.bind(
            contestation_id=contestation_id,
            goal_id=model.goal_id,
            submission_id=model.submission_id,
        ):
            logger.info(
                f"contestation_{target.value}",
                extra={
                    "manager_id": manager_id,
                    "from_status": from_status,
                    "to_status": target.value,
                },
            )
        return model.to_dto()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, contestation_id: UUID) -> Contestation:
        model = self.session.get(ContestationModel, contestation_id)
        if model is None:
            raise ContestationNotFoundError(str(contestation_id))
        return model.to_dto()

    def find_pending_for(
        self, goal_id: UUID, submission_id: UUID
    ) -> Contestation | None:
        """Most recent PENDING contestation of the pair, if any."""
        model = self.session.execute(
            select(ContestationModel)
            .where(
                ContestationModel.goal_id == goal_id,
                ContestationModel.submission_id == submission_id,
                ContestationModel.status == ContestationStatus.PENDING.value,
            )
            .order_by(ContestationModel.created_at.desc(), ContestationModel.id)
            .limit(1)
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def is_contested(self, goal_id: UUID, submission_id: UUID) -> bool:
        return self.find_pending_for(goal_id, submission_id) is not None

    def list_pending_for(self, collaborator_id: str) -> list[Contestation]:
        return self.list_for_collaborator(collaborator_id, ContestationStatus.PENDING)

    def list_for_collaborator(
        self,
        collaborator_id: str,
        status: ContestationStatus | None = None,
    ) -> list[Contestation]:
        stmt = select(ContestationModel).where(
            ContestationModel.collaborator_id == collaborator_id
        )
        if status is not None:
            stmt = stmt.where(ContestationModel.status == ContestationStatus(status).value)
        return self._list(stmt)

    def list_for_manager(
        self,
        manager_id: str,
        status: ContestationStatus | None = None,
    ) -> list[Contestation]:
        stmt = select(ContestationModel).where(ContestationModel.manager_id == manager_id)
        if status is not None:
            stmt = stmt.where(ContestationModel.status == ContestationStatus(status).value)
        return self._list(stmt)

    def list_for_submissions(self, submission_ids: Iterable[UUID]) -> list[Contestation]:
        """Every contestation, in any status, of the given submissions."""
        ids = list(submission_ids)
        if not ids:
            return []
        return self._list(
            select(ContestationModel).where(ContestationModel.submission_id.in_(ids))
        )

    def _list(self, stmt) -> list[Contestation]:
        rows = self.session.execute(
            stmt.order_by(ContestationModel.created_at.desc(), ContestationModel.id)
        ).scalars().all()
        return [row.to_dto() for row in rows]
