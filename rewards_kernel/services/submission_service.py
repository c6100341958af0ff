"""
SubmissionService -- daily checklist intake.

Responsibility:
    Records a collaborator's checklist for one day: validates the answers,
    uploads proof files, captures a snapshot of every goal the submission
    answers, and inserts the row.

Architecture position:
    Kernel > Services -- imperative shell.  File storage is an external
    collaborator reached through the ``ProofUploader`` protocol.

Invariants enforced:
    - One submission per (collaborator, day).  The store's unique constraint
      decides; the insert runs inside a SAVEPOINT and a constraint
      violation becomes ``DuplicateSubmissionError`` without disturbing
      the caller's transaction.
    - Proof uploads are independent per file.  A failed upload is logged
      and left out; the submission is still created.
    - Each answered goal's snapshot is stored with the submission, so the
      reward engine evaluates it against the definition in force that day.
    - Flush-only: never commits.

Failure modes:
    - SubmissionValidationError on a malformed answer map.
    - DuplicateSubmissionError on a second submission for the same day.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Protocol, Sequence
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewards_kernel.domain.clock import Clock
from rewards_kernel.domain.goals import GoalSnapshot, SectorGoal
from rewards_kernel.domain.submissions import Answer, Submission, parse_submission_date
from rewards_kernel.exceptions import (
    DuplicateSubmissionError,
    SubmissionValidationError,
)
from rewards_kernel.logging_config import LogContext, get_logger
from rewards_kernel.models.submission import SubmissionModel
from rewards_kernel.selectors.goal_selector import GoalCatalog
from rewards_kernel.services.base import BaseService

logger = get_logger("services.submission")


class ProofUploader(Protocol):
    """File storage for proof images.  Returns an opaque file id."""

    def upload(self, goal_id: str, file: Any) -> str:
        ...


def _normalize_answer(key: str, value: Any) -> Answer:
    """JSON-storable form of one answer."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise SubmissionValidationError(key, "answer must be a finite number")
        return value
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise SubmissionValidationError(key, "answer must be a finite number")
        return str(value)
    if isinstance(value, str):
        return value.strip()
    raise SubmissionValidationError(
        key, f"unsupported answer type {type(value).__name__}"
    )


def _answered_goal_ids(answers: Mapping[str, Answer]) -> set[str]:
    return {key.split(":", 1)[0] for key in answers}


class SubmissionService(BaseService[SubmissionModel]):
    """
    Submission intake.

    Contract:
        ``submit`` returns the stored ``Submission`` DTO.  Proof files are
        uploaded before the insert; on a duplicate those uploads are
        orphaned, so callers should check ``SubmissionLedger.has_submission_on``
        before collecting files.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        uploader: ProofUploader | None = None,
    ):
        super().__init__(session, clock)
        self._uploader = uploader

    def submit(
        self,
        collaborator_id: str,
        sector_id: str,
        answers: Mapping[str, Any],
        observation: str = "",
        proof_files: Mapping[str, Sequence[Any]] | None = None,
        submission_date: date | str | None = None,
        goals: Sequence[SectorGoal] | None = None,
    ) -> Submission:
        """
        Record the checklist for one day.

        Args:
            collaborator_id: Submitting collaborator.
            sector_id: Collaborator's sector.
            answers: ``{"<goal_id>": bool | number, "<goal_id>:<i>": bool}``.
            observation: Free-text note.
            proof_files: Files to upload, per goal id.
            submission_date: Defaults to the clock's current day.
            goals: Goals to snapshot.  Defaults to the active goals that
                apply to the collaborator.

        Raises:
            SubmissionValidationError: Malformed answers or date.
            DuplicateSubmissionError: Already submitted that day.
        """
        if not collaborator_id:
            raise SubmissionValidationError("collaborator_id", "must not be empty")

        day = (
            parse_submission_date(submission_date)
            if submission_date is not None
            else self._clock.today()
        )

        normalized: dict[str, Answer] = {}
        for key, value in answers.items():
            if not isinstance(key, str) or not key:
                raise SubmissionValidationError("answers", f"invalid key {key!r}")
            normalized[key] = _normalize_answer(key, value)

        if goals is None:
            goals = GoalCatalog(self.session).list_active_goals(
                sector_id, collaborator_id
            )
        answered = _answered_goal_ids(normalized)
        snapshots: dict[str, GoalSnapshot] = {
            str(goal.id): goal.snapshot()
            for goal in goals
            if str(goal.id) in answered
        }

        submission_id = uuid4()
        with LogContext.bind(
            collaborator_id=collaborator_id, submission_id=str(submission_id)
        ):
            proof_refs = self._upload_proofs(proof_files or {})

            submission = Submission(
                id=submission_id,
                collaborator_ref=collaborator_id,
                sector_id=sector_id,
                submission_date=day,
                checklist_answers=normalized,
                observation=observation.strip(),
                proof_file_refs=proof_refs,
                goal_snapshots=snapshots,
                created_at=self._clock.now(),
            )
            model = SubmissionModel.from_dto(submission)

            try:
                with self.session.begin_nested():
                    self.session.add(model)
                    self.session.flush()
            except IntegrityError as exc:
                logger.warning(
                    "duplicate_submission_rejected",
                    extra={"submission_date": day.isoformat()},
                )
                raise DuplicateSubmissionError(collaborator_id, day.isoformat()) from exc

            logger.info(
                "submission_created",
                extra={
                    "sector_id": sector_id,
                    "submission_date": day.isoformat(),
                    "answer_count": len(normalized),
                    "snapshot_count": len(snapshots),
                    "proof_count": sum(len(refs) for refs in proof_refs.values()),
                },
            )

        return model.to_dto()

    def _upload_proofs(
        self, proof_files: Mapping[str, Sequence[Any]]
    ) -> dict[str, tuple[str, ...]]:
        if not proof_files:
            return {}
        if self._uploader is None:
            raise SubmissionValidationError(
                "proof_files", "no file storage is configured"
            )

        refs: dict[str, tuple[str, ...]] = {}
        for goal_id, files in proof_files.items():
            uploaded: list[str] = []
            for index, file in enumerate(files):
                try:
                    uploaded.append(self._uploader.upload(str(goal_id), file))
                except Exception:
                    logger.warning(
                        "proof_upload_failed",
                        extra={"goal_id": str(goal_id), "file_index": index},
                        exc_info=True,
                    )
            if uploaded:
                refs[str(goal_id)] = tuple(uploaded)
        return refs

