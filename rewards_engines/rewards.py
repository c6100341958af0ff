"""
Module: rewards_engines.rewards
Responsibility:
    Compute what a collaborator has earned for their goals over a date
    window: bucket submissions into period instances, evaluate the
    representative submission of each bucket, convert completion into
    cents, and withhold or forfeit amounts under contestation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Callers (services, dashboards) load goals, submissions and
    contestations and pass them in; the engine never touches a session.

Invariants enforced:
    - Stateless and idempotent: the same inputs always give the same
      ``RewardStats``, and input order does not matter.
    - One reward per (goal, period bucket).  DAILY buckets hold one day;
      longer periods keep only their most recent submission (latest value,
      not cumulative).
    - A submission is evaluated against the goal snapshot it carries, so
      editing a goal never rewrites past rewards.
    - All money is integer cents; ``earned = round_half_up(ratio * reward)``.
    - PENDING contestation on the representative pair -> BLOCKED.
      RESOLVED -> FORFEITED.  DISMISSED or none -> PAYABLE.
    - total_earned counts PAYABLE rewards only.

Failure modes:
    - No collaborator id, no goals, no submissions, or an empty window
      produce a zero result.  The engine does not raise on data.

Audit relevance:
    Every call emits REWARD_ENGINE_TRACE with a fingerprint of the
    collaborator and window, so a displayed total can be tied back to the
    engine version that produced it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from rewards_engines.completion import answers_goal, completion_ratio
from rewards_engines.tracer import traced_engine
from rewards_kernel.domain.contestation import Contestation, ContestationStatus
from rewards_kernel.domain.currency import (
    format_currency,
    round_ratio_to_cents,
    sum_cents,
    to_decimal,
)
from rewards_kernel.domain.goals import SectorGoal
from rewards_kernel.domain.periods import (
    DEFAULT_WEEK_START,
    GoalPeriod,
    PeriodBucket,
    bucket_for,
    month_window,
)
from rewards_kernel.domain.submissions import Submission

ENGINE_NAME = "rewards"
ENGINE_VERSION = "1.0"


class RewardStatus(str, Enum):
    PAYABLE = "payable"
    BLOCKED = "blocked"
    FORFEITED = "forfeited"


@dataclass(frozen=True)
class GoalReward:
    """Reward of one goal for one period bucket."""

    goal_id: UUID
    period: GoalPeriod
    period_key: str
    period_start: date
    period_end: date
    submission_id: UUID
    submission_date: date
    completion_ratio: Decimal
    earned_amount: int
    status: RewardStatus = RewardStatus.PAYABLE
    contestation_ids: tuple[UUID, ...] = ()

    @property
    def blocked(self) -> bool:
        return self.status is RewardStatus.BLOCKED

    @property
    def blocked_amount(self) -> int:
        return self.earned_amount if self.status is RewardStatus.BLOCKED else 0

    @property
    def payable_amount(self) -> int:
        return self.earned_amount if self.status is RewardStatus.PAYABLE else 0


@dataclass(frozen=True)
class RewardStats:
    """Rewards of one collaborator over ``[window_start, window_end]``."""

    collaborator_id: str
    window_start: date
    window_end: date
    rewards: tuple[GoalReward, ...] = ()
    total_earned: int = 0
    total_blocked: int = 0
    total_forfeited: int = 0

    @classmethod
    def empty(cls, collaborator_id: str, window_start: date, window_end: date) -> RewardStats:
        return cls(collaborator_id or "", window_start, window_end)

    @classmethod
    def from_rewards(
        cls,
        collaborator_id: str,
        window_start: date,
        window_end: date,
        rewards: Iterable[GoalReward],
    ) -> RewardStats:
        rewards = tuple(rewards)
        return cls(
            collaborator_id=collaborator_id,
            window_start=window_start,
            window_end=window_end,
            rewards=rewards,
            total_earned=sum_cents(r.payable_amount for r in rewards),
            total_blocked=sum_cents(r.blocked_amount for r in rewards),
            total_forfeited=sum_cents(
                r.earned_amount for r in rewards if r.status is RewardStatus.FORFEITED
            ),
        )

    @property
    def total_earned_amount(self) -> Decimal:
        return to_decimal(self.total_earned)

    @property
    def total_blocked_amount(self) -> Decimal:
        return to_decimal(self.total_blocked)

    @property
    def total_earned_display(self) -> str:
        return format_currency(self.total_earned, from_cents=True)

    @property
    def total_blocked_display(self) -> str:
        return format_currency(self.total_blocked, from_cents=True)

    def for_goal(self, goal_id: UUID | str) -> tuple[GoalReward, ...]:
        return tuple(r for r in self.rewards if str(r.goal_id) == str(goal_id))


@dataclass(frozen=True)
class RewardSummary:
    """Dashboard figures as of one day, all in cents."""

    collaborator_id: str
    reference_date: date
    earned_this_month: int
    earned_this_week: int
    earned_today: int
    blocked_this_month: int
    available_rewards: int

    @property
    def available_rewards_display(self) -> str:
        return format_currency(self.available_rewards, from_cents=True)


class RewardEngine:
    """
    Reward calculation over plain domain objects.

    Contract:
        ``compute_stats`` must be called with keyword arguments; the trace
        fingerprint reads them by name.
    """

    def __init__(
        self,
        week_start: int = DEFAULT_WEEK_START,
        use_goal_snapshots: bool = True,
    ):
        if not 0 <= week_start <= 6:
            raise ValueError(f"week_start must be a weekday 0..6, got {week_start}")
        self.week_start = week_start
        self.use_goal_snapshots = use_goal_snapshots

    @traced_engine(
        ENGINE_NAME,
        ENGINE_VERSION,
        fingerprint_fields=("collaborator_id", "window_start", "window_end"),
    )
    def compute_stats(
        self,
        *,
        collaborator_id: str,
        goals: Sequence[SectorGoal],
        submissions: Sequence[Submission],
        contestations: Sequence[Contestation] = (),
        window_start: date,
        window_end: date,
    ) -> RewardStats:
        """Rewards whose representative submission falls in the window."""
        if not collaborator_id or not goals or not submissions or window_start > window_end:
            return RewardStats.empty(collaborator_id, window_start, window_end)

        own = sorted(
            (s for s in submissions if s.collaborator_ref == collaborator_id),
            key=lambda s: s.sort_key,
        )
        pending, resolved = _index_contestations(contestations)

        rewards: list[GoalReward] = []
        for goal in sorted(goals, key=lambda g: str(g.id)):
            if not goal.is_active or not goal.applies_to(collaborator_id):
                continue
            for bucket, submission in self._representatives(goal, own):
                if not window_start <= submission.submission_date <= window_end:
                    continue
                rewards.append(
                    self._reward_for(goal, bucket, submission, pending, resolved)
                )

        rewards.sort(key=lambda r: (r.period_start, str(r.goal_id), r.period_key))
        return RewardStats.from_rewards(collaborator_id, window_start, window_end, rewards)

    def monthly_earnings(
        self,
        *,
        collaborator_id: str,
        goals: Sequence[SectorGoal],
        submissions: Sequence[Submission],
        contestations: Sequence[Contestation] = (),
        year: int,
        month: int,
    ) -> RewardStats:
        start, end = month_window(year, month)
        return self.compute_stats(
            collaborator_id=collaborator_id,
            goals=goals,
            submissions=submissions,
            contestations=contestations,
            window_start=start,
            window_end=end,
        )

    def summarize(
        self,
        *,
        collaborator_id: str,
        goals: Sequence[SectorGoal],
        submissions: Sequence[Submission],
        contestations: Sequence[Contestation] = (),
        reference_date: date,
    ) -> RewardSummary:
        """
        Month, week and today figures as of ``reference_date``.

        Submissions after ``reference_date`` are ignored.  Today counts
        DAILY goals only.  ``available_rewards`` is the sum of the full
        reward of every active goal with a positive reward that applies to
        the collaborator.
        """
        known = [s for s in submissions if s.submission_date <= reference_date]

        month_start, month_end = month_window(reference_date.year, reference_date.month)
        month = self.compute_stats(
            collaborator_id=collaborator_id,
            goals=goals,
            submissions=known,
            contestations=contestations,
            window_start=month_start,
            window_end=month_end,
        )
        week_bucket = bucket_for(GoalPeriod.WEEKLY, reference_date, self.week_start)
        week = self.compute_stats(
            collaborator_id=collaborator_id,
            goals=goals,
            submissions=known,
            contestations=contestations,
            window_start=week_bucket.start,
            window_end=week_bucket.end,
        )
        today = sum_cents(
            r.payable_amount
            for r in month.rewards
            if r.period is GoalPeriod.DAILY and r.submission_date == reference_date
        )
        available = sum_cents(
            goal.reward_amount_cents
            for goal in goals
            if goal.is_active
            and goal.reward_amount_cents > 0
            and bool(collaborator_id)
            and goal.applies_to(collaborator_id)
        )
        return RewardSummary(
            collaborator_id=collaborator_id or "",
            reference_date=reference_date,
            earned_this_month=month.total_earned,
            earned_this_week=week.total_earned,
            earned_today=today,
            blocked_this_month=month.total_blocked,
            available_rewards=available,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _effective_goal(self, goal: SectorGoal, submission: Submission) -> SectorGoal:
        if self.use_goal_snapshots:
            snapshot = submission.snapshot_for(goal.id)
            if snapshot is not None:
                return goal.with_snapshot(snapshot)
        return goal

    def _representatives(
        self, goal: SectorGoal, ordered: Sequence[Submission]
    ) -> list[tuple[PeriodBucket, Submission]]:
        """Latest answering submission per bucket.  ``ordered`` is ascending."""
        latest: dict[str, tuple[PeriodBucket, Submission]] = {}
        for submission in ordered:
            if not answers_goal(goal, submission):
                continue
            effective = self._effective_goal(goal, submission)
            bucket = bucket_for(effective.period, submission.submission_date, self.week_start)
            latest[bucket.key] = (bucket, submission)
        return list(latest.values())

    def _reward_for(
        self,
        goal: SectorGoal,
        bucket: PeriodBucket,
        submission: Submission,
        pending: dict[tuple[str, str], list[UUID]],
        resolved: dict[tuple[str, str], list[UUID]],
    ) -> GoalReward:
        effective = self._effective_goal(goal, submission)
        ratio = completion_ratio(effective, submission)
        earned = round_ratio_to_cents(ratio, effective.reward_amount_cents)

        pair = (str(goal.id), str(submission.id))
        if pair in pending:
            status, ids = RewardStatus.BLOCKED, pending[pair]
        elif pair in resolved:
            status, ids = RewardStatus.FORFEITED, resolved[pair]
        else:
            status, ids = RewardStatus.PAYABLE, []

        return GoalReward(
            goal_id=goal.id,
            period=bucket.period,
            period_key=bucket.key,
            period_start=bucket.start,
            period_end=bucket.end,
            submission_id=submission.id,
            submission_date=submission.submission_date,
            completion_ratio=ratio,
            earned_amount=earned,
            status=status,
            contestation_ids=tuple(sorted(ids, key=str)),
        )


def _index_contestations(
    contestations: Iterable[Contestation],
) -> tuple[dict[tuple[str, str], list[UUID]], dict[tuple[str, str], list[UUID]]]:
    pending: dict[tuple[str, str], list[UUID]] = {}
    resolved: dict[tuple[str, str], list[UUID]] = {}
    for contestation in contestations:
        if contestation.status is ContestationStatus.PENDING:
            pending.setdefault(contestation.pair, []).append(contestation.id)
        elif contestation.status is ContestationStatus.RESOLVED:
            resolved.setdefault(contestation.pair, []).append(contestation.id)
    return pending, resolved
