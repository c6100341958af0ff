"""
Periods -- calendar bucketing for goal periods.

Responsibility:
    Maps a calendar day to the period instance (bucket) it belongs to for
    each goal period, and derives the stable string key of that bucket.
    Also provides the period helpers dashboards need: the interval of the
    current period clamped to a goal's creation day, the number of days in
    it, the per-day share of a reward, and the next reset day.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every day belongs to exactly one bucket per period, so submissions are
      bucketed unambiguously.
    - Bucket keys are stable:
        DAILY      2025-07-14
        WEEKLY     2025-07-13/P1W   (week start date + ISO-8601 duration)
        MONTHLY    2025-07
        QUARTERLY  2025-Q3
        YEARLY     2025
    - Weeks start on Sunday unless another ``week_start`` weekday is given
      (Monday=0 .. Sunday=6, as ``date.weekday()``).

Failure modes:
    - ValueError for an unknown period or an out-of-range ``week_start``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

SUNDAY = 6
MONDAY = 0
DEFAULT_WEEK_START = SUNDAY


class GoalPeriod(str, Enum):
    """Recurrence of a goal; one reward is payable per period instance."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class PeriodBucket:
    """One calendar instance of a period, ``start`` and ``end`` inclusive."""

    period: GoalPeriod
    start: date
    end: date
    key: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def _check_week_start(week_start: int) -> None:
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be a weekday 0..6, got {week_start}")


def week_start_of(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    _check_week_start(week_start)
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def month_window(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    return date(year, month, 1), _month_end(year, month)


def bucket_for(
    period: GoalPeriod | str,
    day: date,
    week_start: int = DEFAULT_WEEK_START,
) -> PeriodBucket:
    """Return the bucket of ``period`` that contains ``day``."""
    period = GoalPeriod(period)

    if period is GoalPeriod.DAILY:
        return PeriodBucket(period, day, day, day.isoformat())

    if period is GoalPeriod.WEEKLY:
        start = week_start_of(day, week_start)
        return PeriodBucket(
            period, start, start + timedelta(days=6), f"{start.isoformat()}/P1W"
        )

    if period is GoalPeriod.MONTHLY:
        start, end = month_window(day.year, day.month)
        return PeriodBucket(period, start, end, f"{day.year:04d}-{day.month:02d}")

    if period is GoalPeriod.QUARTERLY:
        quarter = (day.month - 1) // 3 + 1
        first_month = 3 * (quarter - 1) + 1
        return PeriodBucket(
            period,
            date(day.year, first_month, 1),
            _month_end(day.year, first_month + 2),
            f"{day.year:04d}-Q{quarter}",
        )

    return PeriodBucket(
        period, date(day.year, 1, 1), date(day.year, 12, 31), f"{day.year:04d}"
    )


def period_key(
    period: GoalPeriod | str,
    day: date,
    week_start: int = DEFAULT_WEEK_START,
) -> str:
    return bucket_for(period, day, week_start).key


def period_interval(
    period: GoalPeriod | str,
    reference_date: date,
    goal_created_on: date | None = None,
    week_start: int = DEFAULT_WEEK_START,
) -> tuple[date, date]:
    """
    Current period interval around ``reference_date``.

    The start is never earlier than the day the goal was created, so a
    goal created mid-month has a shorter first month.
    """
    bucket = bucket_for(period, reference_date, week_start)
    start = bucket.start
    if goal_created_on is not None and goal_created_on > start:
        start = goal_created_on
    return start, bucket.end


def days_in_period(
    period: GoalPeriod | str,
    reference_date: date,
    goal_created_on: date | None = None,
    week_start: int = DEFAULT_WEEK_START,
) -> int:
    start, end = period_interval(period, reference_date, goal_created_on, week_start)
    return max((end - start).days + 1, 0)


def daily_reward_value(
    reward_amount_cents: int,
    period: GoalPeriod | str,
    reference_date: date,
) -> int:
    """
    Per-day share of a reward, in cents, for display.

    Daily goals spread their amount over the days of the reference month,
    weekly goals over 7 days, the rest over the days of their calendar
    bucket.  Creation day is ignored so the figure is stable.
    """
    period = GoalPeriod(period)
    if period is GoalPeriod.WEEKLY:
        days = 7
    elif period is GoalPeriod.DAILY:
        days = bucket_for(GoalPeriod.MONTHLY, reference_date).days
    else:
        days = bucket_for(period, reference_date).days
    share = Decimal(reward_amount_cents) / Decimal(days)
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def next_period_reset(
    period: GoalPeriod | str,
    reference_date: date,
    week_start: int = DEFAULT_WEEK_START,
) -> date:
    """Last day of the current period; the next one starts the day after."""
    return bucket_for(period, reference_date, week_start).end


def is_period_active(
    period: GoalPeriod | str,
    period_day: date,
    as_of: date,
    week_start: int = DEFAULT_WEEK_START,
) -> bool:
    """True while the bucket containing ``period_day`` has not ended at ``as_of``."""
    return as_of <= bucket_for(period, period_day, week_start).end


def periods_overlap(first: tuple[date, date], second: tuple[date, date]) -> bool:
    return first[0] <= second[1] and first[1] >= second[0]
