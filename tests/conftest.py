"""
Pytest fixtures for the rewards test suite.

Provides:
- A fresh in-memory SQLite database per test (StaticPool, one connection)
- Deterministic clock
- Structured log capture
- Domain object factories for engine tests that need no database
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from rewards_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from rewards_kernel.domain.access import CallerContext, Role
from rewards_kernel.domain.clock import DeterministicClock
from rewards_kernel.domain.contestation import (
    Contestation,
    ContestationReason,
    ContestationStatus,
)
from rewards_kernel.domain.goals import GoalScope, GoalType, SectorGoal
from rewards_kernel.domain.periods import GoalPeriod
from rewards_kernel.domain.submissions import Submission
from rewards_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from rewards_kernel.selectors.goal_selector import GoalCatalog
from rewards_kernel.selectors.submission_selector import SubmissionLedger
from rewards_kernel.services.contestation_service import ContestationLedger
from rewards_kernel.services.goal_service import GoalService
from rewards_kernel.services.submission_service import SubmissionService

SECTOR = "vendas"
OTHER_SECTOR = "estoque"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture rewards_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, contestation_ledger):
            contestation_ledger.create(...)
            logs = captured_logs()
            assert any(r["message"] == "contestation_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("rewards_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables created."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2025-07-15 09:00 UTC (a Tuesday)."""
    return DeterministicClock(datetime(2025, 7, 15, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def goal_service(session, deterministic_clock):
    return GoalService(session, clock=deterministic_clock)


@pytest.fixture
def submission_service(session, deterministic_clock):
    return SubmissionService(session, clock=deterministic_clock)


@pytest.fixture
def contestation_ledger(session, deterministic_clock):
    return ContestationLedger(session, clock=deterministic_clock)


@pytest.fixture
def goal_catalog(session):
    return GoalCatalog(session)


@pytest.fixture
def submission_ledger(session):
    return SubmissionLedger(session)


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------


@pytest.fixture
def manager():
    return CallerContext(Role.MANAGER, SECTOR, "manager-1")


@pytest.fixture
def admin():
    return CallerContext(Role.ADMIN, None, "admin-1")


@pytest.fixture
def collaborator():
    return CallerContext(Role.COLLABORATOR, SECTOR, "collab-1")


# ---------------------------------------------------------------------------
# Domain factories (no database)
# ---------------------------------------------------------------------------


def make_goal(
    goal_type=GoalType.NUMERIC,
    target_value=100,
    period=GoalPeriod.DAILY,
    reward_amount_cents=5000,
    checklist_items=(),
    scope=GoalScope.SECTOR,
    assigned_collaborator_id=None,
    is_active=True,
    sector_id=SECTOR,
    title="Meta",
) -> SectorGoal:
    return SectorGoal(
        id=uuid4(),
        sector_id=sector_id,
        type=goal_type,
        title=title,
        target_value=Decimal(str(target_value)),
        period=period,
        reward_amount_cents=reward_amount_cents,
        checklist_items=tuple(checklist_items),
        is_active=is_active,
        scope=scope,
        assigned_collaborator_id=assigned_collaborator_id,
    )


def make_submission(
    answers,
    submission_date: date,
    collaborator_id="collab-1",
    goal_snapshots=None,
    created_at=None,
) -> Submission:
    return Submission(
        id=uuid4(),
        collaborator_ref=collaborator_id,
        sector_id=SECTOR,
        submission_date=submission_date,
        checklist_answers=dict(answers),
        goal_snapshots=dict(goal_snapshots or {}),
        created_at=created_at,
    )


def make_contestation(
    goal: SectorGoal,
    submission: Submission,
    status=ContestationStatus.PENDING,
) -> Contestation:
    return Contestation(
        id=uuid4(),
        goal_id=goal.id,
        submission_id=submission.id,
        collaborator_id=submission.collaborator_ref,
        manager_id="manager-1",
        reason="Não foi feito",
        reason_code=ContestationReason.NOT_DONE,
        status=status,
    )


@pytest.fixture
def goal_factory():
    return make_goal


@pytest.fixture
def submission_factory():
    return make_submission


@pytest.fixture
def contestation_factory():
    return make_contestation
