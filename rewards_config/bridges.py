"""
Config -> Kernel Bridges.

Functions that turn ``RewardsConfig`` settings into configured kernel
services and engines.  These live in rewards_config (the producer) because
the kernel must NEVER import rewards_config.

Usage:
    from rewards_config import get_active_config
    from rewards_config.bridges import build_reward_engine, build_goal_service

    config = get_active_config()
    engine = build_reward_engine(config)
    goals = build_goal_service(config, session)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from rewards_config.schema import RewardsConfig
from rewards_engines.rewards import RewardEngine
from rewards_kernel.db.engine import init_engine_from_url
from rewards_kernel.domain.clock import Clock
from rewards_kernel.logging_config import configure_logging
from rewards_kernel.services.contestation_service import ContestationLedger
from rewards_kernel.services.goal_service import GoalService
from rewards_kernel.services.submission_service import ProofUploader, SubmissionService


def build_reward_engine(config: RewardsConfig) -> RewardEngine:
    return RewardEngine(
        week_start=config.engine.week_start,
        use_goal_snapshots=config.engine.use_goal_snapshots,
    )


def build_goal_service(
    config: RewardsConfig, session: Session, clock: Clock | None = None
) -> GoalService:
    return GoalService(
        session, clock=clock, max_reward_cents=config.currency.max_reward_cents
    )


def build_submission_service(
    config: RewardsConfig,
    session: Session,
    clock: Clock | None = None,
    uploader: ProofUploader | None = None,
) -> SubmissionService:
    return SubmissionService(session, clock=clock, uploader=uploader)


def build_contestation_ledger(
    config: RewardsConfig, session: Session, clock: Clock | None = None
) -> ContestationLedger:
    return ContestationLedger(
        session,
        clock=clock,
        require_response=config.contestation.require_response,
        max_reason_length=config.contestation.max_reason_length,
    )


def configure_logging_from(config: RewardsConfig) -> None:
    """Apply ``logging.level`` to the rewards_kernel logger hierarchy."""
    configure_logging(level=config.logging.level)


def init_database(config: RewardsConfig) -> Engine:
    return init_engine_from_url(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
    )
