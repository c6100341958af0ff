"""
RewardsConfig schema.

Frozen dataclasses the YAML settings file is parsed into.  These are the
only configuration types the rest of the system sees; bridges translate
them into constructor arguments for kernel services and engines.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rewards_kernel.domain.currency import CURRENCY_CODE, MAX_CENTS
from rewards_kernel.domain.periods import DEFAULT_WEEK_START
from rewards_kernel.services.contestation_service import DEFAULT_MAX_REASON_LENGTH


@dataclass(frozen=True)
class CurrencySettings:
    """Currency of every reward amount and the per-goal reward ceiling."""

    code: str = CURRENCY_CODE
    max_reward_cents: int = MAX_CENTS


@dataclass(frozen=True)
class EngineSettings:
    """Reward engine behaviour."""

    use_goal_snapshots: bool = True
    week_start: int = DEFAULT_WEEK_START  # date.weekday(); 6 = Sunday


@dataclass(frozen=True)
class ContestationSettings:
    require_response: bool = False
    max_reason_length: int = DEFAULT_MAX_REASON_LENGTH


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10


@dataclass(frozen=True)
class RewardsConfig:
    """The runtime configuration artifact returned by ``get_active_config``."""

    config_id: str
    version: int
    currency: CurrencySettings = field(default_factory=CurrencySettings)
    engine: EngineSettings = field(default_factory=EngineSettings)
    contestation: ContestationSettings = field(default_factory=ContestationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    checksum: str = ""
