"""
Configuration Loader (``rewards_config.loader``).

Responsibility
--------------
Loads the YAML settings file and parses it into typed
``rewards_config.schema`` dataclass instances.  Runtime callers go through
``rewards_config.get_active_config()``; this module is its tooling.

Invariants enforced
-------------------
* Unknown sections and unknown keys are rejected, so a typo never falls
  back silently to a default.
* Every value is range-checked; violations raise
  ``InvalidConfigurationError`` naming the dotted key.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  settings for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from rewards_config.schema import (
    ContestationSettings,
    CurrencySettings,
    DatabaseSettings,
    EngineSettings,
    LoggingSettings,
    RewardsConfig,
)
from rewards_kernel.domain.currency import MAX_CENTS
from rewards_kernel.exceptions import InvalidConfigurationError

_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_SECTIONS = ("currency", "engine", "contestation", "logging", "database")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _section(data: dict[str, Any], name: str, allowed: tuple[str, ...]) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(name, "must be a mapping")
    unknown = sorted(set(section) - set(allowed))
    if unknown:
        raise InvalidConfigurationError(f"{name}.{unknown[0]}", "unknown key")
    return section


def _bool(section: dict[str, Any], key: str, dotted: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidConfigurationError(dotted, "must be true or false")
    return value


def _int(
    section: dict[str, Any],
    key: str,
    dotted: str,
    default: int,
    minimum: int,
    maximum: int | None = None,
) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(dotted, "must be an integer")
    if value < minimum or (maximum is not None and value > maximum):
        bound = f"{minimum}..{maximum}" if maximum is not None else f">= {minimum}"
        raise InvalidConfigurationError(dotted, f"must be {bound}, got {value}")
    return value


def parse_week_start(value: Any) -> int:
    """Weekday index from a name (``"sunday"``) or a ``date.weekday()`` int."""
    if isinstance(value, str):
        index = _WEEKDAYS.get(value.strip().lower())
        if index is None:
            raise InvalidConfigurationError("engine.week_start", f"unknown weekday {value!r}")
        return index
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    raise InvalidConfigurationError("engine.week_start", f"invalid weekday {value!r}")


def parse_currency(data: dict[str, Any]) -> CurrencySettings:
    section = _section(data, "currency", ("code", "max_reward_cents"))
    code = section.get("code", CurrencySettings.code)
    if not isinstance(code, str) or len(code) != 3 or not code.isalpha():
        raise InvalidConfigurationError("currency.code", "must be a 3-letter ISO 4217 code")
    return CurrencySettings(
        code=code.upper(),
        max_reward_cents=_int(
            section, "max_reward_cents", "currency.max_reward_cents",
            MAX_CENTS, minimum=0, maximum=MAX_CENTS,
        ),
    )


def parse_engine(data: dict[str, Any]) -> EngineSettings:
    section = _section(data, "engine", ("use_goal_snapshots", "week_start"))
    return EngineSettings(
        use_goal_snapshots=_bool(
            section, "use_goal_snapshots", "engine.use_goal_snapshots", True
        ),
        week_start=parse_week_start(section.get("week_start", EngineSettings.week_start)),
    )


def parse_contestation(data: dict[str, Any]) -> ContestationSettings:
    section = _section(data, "contestation", ("require_response", "max_reason_length"))
    return ContestationSettings(
        require_response=_bool(
            section, "require_response", "contestation.require_response", False
        ),
        max_reason_length=_int(
            section, "max_reason_length", "contestation.max_reason_length",
            ContestationSettings.max_reason_length, minimum=1,
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    section = _section(data, "logging", ("level",))
    level = str(section.get("level", LoggingSettings.level)).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidConfigurationError("logging.level", f"unknown level {level!r}")
    return LoggingSettings(level=level)


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    section = _section(data, "database", ("url", "echo", "pool_size"))
    url = section.get("url", DatabaseSettings.url)
    if not isinstance(url, str) or not url.strip():
        raise InvalidConfigurationError("database.url", "must be a non-empty string")
    return DatabaseSettings(
        url=url.strip(),
        echo=_bool(section, "echo", "database.echo", False),
        pool_size=_int(section, "pool_size", "database.pool_size", 10, minimum=1),
    )


def parse_config(data: dict[str, Any]) -> RewardsConfig:
    """Parse a full settings mapping into ``RewardsConfig``."""
    if not isinstance(data, dict):
        raise InvalidConfigurationError("<root>", "must be a mapping")
    unknown = sorted(set(data) - set(_SECTIONS) - {"config_id", "version"})
    if unknown:
        raise InvalidConfigurationError(unknown[0], "unknown section")

    config_id = data.get("config_id", "default")
    if not isinstance(config_id, str) or not config_id:
        raise InvalidConfigurationError("config_id", "must be a non-empty string")

    return RewardsConfig(
        config_id=config_id,
        version=_int(data, "version", "version", 1, minimum=1),
        currency=parse_currency(data),
        engine=parse_engine(data),
        contestation=parse_contestation(data),
        logging=parse_logging(data),
        database=parse_database(data),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
