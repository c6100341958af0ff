"""
rewards_config -- single public entrypoint for reward settings.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads settings files or
    environment variables directly.  Returns a frozen ``RewardsConfig``.

Architecture position:
    Configuration -- sits above ``rewards_kernel`` and ``rewards_engines``.
    The kernel MUST NEVER import from ``rewards_config``; bridges in this
    package translate settings into constructor arguments.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic: the same file always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidConfigurationError`` -- a value is unknown or out of range.

Audit relevance:
    Every successful call emits a ``REWARDS_CONFIG_TRACE`` log entry with
    the config id, version, checksum and source path.
"""

from __future__ import annotations

import os
from pathlib import Path

from rewards_config.loader import load_yaml_file, parse_config
from rewards_config.schema import (
    ContestationSettings,
    CurrencySettings,
    DatabaseSettings,
    EngineSettings,
    LoggingSettings,
    RewardsConfig,
)
from rewards_kernel.logging_config import get_logger

_logger = get_logger("config")

CONFIG_PATH_ENV = "REWARDS_CONFIG_PATH"

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULT_CONFIG_FILE = _DEFAULT_CONFIG_DIR / "default.yaml"


def get_active_config(path: Path | str | None = None) -> RewardsConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Settings file.  Defaults to ``$REWARDS_CONFIG_PATH``, then to
            ``rewards_config/sets/default.yaml``.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        InvalidConfigurationError: If a value fails validation.
    """
    source = Path(path or os.environ.get(CONFIG_PATH_ENV) or _DEFAULT_CONFIG_FILE)
    config = parse_config(load_yaml_file(source))

    _logger.info(
        "REWARDS_CONFIG_TRACE",
        extra={
            "trace_type": "REWARDS_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "source": str(source),
        },
    )
    return config


__all__ = [
    "CONFIG_PATH_ENV",
    "ContestationSettings",
    "CurrencySettings",
    "DatabaseSettings",
    "EngineSettings",
    "LoggingSettings",
    "RewardsConfig",
    "get_active_config",
]
