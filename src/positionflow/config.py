"""Runtime configuration read from the environment."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV_VAR = "POSITIONFLOW_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def determine_log_level(override: Optional[str] = None) -> str:
    """Resolve the log level from ``override``, then the environment, then the default."""
    value = override or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}")
    return level


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stderr handler on the root logger at the resolved level."""
    logging.basicConfig(level=determine_log_level(level), format=LOG_FORMAT, force=True)
