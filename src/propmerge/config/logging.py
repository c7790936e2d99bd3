"""Shared logging helpers for propmerge."""

from __future__ import annotations

import logging

from .env import read_env
from .errors import ConfigurationError

LOG_LEVEL_ENV = "PROPMERGE_LOG_LEVEL"


def resolve_log_level(level: int | str) -> int:
    """Accept numeric levels or names such as ``"debug"``."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.strip().upper())
    if resolved is None:
        raise ConfigurationError(f"Unknown log level: {level}")
    return resolved


def get_log_level(default: int = logging.INFO) -> int:
    value = read_env(LOG_LEVEL_ENV)
    return default if value is None else resolve_log_level(value)


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    ``level`` defaults to ``PROPMERGE_LOG_LEVEL`` or INFO. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=get_log_level() if level is None else resolve_log_level(level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
