"""Environment variable readers for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def read_env(name: str) -> str | None:
    """Return the stripped value of ``name``; unset or blank yields ``None``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def read_env_float(name: str) -> float | None:
    value = read_env(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def read_env_int(name: str) -> int | None:
    value = read_env(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
