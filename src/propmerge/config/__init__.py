"""Application configuration helpers."""

from __future__ import annotations

from .env import read_env, read_env_float, read_env_int
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, resolve_log_level
from .merge import MergeConfig, get_merge_config
from .priority import load_source_priority, policy_from_document

__all__ = [
    "ConfigurationError",
    "MergeConfig",
    "MissingConfigurationError",
    "configure_logging",
    "get_merge_config",
    "load_source_priority",
    "policy_from_document",
    "read_env",
    "read_env_float",
    "read_env_int",
    "resolve_log_level",
]
