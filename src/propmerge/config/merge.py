"""Merge engine configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from propmerge.domain.model import ResolutionMethod
from propmerge.domain.reconciliation.merge import DEFAULT_QUALITY_THRESHOLD
from propmerge.domain.reconciliation.policy import DEFAULT_SOURCE_PRIORITY

from .env import read_env, read_env_float, read_env_int
from .errors import ConfigurationError
from .priority import load_source_priority

if TYPE_CHECKING:
    from propmerge.domain.reconciliation.policy import SourcePriorityPolicy

QUALITY_THRESHOLD_ENV = "PROPMERGE_QUALITY_THRESHOLD"
NUMERIC_TOLERANCE_ENV = "PROPMERGE_NUMERIC_TOLERANCE"
RESOLUTION_STRATEGY_ENV = "PROPMERGE_RESOLUTION_STRATEGY"
PRIORITY_FILE_ENV = "PROPMERGE_PRIORITY_FILE"


@dataclass(frozen=True, slots=True)
class MergeConfig:
    quality_threshold: int = DEFAULT_QUALITY_THRESHOLD
    numeric_tolerance: float | None = None
    resolution_strategy: ResolutionMethod = ResolutionMethod.HIGHEST_CONFIDENCE
    priority_file: Path | None = None

    def build_policy(self) -> SourcePriorityPolicy:
        """Built-in policy, then the priority file, then the tolerance override."""

        policy = DEFAULT_SOURCE_PRIORITY
        if self.priority_file is not None:
            policy = load_source_priority(self.priority_file, base=policy)
        if self.numeric_tolerance is not None:
            policy = policy.with_overrides(numeric_tolerance=self.numeric_tolerance)
        return policy


def _resolution_method(value: str | None) -> ResolutionMethod:
    if value is None:
        return ResolutionMethod.HIGHEST_CONFIDENCE
    try:
        return ResolutionMethod(value)
    except ValueError as exc:
        choices = ", ".join(method.value for method in ResolutionMethod)
        raise ConfigurationError(
            f"{RESOLUTION_STRATEGY_ENV} must be one of {choices}, got {value!r}"
        ) from exc


def get_merge_config() -> MergeConfig:
    threshold = read_env_int(QUALITY_THRESHOLD_ENV)
    if threshold is not None and not 0 <= threshold <= 100:
        raise ConfigurationError(f"{QUALITY_THRESHOLD_ENV} must be within 0-100")
    tolerance = read_env_float(NUMERIC_TOLERANCE_ENV)
    if tolerance is not None and tolerance < 0:
        raise ConfigurationError(f"{NUMERIC_TOLERANCE_ENV} must be non-negative")
    priority_file = read_env(PRIORITY_FILE_ENV)
    return MergeConfig(
        quality_threshold=DEFAULT_QUALITY_THRESHOLD if threshold is None else threshold,
        numeric_tolerance=tolerance,
        resolution_strategy=_resolution_method(read_env(RESOLUTION_STRATEGY_ENV)),
        priority_file=Path(priority_file).expanduser() if priority_file else None,
    )
