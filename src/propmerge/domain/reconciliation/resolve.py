"""Field resolution: pick one winning value among provider candidates.

Resolution policy:
- absent candidates are ignored
- providers on the field's priority list win by rank
- unlisted providers follow, ordered by descending confidence

The resolver never applies field defaults; absence is returned explicitly and
callers substitute their own sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .policy import DEFAULT_SOURCE_PRIORITY

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from propmerge.domain.model import Provider

    from .policy import SourcePriorityPolicy


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldCandidate[T]:
    """One provider's claim for a field value."""

    source: Provider
    value: T | None
    confidence: float
    observed_at: datetime | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedField[T]:
    """Winning value for a field; ``source`` is ``None`` when nothing resolved."""

    value: T | None
    source: Provider | None
    confidence: float

    @classmethod
    def absent(cls) -> ResolvedField[T]:
        return cls(value=None, source=None, confidence=0.0)

    @classmethod
    def from_candidate(cls, candidate: FieldCandidate[T]) -> ResolvedField[T]:
        return cls(value=candidate.value, source=candidate.source, confidence=candidate.confidence)


def present_candidates[T](candidates: Iterable[FieldCandidate[T]]) -> list[FieldCandidate[T]]:
    return [candidate for candidate in candidates if candidate.has_value]


def rank_candidates[T](
    field_name: str,
    candidates: Iterable[FieldCandidate[T]],
    *,
    policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
) -> list[FieldCandidate[T]]:
    """Order present candidates best-first for ``field_name``."""

    def sort_key(candidate: FieldCandidate[T]) -> tuple[int, int, float]:
        rank = policy.rank(field_name, candidate.source)
        if rank is None:
            return (1, 0, -candidate.confidence)
        return (0, rank, 0.0)

    return sorted(present_candidates(candidates), key=sort_key)


def resolve_field[T](
    field_name: str,
    candidates: Sequence[FieldCandidate[T]],
    *,
    policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
) -> ResolvedField[T]:
    """Return the winning candidate for ``field_name`` or an explicit absence."""

    ranked = rank_candidates(field_name, candidates, policy=policy)
    if not ranked:
        return ResolvedField.absent()
    return ResolvedField.from_candidate(ranked[0])
