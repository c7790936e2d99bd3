"""Named resolution strategies.

A strategy turns a field's candidates into one resolved value and reports the
method that decided it. That tag is what a conflict record carries, so adding a
strategy never touches the conflict detector.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from propmerge.domain.model import ResolutionMethod

from .policy import DEFAULT_SOURCE_PRIORITY
from .resolve import ResolvedField, present_candidates, rank_candidates, resolve_field

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .policy import SourcePriorityPolicy
    from .resolve import FieldCandidate


@dataclass(frozen=True, slots=True, kw_only=True)
class Resolution[T]:
    resolved: ResolvedField[T]
    method: ResolutionMethod


class ResolutionStrategy(Protocol):
    """Pick a winner among a field's candidates."""

    @property
    def method(self) -> ResolutionMethod: ...

    def resolve[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
    ) -> Resolution[T]: ...


@dataclass(frozen=True, slots=True)
class HighestConfidenceStrategy:
    """Priority list first, confidence among unlisted providers."""

    method: ResolutionMethod = ResolutionMethod.HIGHEST_CONFIDENCE

    def resolve[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
    ) -> Resolution[T]:
        return Resolution(
            resolved=resolve_field(field_name, candidates, policy=policy),
            method=self.method,
        )


def _as_utc(moment: datetime | None) -> datetime:
    if moment is None:
        return datetime.min.replace(tzinfo=UTC)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class MostRecentStrategy:
    """Latest fetch wins; equal or unknown fetch times keep priority order."""

    method: ResolutionMethod = ResolutionMethod.MOST_RECENT

    def resolve[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
    ) -> Resolution[T]:
        ranked = rank_candidates(field_name, candidates, policy=policy)
        if not ranked:
            return Resolution(resolved=ResolvedField.absent(), method=self.method)
        newest = max(ranked, key=lambda candidate: _as_utc(candidate.observed_at))
        return Resolution(resolved=ResolvedField.from_candidate(newest), method=self.method)


@dataclass(frozen=True, slots=True)
class AverageStrategy:
    """Mean of numeric candidates; non-numeric fields defer to ``fallback``."""

    fallback: ResolutionStrategy = field(default_factory=HighestConfidenceStrategy)
    method: ResolutionMethod = ResolutionMethod.AVERAGE

    def resolve[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
    ) -> Resolution[T]:
        present = present_candidates(candidates)
        numbers = [
            candidate.value
            for candidate in present
            if isinstance(candidate.value, int | float) and not isinstance(candidate.value, bool)
        ]
        if len(present) < 2 or len(numbers) != len(present):
            return self.fallback.resolve(field_name, candidates, policy=policy)
        mean = sum(numbers) / len(numbers)
        confidence = sum(candidate.confidence for candidate in present) / len(present)
        resolved: ResolvedField[T] = ResolvedField(
            value=mean,  # pyright: ignore[reportArgumentType]
            source=None,
            confidence=confidence,
        )
        return Resolution(resolved=resolved, method=self.method)


@dataclass(frozen=True, slots=True)
class UserVerifiedStrategy:
    """Reviewer-supplied values win outright; other fields defer to ``fallback``."""

    overrides: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    fallback: ResolutionStrategy = field(default_factory=HighestConfidenceStrategy)
    method: ResolutionMethod = ResolutionMethod.USER_VERIFIED

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def resolve[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
    ) -> Resolution[T]:
        if field_name not in self.overrides:
            return self.fallback.resolve(field_name, candidates, policy=policy)
        resolved: ResolvedField[T] = ResolvedField(
            value=self.overrides[field_name],  # pyright: ignore[reportArgumentType]
            source=None,
            confidence=1.0,
        )
        return Resolution(resolved=resolved, method=self.method)


_STRATEGY_FACTORIES: dict[ResolutionMethod, Callable[[], ResolutionStrategy]] = {
    ResolutionMethod.HIGHEST_CONFIDENCE: HighestConfidenceStrategy,
    ResolutionMethod.MOST_RECENT: MostRecentStrategy,
    ResolutionMethod.AVERAGE: AverageStrategy,
    ResolutionMethod.USER_VERIFIED: UserVerifiedStrategy,
}


def strategy_for(method: ResolutionMethod | str) -> ResolutionStrategy:
    """Build the default-configured strategy registered under ``method``."""

    return _STRATEGY_FACTORIES[ResolutionMethod(method)]()
