"""Merge report types: detected conflicts and the transient merge result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from propmerge.domain.model.enums import Provider, ResolutionMethod
    from propmerge.domain.model.property import CanonicalProperty, SourceReference


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictCandidate:
    source: Provider
    value: object
    confidence: float


@dataclass(frozen=True, slots=True, kw_only=True)
class Conflict:
    """A field for which two or more providers reported disagreeing values."""

    field: str
    values: tuple[ConflictCandidate, ...]
    resolved: object
    resolution: ResolutionMethod

    def __post_init__(self) -> None:
        if len(self.values) < 2:
            raise ValueError("Conflict must include at least two candidate values")


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeResult:
    """Outcome of one merge call. Not persisted by the engine."""

    property: CanonicalProperty
    sources: tuple[SourceReference, ...]
    conflicts: tuple[Conflict, ...]
    completeness: int
