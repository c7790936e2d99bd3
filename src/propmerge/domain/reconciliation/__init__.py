"""Reconciliation engine for multi-provider property records.

Layered flow of one merge call:
1) validate raw provider payloads into lenient records
2) normalize loose strings (property type, lot size, address)
3) resolve every canonical field against the source-priority policy
4) detect disagreement among the candidates of each field
5) assemble sub-structures and score completeness
"""

from __future__ import annotations

from .completeness import COMPLETENESS_CHECKLIST, is_populated, score_completeness
from .confidence import build_source_reference, score_confidence
from .conflicts import has_conflict
from .merge import (
    PropertyMerger,
    SourceReferences,
    default_id_factory,
    merge_property_data,
    utc_now,
)
from .normalize import normalize_property_type, parse_address, parse_lot_size
from .policy import DEFAULT_SOURCE_PRIORITY, SourcePriorityPolicy
from .resolve import FieldCandidate, ResolvedField, resolve_field
from .strategies import (
    AverageStrategy,
    HighestConfidenceStrategy,
    MostRecentStrategy,
    Resolution,
    ResolutionStrategy,
    UserVerifiedStrategy,
    strategy_for,
)

__all__ = [
    "COMPLETENESS_CHECKLIST",
    "DEFAULT_SOURCE_PRIORITY",
    "AverageStrategy",
    "FieldCandidate",
    "HighestConfidenceStrategy",
    "MostRecentStrategy",
    "PropertyMerger",
    "Resolution",
    "ResolutionStrategy",
    "ResolvedField",
    "SourcePriorityPolicy",
    "SourceReferences",
    "UserVerifiedStrategy",
    "build_source_reference",
    "default_id_factory",
    "has_conflict",
    "is_populated",
    "merge_property_data",
    "normalize_property_type",
    "parse_address",
    "parse_lot_size",
    "resolve_field",
    "score_completeness",
    "score_confidence",
    "strategy_for",
    "utc_now",
]
