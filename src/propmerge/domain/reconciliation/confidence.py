"""Heuristic source confidence and source-reference construction.

Fetchers that cannot supply their own confidence score a record by the
presence of weighted fields: critical fields count 3, important fields 2,
bonus fields 1. Assessor records get a 10% boost, capped at 1.0, because the
registry is the record of authority for structural and regulatory data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from propmerge.domain.model import Provider, SourceReference

if TYPE_CHECKING:
    from propmerge.domain.records import ProviderRecord

ASSESSOR_CONFIDENCE_BOOST = 1.1


@dataclass(frozen=True, slots=True, kw_only=True)
class ConfidenceWeights:
    critical: tuple[str, ...]
    important: tuple[str, ...]
    bonus: tuple[str, ...]
    boost: float = 1.0

    @property
    def max_score(self) -> int:
        return 3 * len(self.critical) + 2 * len(self.important) + len(self.bonus)


CONFIDENCE_WEIGHTS: dict[Provider, ConfidenceWeights] = {
    Provider.ZILLOW: ConfidenceWeights(
        critical=("address", "bedrooms", "bathrooms", "sqft", "year_built"),
        important=("price", "zestimate", "lot_size", "property_type"),
        bonus=("walk_score", "schools", "tax_history", "price_history"),
    ),
    Provider.REDFIN: ConfidenceWeights(
        critical=("address", "bedrooms", "bathrooms", "sqft", "year_built"),
        important=("price", "estimate", "lot_size", "property_type"),
        bonus=("tax_info", "hoa", "features"),
    ),
    Provider.COUNTY_ASSESSOR: ConfidenceWeights(
        critical=("parcel_number", "assessed_value", "year_built", "sqft"),
        important=("zoning", "lot_size", "bedrooms", "bathrooms", "tax_amount"),
        bonus=("construction", "foundation", "heating", "cooling", "permit_history"),
        boost=ASSESSOR_CONFIDENCE_BOOST,
    ),
}


def _present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, list):
        return bool(value)
    return True


def score_confidence(provider: Provider, record: ProviderRecord) -> float:
    """Confidence in [0, 1] for ``record``, rounded to two decimals."""

    weights = CONFIDENCE_WEIGHTS[provider]
    score = 0
    score += sum(3 for name in weights.critical if _present(getattr(record, name, None)))
    score += sum(2 for name in weights.important if _present(getattr(record, name, None)))
    score += sum(1 for name in weights.bonus if _present(getattr(record, name, None)))
    confidence = round(score / weights.max_score * weights.boost, 2)
    return min(confidence, 1.0)


def build_source_reference(
    provider: Provider,
    record: ProviderRecord,
    *,
    fetched_at: datetime | None = None,
    url: str | None = None,
    confidence: float | None = None,
) -> SourceReference:
    """Describe ``record`` for the merged entity's source list."""

    return SourceReference(
        source=provider,
        fetched_at=fetched_at or datetime.now(tz=UTC),
        confidence=score_confidence(provider, record) if confidence is None else confidence,
        url=url,
        fields=record.populated_fields(),
    )
