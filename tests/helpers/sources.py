from __future__ import annotations

from datetime import UTC, datetime

from propmerge.domain.model import Provider, SourceReference

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
ADDRESS = "123 Main St, Springfield, IL 62701"


def make_reference(
    provider: Provider,
    confidence: float,
    *,
    fetched_at: datetime = FIXED_NOW,
) -> SourceReference:
    return SourceReference(source=provider, fetched_at=fetched_at, confidence=confidence)
