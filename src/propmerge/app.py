"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from propmerge.config import get_merge_config
from propmerge.domain.model import Provider
from propmerge.domain.reconciliation import (
    PropertyMerger,
    SourceReferences,
    build_source_reference,
    strategy_for,
)
from propmerge.domain.records import SourceRecords

if TYPE_CHECKING:
    from collections.abc import Mapping

    from propmerge.config import MergeConfig
    from propmerge.domain.model import MergeResult, SourceReference
    from propmerge.domain.reconciliation.merge import Clock, IdFactory


log = getLogger(__name__)


def build_merger(
    config: MergeConfig | None = None,
    *,
    id_factory: IdFactory | None = None,
    clock: Clock | None = None,
) -> PropertyMerger:
    """Assemble a ``PropertyMerger`` from configuration values."""

    effective_config = config or get_merge_config()
    merger = PropertyMerger(
        policy=effective_config.build_policy(),
        strategy=strategy_for(effective_config.resolution_strategy),
        quality_threshold=effective_config.quality_threshold,
    )
    if id_factory is not None:
        merger = replace(merger, id_factory=id_factory)
    if clock is not None:
        merger = replace(merger, clock=clock)
    return merger


def _complete_references(
    records: SourceRecords,
    references: Mapping[Provider, SourceReference],
    merger: PropertyMerger,
) -> SourceReferences:
    # Records fetched without metadata are scored heuristically and stamped now.
    fetched_at = merger.clock()
    completed: dict[Provider, SourceReference] = {}
    for provider, record in records.supplied():
        reference = references.get(provider)
        if reference is None:
            reference = build_source_reference(provider, record, fetched_at=fetched_at)
        elif not reference.fields:
            reference = replace(reference, fields=record.populated_fields())
        completed[provider] = reference
    return SourceReferences(
        zillow=completed.get(Provider.ZILLOW),
        redfin=completed.get(Provider.REDFIN),
        county_assessor=completed.get(Provider.COUNTY_ASSESSOR),
    )


def reconcile_property(
    address: str,
    *,
    zillow: object = None,
    redfin: object = None,
    county_assessor: object = None,
    references: Mapping[Provider, SourceReference] | None = None,
    merger: PropertyMerger | None = None,
) -> MergeResult:
    """Validate raw provider payloads and merge them into one canonical property."""

    effective_merger = merger or build_merger()
    records = SourceRecords.from_payloads(
        zillow=zillow,
        redfin=redfin,
        county_assessor=county_assessor,
    )
    log.info(
        "Starting reconciliation for %r: providers=%s",
        address,
        ",".join(provider.value for provider, _ in records.supplied()) or "none",
    )

    result = effective_merger.merge(
        address,
        records,
        _complete_references(records, references or {}, effective_merger),
    )

    log.info(
        f"Finished reconciliation: id={result.property.id}, sources={len(result.sources)}, "
        f"conflicts={len(result.conflicts)}, completeness={result.completeness}"
    )
    return result
