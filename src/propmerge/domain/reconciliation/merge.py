"""Merge orchestrator: raw provider records in, one canonical property out.

Scalar fields go through the configured resolution strategy one at a time,
and every multi-source field is checked for disagreement. Nested records
(permits, HOA, price history, schools, construction detail) are copied from
the single most authoritative provider for that sub-structure instead of
being resolved field by field.

The merger holds no mutable state. Identifiers and timestamps come from the
injected ``id_factory`` and ``clock`` so identical inputs produce identical
output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from propmerge.domain.model import (
    UNKNOWN_ZONING,
    AreaMeasurement,
    CanonicalProperty,
    ConfidenceRecord,
    Conflict,
    ConflictCandidate,
    ConstructionDetails,
    DataQuality,
    HoaInfo,
    HvacSystem,
    MergeResult,
    NeighborhoodInfo,
    PermitRecord,
    PriceHistoryEntry,
    PropertyDetails,
    PropertyLocation,
    PropertyMetadata,
    PropertyType,
    Provider,
    RegulatoryInfo,
    RoofDetails,
    SchoolInfo,
    ValuationInfo,
)
from propmerge.domain.records import SourceRecords

from .completeness import COMPLETENESS_CHECKLIST, score_completeness
from .conflicts import has_conflict
from .normalize import (
    classify_foundation,
    classify_hoa_frequency,
    classify_price_event,
    classify_school_type,
    normalize_property_type,
    parse_address,
    parse_basement,
    parse_distance,
    parse_garage,
    parse_lot_size,
)
from .policy import DEFAULT_SOURCE_PRIORITY
from .resolve import FieldCandidate, present_candidates, resolve_field
from .strategies import HighestConfidenceStrategy

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from propmerge.domain.model import PropertyAddress, SourceReference
    from propmerge.domain.records import (
        CountyAssessorRecord,
        ProviderRecord,
        RedfinRecord,
        ZillowRecord,
    )

    from .completeness import FieldProbe
    from .policy import SourcePriorityPolicy
    from .strategies import Resolution, ResolutionStrategy

type IdFactory = Callable[[], str]
type Clock = Callable[[], datetime]

DEFAULT_QUALITY_THRESHOLD = 70
UNKNOWN_HVAC_VALUE = "Unknown"

log = logging.getLogger(__name__)


def default_id_factory() -> str:
    return f"prop_{uuid4().hex}"


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceReferences:
    """Fetch metadata for each provider record, keyed like ``SourceRecords``."""

    zillow: SourceReference | None = None
    redfin: SourceReference | None = None
    county_assessor: SourceReference | None = None

    def reference_for(self, provider: Provider) -> SourceReference | None:
        match provider:
            case Provider.ZILLOW:
                return self.zillow
            case Provider.REDFIN:
                return self.redfin
            case Provider.COUNTY_ASSESSOR:
                return self.county_assessor


@dataclass(slots=True)
class _FieldTracker:
    """Resolve fields for one merge call and collect the conflicts found."""

    policy: SourcePriorityPolicy
    strategy: ResolutionStrategy
    confidences: Mapping[Provider, float]
    observed: Mapping[Provider, datetime]
    conflicts: list[Conflict] = field(default_factory=list["Conflict"])

    def candidate[T](self, source: Provider, value: T | None) -> FieldCandidate[T]:
        return FieldCandidate(
            source=source,
            value=value,
            confidence=self.confidences.get(source, 0.0),
            observed_at=self.observed.get(source),
        )

    def track[T](
        self,
        field_name: str,
        candidates: Sequence[FieldCandidate[T]],
        *,
        compare: Callable[[T], object] | None = None,
    ) -> T | None:
        resolution = self.strategy.resolve(field_name, candidates, policy=self.policy)
        present = present_candidates(candidates)
        if len(present) > 1:
            values = [
                compare(candidate.value) if compare is not None else candidate.value
                for candidate in present
                if candidate.value is not None
            ]
            if has_conflict(values, tolerance=self.policy.tolerance_for(field_name)):
                self._record_conflict(field_name, present, resolution)
        return resolution.resolved.value

    def _record_conflict[T](
        self,
        field_name: str,
        present: Sequence[FieldCandidate[T]],
        resolution: Resolution[T],
    ) -> None:
        resolved = resolution.resolved.value
        method = resolution.method
        conflict = Conflict(
            field=field_name,
            values=tuple(
                ConflictCandidate(
                    source=candidate.source,
                    value=candidate.value,
                    confidence=candidate.confidence,
                )
                for candidate in present
            ),
            resolved=resolved,
            resolution=method,
        )
        log.debug(
            "Conflict on %s: %s -> %r (%s)",
            field_name,
            ", ".join(f"{value.source}={value.value!r}" for value in conflict.values),
            resolved,
            method,
        )
        self.conflicts.append(conflict)


def _as_int(value: float | None) -> int | None:
    if value is None:
        return None
    return round(value)


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyMerger:
    """Compose normalizers, resolver, conflict detector and scorer."""

    policy: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY
    strategy: ResolutionStrategy = field(default_factory=HighestConfidenceStrategy)
    id_factory: IdFactory = default_id_factory
    clock: Clock = utc_now
    checklist: Mapping[str, FieldProbe] = COMPLETENESS_CHECKLIST
    quality_threshold: int = DEFAULT_QUALITY_THRESHOLD

    def merge(
        self,
        address: str,
        records: SourceRecords | None = None,
        references: SourceReferences | None = None,
    ) -> MergeResult:
        """Merge provider ``records`` for the property at ``address``."""

        records = records or SourceRecords()
        references = references or SourceReferences()

        supplied = dict(records.supplied())
        referenced = {
            provider: reference
            for provider in supplied
            if (reference := references.reference_for(provider)) is not None
        }
        sources = tuple(referenced.values())
        tracker = _FieldTracker(
            policy=self.policy,
            strategy=self.strategy,
            confidences={provider: ref.confidence for provider, ref in referenced.items()},
            observed={provider: ref.fetched_at for provider, ref in referenced.items()},
        )

        zillow = records.zillow
        redfin = records.redfin
        assessor = records.county_assessor

        now = self.clock()
        draft = CanonicalProperty(
            id=self.id_factory(),
            version=1,
            created_at=now,
            updated_at=now,
            address=self._address(address, zillow, redfin),
            location=self._location(tracker, zillow, redfin),
            details=self._details(tracker, zillow, redfin, assessor),
            regulatory=self._regulatory(tracker, redfin, assessor),
            valuation=self._valuation(tracker, zillow, redfin, assessor),
            neighborhood=self._neighborhood(tracker, zillow),
            metadata=PropertyMetadata(
                completeness=0,
                data_quality=DataQuality.ESTIMATED,
                confidence=ConfidenceRecord.from_sources(tracker.confidences),
            ),
            sources=sources,
            rooms=(),
        )

        completeness = score_completeness(draft, checklist=self.checklist) if supplied else 0
        data_quality = (
            DataQuality.SCRAPED if completeness > self.quality_threshold else DataQuality.ESTIMATED
        )
        prop = replace(
            draft,
            metadata=replace(draft.metadata, completeness=completeness, data_quality=data_quality),
        )

        log.info(
            "Merged property %s: sources=%s, conflicts=%s, completeness=%s",
            prop.id,
            ",".join(provider.value for provider in supplied) or "none",
            len(tracker.conflicts),
            completeness,
        )
        return MergeResult(
            property=prop,
            sources=sources,
            conflicts=tuple(tracker.conflicts),
            completeness=completeness,
        )

    # ------------------------------------------------------------------
    # sub-structures
    # ------------------------------------------------------------------

    def _address(
        self,
        raw_address: str,
        zillow: ZillowRecord | None,
        redfin: RedfinRecord | None,
    ) -> PropertyAddress:
        # Parsed once from the best available string; never re-derived.
        candidates = [
            FieldCandidate(source=Provider.ZILLOW, value=zillow and zillow.address, confidence=0),
            FieldCandidate(source=Provider.REDFIN, value=redfin and redfin.address, confidence=0),
        ]
        best = resolve_field("address", candidates, policy=self.policy)
        return parse_address(best.value or raw_address)

    def _location(
        self,
        tracker: _FieldTracker,
        zillow: ZillowRecord | None,
        redfin: RedfinRecord | None,
    ) -> PropertyLocation:
        lat = tracker.track(
            "latitude",
            [
                tracker.candidate(Provider.ZILLOW, zillow and zillow.latitude),
                tracker.candidate(Provider.REDFIN, redfin and redfin.latitude),
            ],
        )
        lng = tracker.track(
            "longitude",
            [
                tracker.candidate(Provider.ZILLOW, zillow and zillow.longitude),
                tracker.candidate(Provider.REDFIN, redfin and redfin.longitude),
            ],
        )
        return PropertyLocation(lat=lat or 0.0, lng=lng or 0.0)

    def _details(
        self,
        tracker: _FieldTracker,
        zillow: ZillowRecord | None,
        redfin: RedfinRecord | None,
        assessor: CountyAssessorRecord | None,
    ) -> PropertyDetails:
        property_type = tracker.track(
            "propertyType",
            [
                tracker.candidate(Provider.ZILLOW, _property_type(zillow and zillow.property_type)),
                tracker.candidate(Provider.REDFIN, _property_type(redfin and redfin.property_type)),
            ],
        )
        year_built = tracker.track(
            "yearBuilt",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.year_built),
                tracker.candidate(Provider.ZILLOW, zillow and zillow.year_built),
                tracker.candidate(Provider.REDFIN, redfin and redfin.year_built),
            ],
        )
        stories = tracker.track(
            "stories",
            [tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.stories)],
        )
        lot_size = tracker.track(
            "lotSize",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, _lot_size(assessor)),
                tracker.candidate(Provider.ZILLOW, _lot_size(zillow)),
                tracker.candidate(Provider.REDFIN, _lot_size(redfin)),
            ],
            compare=AreaMeasurement.in_square_feet,
        )
        sqft = tracker.track(
            "sqft",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.sqft),
                tracker.candidate(Provider.ZILLOW, zillow and zillow.sqft),
                tracker.candidate(Provider.REDFIN, redfin and redfin.sqft),
            ],
        )
        bedrooms = tracker.track(
            "bedrooms",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.bedrooms),
                tracker.candidate(Provider.ZILLOW, zillow and zillow.bedrooms),
                tracker.candidate(Provider.REDFIN, redfin and redfin.bedrooms),
            ],
        )
        bathrooms = tracker.track(
            "bathrooms",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.bathrooms),
                tracker.candidate(Provider.ZILLOW, zillow and zillow.bathrooms),
                tracker.candidate(Provider.REDFIN, redfin and redfin.bathrooms),
            ],
        )

        details = PropertyDetails(
            property_type=_property_type(property_type) or PropertyType.SINGLE_FAMILY,
            year_built=_as_int(year_built) or 0,
            stories=stories or 1,
            lot_size=lot_size or AreaMeasurement(0),
            living_area=AreaMeasurement(sqft or 0),
            bedrooms=_as_int(bedrooms) or 0,
            bathrooms=bathrooms or 0,
        )
        if assessor is None:
            return details
        return _with_assessor_structure(details, assessor)

    def _regulatory(
        self,
        tracker: _FieldTracker,
        redfin: RedfinRecord | None,
        assessor: CountyAssessorRecord | None,
    ) -> RegulatoryInfo:
        zoning = tracker.track(
            "zoning",
            [tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.zoning)],
        )
        permits: tuple[PermitRecord, ...] | None = None
        if assessor is not None and assessor.permit_history:
            permits = tuple(
                PermitRecord(
                    number="",
                    type=permit.type or "",
                    date=permit.date or "",
                    status="completed",
                    description=permit.description,
                )
                for permit in assessor.permit_history
            )
        hoa: HoaInfo | None = None
        if redfin is not None and redfin.hoa is not None and redfin.hoa.fee is not None:
            hoa = HoaInfo(
                name="HOA",
                fee=redfin.hoa.fee,
                frequency=classify_hoa_frequency(redfin.hoa.frequency),
            )
        return RegulatoryInfo(
            zoning=zoning or UNKNOWN_ZONING,
            parcel_number=assessor and assessor.parcel_number,
            legal_description=assessor and assessor.legal_description,
            permits=permits,
            hoa=hoa,
        )

    def _valuation(
        self,
        tracker: _FieldTracker,
        zillow: ZillowRecord | None,
        redfin: RedfinRecord | None,
        assessor: CountyAssessorRecord | None,
    ) -> ValuationInfo:
        assessed = tracker.track(
            "assessedValue",
            [tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.assessed_value)],
        )
        market_estimate = tracker.track(
            "marketEstimate",
            [
                tracker.candidate(Provider.ZILLOW, zillow and zillow.zestimate),
                tracker.candidate(Provider.REDFIN, redfin and redfin.estimate),
            ],
        )
        redfin_tax = redfin.tax_info.annual_amount if redfin and redfin.tax_info else None
        tax_annual = tracker.track(
            "taxAmount",
            [
                tracker.candidate(Provider.COUNTY_ASSESSOR, assessor and assessor.tax_amount),
                tracker.candidate(Provider.REDFIN, redfin_tax),
            ],
        )
        price_history: tuple[PriceHistoryEntry, ...] | None = None
        if zillow is not None and zillow.price_history:
            entries = tuple(
                PriceHistoryEntry(
                    date=item.date,
                    price=item.price,
                    event=classify_price_event(item.event),
                )
                for item in zillow.price_history
                if item.date is not None and item.price is not None
            )
            price_history = entries or None
        return ValuationInfo(
            assessed=assessed,
            market_estimate=market_estimate,
            tax_annual=tax_annual,
            price_history=price_history,
        )

    def _neighborhood(
        self,
        tracker: _FieldTracker,
        zillow: ZillowRecord | None,
    ) -> NeighborhoodInfo:
        walk_score = tracker.track(
            "walkScore",
            [tracker.candidate(Provider.ZILLOW, zillow and zillow.walk_score)],
        )
        transit_score = tracker.track(
            "transitScore",
            [tracker.candidate(Provider.ZILLOW, zillow and zillow.transit_score)],
        )
        bike_score = tracker.track(
            "bikeScore",
            [tracker.candidate(Provider.ZILLOW, zillow and zillow.bike_score)],
        )
        schools: tuple[SchoolInfo, ...] | None = None
        if zillow is not None and zillow.schools:
            entries = tuple(
                SchoolInfo(
                    name=school.name,
                    type=classify_school_type(school.type),
                    rating=school.rating,
                    distance=parse_distance(school.distance),
                )
                for school in zillow.schools
                if school.name is not None
            )
            schools = entries or None
        return NeighborhoodInfo(
            walk_score=walk_score,
            transit_score=transit_score,
            bike_score=bike_score,
            schools=schools,
        )


def _property_type(raw: object) -> PropertyType | None:
    if not isinstance(raw, str):
        return None
    return normalize_property_type(raw)


def _lot_size(record: ProviderRecord | None) -> AreaMeasurement | None:
    if record is None:
        return None
    return parse_lot_size(record.lot_size)


def _with_assessor_structure(
    details: PropertyDetails,
    assessor: CountyAssessorRecord,
) -> PropertyDetails:
    construction = (
        ConstructionDetails(style="", framing=assessor.construction)
        if assessor.construction
        else None
    )
    roof = (
        RoofDetails(type=assessor.roof_type, material=assessor.roof_type)
        if assessor.roof_type
        else None
    )
    hvac = (
        HvacSystem(
            heating=assessor.heating or UNKNOWN_HVAC_VALUE,
            cooling=assessor.cooling or UNKNOWN_HVAC_VALUE,
            fuel=UNKNOWN_HVAC_VALUE,
        )
        if assessor.heating or assessor.cooling
        else None
    )
    return replace(
        details,
        construction=construction,
        foundation=classify_foundation(assessor.foundation) if assessor.foundation else None,
        roof=roof,
        hvac=hvac,
        garage=parse_garage(assessor.garage) if assessor.garage else None,
        basement=parse_basement(assessor.basement) if assessor.basement else None,
    )


def merge_property_data(
    address: str,
    records: SourceRecords | None = None,
    references: SourceReferences | None = None,
    *,
    merger: PropertyMerger | None = None,
) -> MergeResult:
    """Merge with ``merger`` or a default-configured ``PropertyMerger``."""

    return (merger or PropertyMerger()).merge(address, records, references)
