"""Canonical property entity and its owned sub-structures.

Every value object here is frozen. Collections are tuples so a constructed
entity cannot be mutated in place; later enrichment (rooms, manual edits)
builds a new version instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from propmerge.domain.model.enums import (
    AreaUnit,
    BasementType,
    DataQuality,
    FoundationType,
    GarageType,
    HoaFrequency,
    PriceEvent,
    PropertyType,
    Provider,
    SchoolType,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

SQFT_PER_ACRE = 43_560
UNKNOWN_ZONING = "Unknown"


@dataclass(frozen=True, slots=True)
class AreaMeasurement:
    value: float
    unit: AreaUnit = AreaUnit.SQFT

    def in_square_feet(self) -> float:
        if self.unit is AreaUnit.ACRES:
            return self.value * SQFT_PER_ACRE
        return self.value


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyAddress:
    """Address components plus the verbatim string they were parsed from."""

    street: str
    city: str = ""
    state: str = ""
    zip: str = ""
    county: str = ""
    country: str = "US"
    formatted: str = ""


@dataclass(frozen=True, slots=True)
class PropertyLocation:
    """Coordinates; ``(0, 0)`` means unresolved, not the Gulf of Guinea."""

    lat: float = 0.0
    lng: float = 0.0


@dataclass(frozen=True, slots=True, kw_only=True)
class ConstructionDetails:
    style: str
    framing: str


@dataclass(frozen=True, slots=True, kw_only=True)
class RoofDetails:
    type: str
    material: str


@dataclass(frozen=True, slots=True, kw_only=True)
class HvacSystem:
    heating: str
    cooling: str
    fuel: str


@dataclass(frozen=True, slots=True, kw_only=True)
class GarageInfo:
    type: GarageType
    spaces: int


@dataclass(frozen=True, slots=True, kw_only=True)
class BasementInfo:
    type: BasementType
    finished: bool


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyDetails:
    property_type: PropertyType = PropertyType.SINGLE_FAMILY
    year_built: int = 0
    stories: float = 1
    lot_size: AreaMeasurement = field(default_factory=lambda: AreaMeasurement(0))
    living_area: AreaMeasurement = field(default_factory=lambda: AreaMeasurement(0))
    bedrooms: int = 0
    bathrooms: float = 0

    # Populated only from an authoritative assessor record.
    construction: ConstructionDetails | None = None
    foundation: FoundationType | None = None
    roof: RoofDetails | None = None
    hvac: HvacSystem | None = None
    garage: GarageInfo | None = None
    basement: BasementInfo | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PermitRecord:
    number: str
    type: str
    date: str
    status: str
    description: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HoaInfo:
    name: str
    fee: float
    frequency: HoaFrequency


@dataclass(frozen=True, slots=True, kw_only=True)
class RegulatoryInfo:
    zoning: str = UNKNOWN_ZONING
    parcel_number: str | None = None
    legal_description: str | None = None
    permits: tuple[PermitRecord, ...] | None = None
    hoa: HoaInfo | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceHistoryEntry:
    date: str
    price: float
    event: PriceEvent


@dataclass(frozen=True, slots=True, kw_only=True)
class ValuationInfo:
    assessed: float | None = None
    market_estimate: float | None = None
    tax_annual: float | None = None
    price_history: tuple[PriceHistoryEntry, ...] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SchoolInfo:
    name: str
    type: SchoolType
    rating: float | None = None
    distance: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NeighborhoodInfo:
    walk_score: float | None = None
    transit_score: float | None = None
    bike_score: float | None = None
    schools: tuple[SchoolInfo, ...] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceReference:
    """Where one provider record came from and how much it is trusted."""

    source: Provider
    fetched_at: datetime
    confidence: float
    url: str | None = None
    fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 1:
            raise ValueError(f"Source confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True, slots=True, kw_only=True)
class ConfidenceRecord:
    overall: float = 0.0
    zillow: float = 0.0
    redfin: float = 0.0
    county_assessor: float = 0.0

    @classmethod
    def from_sources(cls, by_source: Mapping[Provider, float]) -> ConfidenceRecord:
        zillow = by_source.get(Provider.ZILLOW, 0.0)
        redfin = by_source.get(Provider.REDFIN, 0.0)
        county_assessor = by_source.get(Provider.COUNTY_ASSESSOR, 0.0)
        return cls(
            overall=max(zillow, redfin, county_assessor),
            zillow=zillow,
            redfin=redfin,
            county_assessor=county_assessor,
        )

    def for_source(self, source: Provider) -> float:
        match source:
            case Provider.ZILLOW:
                return self.zillow
            case Provider.REDFIN:
                return self.redfin
            case Provider.COUNTY_ASSESSOR:
                return self.county_assessor


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyMetadata:
    completeness: int
    data_quality: DataQuality
    confidence: ConfidenceRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalProperty:
    """The single merged property record."""

    id: str
    version: int = 1
    created_at: datetime
    updated_at: datetime
    address: PropertyAddress
    location: PropertyLocation
    details: PropertyDetails
    regulatory: RegulatoryInfo
    valuation: ValuationInfo
    neighborhood: NeighborhoodInfo
    metadata: PropertyMetadata
    sources: tuple[SourceReference, ...] = ()
    # Filled by a separate room-capture workflow, never by the merge.
    rooms: tuple[Mapping[str, object], ...] = ()
