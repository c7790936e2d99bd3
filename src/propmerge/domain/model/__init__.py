"""Public domain model surface."""

from __future__ import annotations

from propmerge.domain.model.audit import Conflict, ConflictCandidate, MergeResult
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
    ResolutionMethod,
    SchoolType,
)
from propmerge.domain.model.property import (
    SQFT_PER_ACRE,
    UNKNOWN_ZONING,
    AreaMeasurement,
    BasementInfo,
    CanonicalProperty,
    ConfidenceRecord,
    ConstructionDetails,
    GarageInfo,
    HoaInfo,
    HvacSystem,
    NeighborhoodInfo,
    PermitRecord,
    PriceHistoryEntry,
    PropertyAddress,
    PropertyDetails,
    PropertyLocation,
    PropertyMetadata,
    RegulatoryInfo,
    RoofDetails,
    SchoolInfo,
    SourceReference,
    ValuationInfo,
)

__all__ = [  # noqa: RUF022
    # enums
    "AreaUnit",
    "BasementType",
    "DataQuality",
    "FoundationType",
    "GarageType",
    "HoaFrequency",
    "PriceEvent",
    "PropertyType",
    "Provider",
    "ResolutionMethod",
    "SchoolType",
    # canonical entity
    "SQFT_PER_ACRE",
    "UNKNOWN_ZONING",
    "AreaMeasurement",
    "BasementInfo",
    "CanonicalProperty",
    "ConfidenceRecord",
    "ConstructionDetails",
    "GarageInfo",
    "HoaInfo",
    "HvacSystem",
    "NeighborhoodInfo",
    "PermitRecord",
    "PriceHistoryEntry",
    "PropertyAddress",
    "PropertyDetails",
    "PropertyLocation",
    "PropertyMetadata",
    "RegulatoryInfo",
    "RoofDetails",
    "SchoolInfo",
    "SourceReference",
    "ValuationInfo",
    # merge report
    "Conflict",
    "ConflictCandidate",
    "MergeResult",
]
