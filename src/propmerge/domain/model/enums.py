"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    ZILLOW = "zillow"
    REDFIN = "redfin"
    COUNTY_ASSESSOR = "county-assessor"


class PropertyType(StrEnum):
    SINGLE_FAMILY = "single-family"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    MULTI_FAMILY = "multi-family"
    MANUFACTURED = "manufactured"
    COMMERCIAL = "commercial"
    LAND = "land"


class AreaUnit(StrEnum):
    SQFT = "sqft"
    ACRES = "acres"


class FoundationType(StrEnum):
    SLAB = "slab"
    CRAWL = "crawl"
    BASEMENT = "basement"
    PIER = "pier"
    OTHER = "other"


class GarageType(StrEnum):
    ATTACHED = "attached"
    DETACHED = "detached"
    CARPORT = "carport"


class BasementType(StrEnum):
    FULL = "full"
    PARTIAL = "partial"
    CRAWL = "crawl"
    NONE = "none"


class HoaFrequency(StrEnum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class PriceEvent(StrEnum):
    SOLD = "sold"
    LISTED = "listed"
    PRICE_CHANGE = "price-change"


class SchoolType(StrEnum):
    ELEMENTARY = "elementary"
    MIDDLE = "middle"
    HIGH = "high"
    PRIVATE = "private"


class DataQuality(StrEnum):
    """Coarse quality tag derived from the completeness score."""

    ESTIMATED = "estimated"
    SCRAPED = "scraped"


class ResolutionMethod(StrEnum):
    """Tag naming the strategy that picked a conflicting field's value."""

    HIGHEST_CONFIDENCE = "highest-confidence"
    MOST_RECENT = "most-recent"
    USER_VERIFIED = "user-verified"
    AVERAGE = "average"
