"""Normalizers that canonicalize loosely formatted provider values.

Every function here is total: unparsable input yields ``None`` (or the
documented fallback), never an exception.
"""

from __future__ import annotations

import re

from propmerge.domain.model import (
    AreaMeasurement,
    AreaUnit,
    BasementInfo,
    BasementType,
    FoundationType,
    GarageInfo,
    GarageType,
    HoaFrequency,
    PriceEvent,
    PropertyAddress,
    PropertyType,
    SchoolType,
)

# Checked in order; duplex/triplex must win over the land/lot match.
_PROPERTY_TYPE_MARKERS: tuple[tuple[PropertyType, tuple[str, ...]], ...] = (
    (PropertyType.CONDO, ("condo",)),
    (PropertyType.TOWNHOUSE, ("townhouse", "town home")),
    (PropertyType.MULTI_FAMILY, ("multi", "duplex", "triplex")),
    (PropertyType.MANUFACTURED, ("manufactured", "mobile")),
    (PropertyType.COMMERCIAL, ("commercial",)),
    (PropertyType.LAND, ("land", "lot")),
)

_ACRES_PATTERN = re.compile(r"(\d+(?:\.\d+)?|\.\d+)\s*acres?")
_SQFT_PATTERN = re.compile(r"(\d+(?:\.\d+)?|\.\d+)\s*(?:sq\s*ft|sqft|sf)")
_BARE_NUMBER_PATTERN = re.compile(r"(\d+(?:\.\d+)?|\.\d+)")
_STATE_ZIP_PATTERN = re.compile(r"([A-Z]{2})?\s*(\d{5}(?:-\d{4})?)?", re.IGNORECASE)
_DISTANCE_PATTERN = re.compile(r"-?(\d+(?:\.\d+)?|\.\d+)")
_COUNT_PATTERN = re.compile(r"\d+")

DEFAULT_GARAGE_SPACES = 2


def normalize_property_type(raw: str | None) -> PropertyType:
    """Map free text onto the closed property-type enum.

    Unknown or missing text falls through to ``single-family``.
    """

    if not raw:
        return PropertyType.SINGLE_FAMILY
    text = raw.lower()
    for property_type, markers in _PROPERTY_TYPE_MARKERS:
        if any(marker in text for marker in markers):
            return property_type
    return PropertyType.SINGLE_FAMILY


def parse_lot_size(raw: str | None) -> AreaMeasurement | None:
    """Parse ``"0.25 acres"`` / ``"10,890 sqft"`` / ``"5000"`` into a measurement."""

    if not raw:
        return None
    text = raw.lower().replace(",", "")

    if match := _ACRES_PATTERN.search(text):
        return AreaMeasurement(float(match.group(1)), AreaUnit.ACRES)
    if match := _SQFT_PATTERN.search(text):
        return AreaMeasurement(float(match.group(1)), AreaUnit.SQFT)
    if match := _BARE_NUMBER_PATTERN.search(text):
        return AreaMeasurement(float(match.group(1)), AreaUnit.SQFT)
    return None


def parse_address(raw: str) -> PropertyAddress:
    """Split ``"street, city, ST 12345"`` into components.

    Heuristic only: streets containing commas shift every later component.
    ``formatted`` always keeps the input verbatim.
    """

    parts = [part.strip() for part in raw.split(",")]
    street = parts[0]
    city = parts[1] if len(parts) >= 2 else ""
    state = ""
    zip_code = ""

    if len(parts) >= 3:
        match = _STATE_ZIP_PATTERN.match(parts[2])
        if match:
            state = (match.group(1) or "").upper()
            zip_code = match.group(2) or ""

    return PropertyAddress(
        street=street,
        city=city,
        state=state,
        zip=zip_code,
        county="",
        country="US",
        formatted=raw,
    )


def classify_foundation(raw: str) -> FoundationType:
    text = raw.lower()
    if "slab" in text:
        return FoundationType.SLAB
    if "basement" in text:
        return FoundationType.BASEMENT
    if "crawl" in text:
        return FoundationType.CRAWL
    return FoundationType.OTHER


def classify_price_event(raw: str | None) -> PriceEvent:
    text = (raw or "").lower()
    if "sold" in text:
        return PriceEvent.SOLD
    if "list" in text:
        return PriceEvent.LISTED
    return PriceEvent.PRICE_CHANGE


def classify_school_type(raw: str | None) -> SchoolType:
    text = (raw or "").lower()
    if "elementary" in text:
        return SchoolType.ELEMENTARY
    if "middle" in text:
        return SchoolType.MIDDLE
    if "high" in text:
        return SchoolType.HIGH
    return SchoolType.PRIVATE


def classify_hoa_frequency(raw: str | None) -> HoaFrequency:
    text = (raw or "").lower()
    if "quarter" in text:
        return HoaFrequency.QUARTERLY
    if "annual" in text or "year" in text:
        return HoaFrequency.ANNUAL
    return HoaFrequency.MONTHLY


def parse_distance(raw: str | None) -> float | None:
    """Leading number of ``"0.4 mi"``; ``None`` for missing or zero distances."""

    if not raw:
        return None
    match = _DISTANCE_PATTERN.search(raw)
    if match is None:
        return None
    return float(match.group(0)) or None


def parse_garage(raw: str) -> GarageInfo:
    """Read garage type and spaces from assessor text such as ``"2-car detached"``."""

    text = raw.lower()
    if "carport" in text:
        garage_type = GarageType.CARPORT
    elif "detached" in text:
        garage_type = GarageType.DETACHED
    else:
        garage_type = GarageType.ATTACHED
    match = _COUNT_PATTERN.search(text)
    spaces = int(match.group(0)) if match else DEFAULT_GARAGE_SPACES
    return GarageInfo(type=garage_type, spaces=spaces or DEFAULT_GARAGE_SPACES)


def parse_basement(raw: str) -> BasementInfo:
    text = raw.lower()
    basement_type = BasementType.PARTIAL if "partial" in text else BasementType.FULL
    finished = "finished" in text and "unfinished" not in text
    return BasementInfo(type=basement_type, finished=finished)
