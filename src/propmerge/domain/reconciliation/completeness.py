"""Completeness scoring over a fixed checklist of canonical fields.

A field counts as populated when it is not ``None``, not ``0`` and not the
empty string. A genuine zero (no bedrooms on a land parcel) therefore scores
the same as an unknown value; the metric accepts that approximation.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from propmerge.domain.model import CanonicalProperty

type FieldProbe = Callable[[CanonicalProperty], object]

COMPLETENESS_CHECKLIST: Mapping[str, FieldProbe] = MappingProxyType(
    {
        "location.lat": lambda prop: prop.location.lat,
        "location.lng": lambda prop: prop.location.lng,
        "details.yearBuilt": lambda prop: prop.details.year_built,
        "details.livingArea": lambda prop: prop.details.living_area.value,
        "details.bedrooms": lambda prop: prop.details.bedrooms,
        "details.bathrooms": lambda prop: prop.details.bathrooms,
        "details.lotSize": lambda prop: prop.details.lot_size.value,
        "details.propertyType": lambda prop: prop.details.property_type,
        "regulatory.zoning": lambda prop: prop.regulatory.zoning,
        "regulatory.parcelNumber": lambda prop: prop.regulatory.parcel_number,
        "valuation.assessed": lambda prop: prop.valuation.assessed,
        "valuation.marketEstimate": lambda prop: prop.valuation.market_estimate,
        "valuation.taxAnnual": lambda prop: prop.valuation.tax_annual,
        "neighborhood.walkScore": lambda prop: prop.neighborhood.walk_score,
        "neighborhood.transitScore": lambda prop: prop.neighborhood.transit_score,
        "neighborhood.bikeScore": lambda prop: prop.neighborhood.bike_score,
        "address.street": lambda prop: prop.address.street,
        "address.city": lambda prop: prop.address.city,
        "address.state": lambda prop: prop.address.state,
        "address.zip": lambda prop: prop.address.zip,
    }
)


def is_populated(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def populated_fields(
    prop: CanonicalProperty,
    *,
    checklist: Mapping[str, FieldProbe] = COMPLETENESS_CHECKLIST,
) -> tuple[str, ...]:
    return tuple(name for name, probe in checklist.items() if is_populated(probe(prop)))


def score_completeness(
    prop: CanonicalProperty,
    *,
    checklist: Mapping[str, FieldProbe] = COMPLETENESS_CHECKLIST,
) -> int:
    """Percentage (0-100) of checklist fields populated on ``prop``."""

    if not checklist:
        return 0
    populated = len(populated_fields(prop, checklist=checklist))
    return math.floor(100 * populated / len(checklist) + 0.5)
