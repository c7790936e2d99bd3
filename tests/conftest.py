from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from propmerge.domain.model import Provider
from propmerge.domain.reconciliation import PropertyMerger, SourceReferences
from tests.helpers.sources import ADDRESS, FIXED_NOW, make_reference

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def merger(fixed_clock: Callable[[], datetime]) -> PropertyMerger:
    return PropertyMerger(id_factory=lambda: "prop_test", clock=fixed_clock)


@pytest.fixture
def zillow_payload() -> dict[str, object]:
    return {
        "zpid": "2077715",
        "address": ADDRESS,
        "price": "$350,000",
        "zestimate": 352000,
        "bedrooms": 3,
        "bathrooms": 2,
        "sqft": 1800,
        "lotSize": "0.25 acres",
        "yearBuilt": 1998,
        "propertyType": "Single Family Residence",
        "walkScore": 65,
        "transitScore": 40,
        "bikeScore": 55,
        "latitude": 39.7817,
        "longitude": -89.6501,
        "schools": [
            {"name": "Lincoln Elementary", "rating": 8, "distance": "0.4 mi", "type": "Elementary"},
        ],
        "priceHistory": [{"date": "2020-05-01", "price": 310000, "event": "Sold"}],
    }


@pytest.fixture
def redfin_payload() -> dict[str, object]:
    return {
        "listingId": "rf-881",
        "address": ADDRESS,
        "price": 349000,
        "estimate": 355000,
        "bedrooms": 3,
        "bathrooms": 2.5,
        "sqft": 1820,
        "lotSize": "10,890 sqft",
        "yearBuilt": 1998,
        "propertyType": "House",
        "taxInfo": {"annualAmount": 5200},
        "hoa": {"fee": 150, "frequency": "Monthly"},
        "latitude": 39.7817,
        "longitude": -89.6501,
    }


@pytest.fixture
def assessor_payload() -> dict[str, object]:
    return {
        "parcelNumber": "14-22-301-005",
        "zoning": "R-1",
        "assessedValue": 120000,
        "taxAmount": 5100,
        "lotSize": "10,890 sq ft",
        "yearBuilt": 1998,
        "sqft": 1800,
        "bedrooms": 3,
        "bathrooms": 2,
        "stories": 2,
        "construction": "Frame",
        "foundation": "Poured concrete basement",
        "roofType": "Asphalt shingle",
        "heating": "Forced air",
        "cooling": "Central",
        "garage": "2-car attached",
        "basement": "Full, finished",
        "permitHistory": [{"date": "2015-06-01", "type": "Roof", "description": "Re-roof"}],
    }


@pytest.fixture
def references() -> SourceReferences:
    return SourceReferences(
        zillow=make_reference(Provider.ZILLOW, 0.85),
        redfin=make_reference(Provider.REDFIN, 0.8),
        county_assessor=make_reference(Provider.COUNTY_ASSESSOR, 0.95),
    )
