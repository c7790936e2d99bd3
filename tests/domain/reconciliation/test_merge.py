from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from propmerge.domain.model import (
    AreaMeasurement,
    AreaUnit,
    BasementType,
    ConstructionDetails,
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
from propmerge.domain.records import SourceRecords
from propmerge.domain.reconciliation import (
    AverageStrategy,
    MostRecentStrategy,
    PropertyMerger,
    SourceReferences,
    UserVerifiedStrategy,
    merge_property_data,
)
from propmerge.serialization import dumps_merge_result
from tests.helpers.sources import ADDRESS, FIXED_NOW, make_reference

if TYPE_CHECKING:
    from collections.abc import Callable

    from propmerge.domain.model import MergeResult


def _merge_all(
    merger: PropertyMerger,
    references: SourceReferences,
    zillow: dict[str, object],
    redfin: dict[str, object],
    assessor: dict[str, object],
) -> MergeResult:
    records = SourceRecords.from_payloads(zillow=zillow, redfin=redfin, county_assessor=assessor)
    return merger.merge(ADDRESS, records, references)


def test_merge_assembles_every_section(
    merger: PropertyMerger,
    references: SourceReferences,
    zillow_payload: dict[str, object],
    redfin_payload: dict[str, object],
    assessor_payload: dict[str, object],
) -> None:
    result = _merge_all(merger, references, zillow_payload, redfin_payload, assessor_payload)
    prop = result.property

    assert prop.id == "prop_test"
    assert prop.version == 1
    assert prop.created_at == FIXED_NOW
    assert prop.updated_at == FIXED_NOW

    assert prop.address.street == "123 Main St"
    assert prop.address.city == "Springfield"
    assert prop.address.state == "IL"
    assert prop.address.zip == "62701"
    assert prop.location.lat == 39.7817
    assert prop.location.lng == -89.6501

    details = prop.details
    assert details.property_type is PropertyType.SINGLE_FAMILY
    assert details.year_built == 1998
    assert details.stories == 2
    assert details.lot_size == AreaMeasurement(10890.0, AreaUnit.SQFT)
    assert details.living_area == AreaMeasurement(1800.0)
    assert details.bedrooms == 3
    assert details.bathrooms == 2
    assert details.construction == ConstructionDetails(style="", framing="Frame")
    assert details.foundation is FoundationType.BASEMENT
    assert details.roof is not None
    assert details.roof.material == "Asphalt shingle"
    assert details.hvac is not None
    assert details.hvac.heating == "Forced air"
    assert details.hvac.fuel == "Unknown"
    assert details.garage is not None
    assert details.garage.type is GarageType.ATTACHED
    assert details.garage.spaces == 2
    assert details.basement is not None
    assert details.basement.type is BasementType.FULL
    assert details.basement.finished is True

    regulatory = prop.regulatory
    assert regulatory.zoning == "R-1"
    assert regulatory.parcel_number == "14-22-301-005"
    assert regulatory.permits is not None
    assert [permit.type for permit in regulatory.permits] == ["Roof"]
    assert regulatory.permits[0].status == "completed"
    assert regulatory.hoa is not None
    assert regulatory.hoa.fee == 150
    assert regulatory.hoa.frequency is HoaFrequency.MONTHLY

    valuation = prop.valuation
    assert valuation.assessed == 120000
    assert valuation.market_estimate == 352000
    assert valuation.tax_annual == 5100
    assert valuation.price_history is not None
    assert valuation.price_history[0].event is PriceEvent.SOLD
    assert valuation.price_history[0].price == 310000

    neighborhood = prop.neighborhood
    assert neighborhood.walk_score == 65
    assert neighborhood.transit_score == 40
    assert neighborhood.bike_score == 55
    assert neighborhood.schools is not None
    assert neighborhood.schools[0].type is SchoolType.ELEMENTARY
    assert neighborhood.schools[0].distance == 0.4

    assert [source.source for source in result.sources] == [
        Provider.ZILLOW,
        Provider.REDFIN,
        Provider.COUNTY_ASSESSOR,
    ]
    assert prop.sources == result.sources
    assert prop.metadata.confidence.overall == 0.95
    assert prop.metadata.confidence.zillow == 0.85
    assert prop.metadata.confidence.county_assessor == 0.95
    assert prop.metadata.confidence.for_source(Provider.REDFIN) == 0.8
    assert prop.metadata.data_quality is DataQuality.SCRAPED


def test_merge_records_bathroom_disagreement_only(
    merger: PropertyMerger,
    references: SourceReferences,
    zillow_payload: dict[str, object],
    redfin_payload: dict[str, object],
    assessor_payload: dict[str, object],
) -> None:
    result = _merge_all(merger, references, zillow_payload, redfin_payload, assessor_payload)

    assert [conflict.field for conflict in result.conflicts] == ["bathrooms"]
    conflict = result.conflicts[0]
    assert [(value.source, value.value) for value in conflict.values] == [
        (Provider.COUNTY_ASSESSOR, 2),
        (Provider.ZILLOW, 2),
        (Provider.REDFIN, 2.5),
    ]
    assert conflict.resolved == 2
    assert conflict.resolution is ResolutionMethod.HIGHEST_CONFIDENCE


def test_merge_is_deterministic(
    merger: PropertyMerger,
    references: SourceReferences,
    zillow_payload: dict[str, object],
    redfin_payload: dict[str, object],
    assessor_payload: dict[str, object],
) -> None:
    first = _merge_all(merger, references, zillow_payload, redfin_payload, assessor_payload)
    second = _merge_all(merger, references, zillow_payload, redfin_payload, assessor_payload)

    assert first == second
    assert dumps_merge_result(first) == dumps_merge_result(second)


def test_priority_overrides_confidence_and_records_conflict(merger: PropertyMerger) -> None:
    records = SourceRecords.from_payloads(
        county_assessor={"yearBuilt": 1998},
        zillow={"yearBuilt": 2001},
    )
    references = SourceReferences(
        county_assessor=make_reference(Provider.COUNTY_ASSESSOR, 0.9),
        zillow=make_reference(Provider.ZILLOW, 0.95),
    )

    result = merger.merge(ADDRESS, records, references)

    assert result.property.details.year_built == 1998
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.field == "yearBuilt"
    assert conflict.resolved == 1998
    assert {(value.source, value.value, value.confidence) for value in conflict.values} == {
        (Provider.COUNTY_ASSESSOR, 1998, 0.9),
        (Provider.ZILLOW, 2001, 0.95),
    }


def test_numeric_tolerance_on_living_area(
    merger: PropertyMerger,
    references: SourceReferences,
) -> None:
    close = SourceRecords.from_payloads(county_assessor={"sqft": 1000}, zillow={"sqft": 1030})
    apart = SourceRecords.from_payloads(county_assessor={"sqft": 1000}, zillow={"sqft": 1100})

    assert merger.merge(ADDRESS, close, references).conflicts == ()
    conflicts = merger.merge(ADDRESS, apart, references).conflicts
    assert [conflict.field for conflict in conflicts] == ["sqft"]


def test_lot_sizes_compare_in_square_feet(
    merger: PropertyMerger,
    references: SourceReferences,
) -> None:
    records = SourceRecords.from_payloads(
        county_assessor={"lotSize": "0.25 acres"},
        zillow={"lotSize": "10,890 sqft"},
    )

    result = merger.merge(ADDRESS, records, references)

    assert result.conflicts == ()
    assert result.property.details.lot_size == AreaMeasurement(0.25, AreaUnit.ACRES)


def test_property_types_are_normalized_before_comparison(
    merger: PropertyMerger,
    references: SourceReferences,
) -> None:
    agreeing = SourceRecords.from_payloads(
        zillow={"propertyType": "CONDO"},
        redfin={"propertyType": "Condominium"},
    )
    disagreeing = SourceRecords.from_payloads(
        zillow={"propertyType": "Condo"},
        redfin={"propertyType": "Single Family"},
    )

    assert merger.merge(ADDRESS, agreeing, references).conflicts == ()
    result = merger.merge(ADDRESS, disagreeing, references)
    assert result.property.details.property_type is PropertyType.CONDO
    assert [conflict.field for conflict in result.conflicts] == ["propertyType"]


def test_empty_merge_returns_mostly_empty_property(merger: PropertyMerger) -> None:
    result = merger.merge("742 Evergreen Terrace")
    prop = result.property

    assert prop.address.formatted == "742 Evergreen Terrace"
    assert prop.address.street == "742 Evergreen Terrace"
    assert (prop.location.lat, prop.location.lng) == (0.0, 0.0)
    assert prop.regulatory.zoning == "Unknown"
    assert prop.details.property_type is PropertyType.SINGLE_FAMILY
    assert result.completeness == 0
    assert result.conflicts == ()
    assert result.sources == ()
    assert prop.metadata.data_quality is DataQuality.ESTIMATED
    assert prop.metadata.confidence.overall == 0.0


def test_records_without_reference_get_zero_confidence(merger: PropertyMerger) -> None:
    records = SourceRecords.from_payloads(zillow={"walkScore": 70})

    result = merger.merge(ADDRESS, records)

    assert result.sources == ()
    assert result.property.neighborhood.walk_score == 70
    assert result.property.metadata.confidence.zillow == 0.0


def test_references_for_absent_records_are_ignored(
    merger: PropertyMerger,
    references: SourceReferences,
) -> None:
    records = SourceRecords.from_payloads(redfin={"price": 100000})

    result = merger.merge(ADDRESS, records, references)

    assert [source.source for source in result.sources] == [Provider.REDFIN]
    assert result.property.metadata.confidence.zillow == 0.0
    assert result.property.metadata.confidence.overall == 0.8


def test_average_strategy_tags_conflicts(fixed_clock: Callable[[], datetime]) -> None:
    merger = PropertyMerger(strategy=AverageStrategy(), id_factory=lambda: "p", clock=fixed_clock)
    records = SourceRecords.from_payloads(county_assessor={"sqft": 1000}, zillow={"sqft": 1100})
    references = SourceReferences(
        county_assessor=make_reference(Provider.COUNTY_ASSESSOR, 0.9),
        zillow=make_reference(Provider.ZILLOW, 0.7),
    )

    result = merger.merge(ADDRESS, records, references)

    assert result.property.details.living_area == AreaMeasurement(1050.0)
    assert result.conflicts[0].resolution is ResolutionMethod.AVERAGE


def test_most_recent_strategy_uses_fetch_times(fixed_clock: Callable[[], datetime]) -> None:
    merger = PropertyMerger(
        strategy=MostRecentStrategy(),
        id_factory=lambda: "p",
        clock=fixed_clock,
    )
    records = SourceRecords.from_payloads(
        county_assessor={"yearBuilt": 1998},
        zillow={"yearBuilt": 2001},
    )
    references = SourceReferences(
        county_assessor=make_reference(
            Provider.COUNTY_ASSESSOR,
            0.9,
            fetched_at=datetime(2020, 1, 1, tzinfo=UTC),
        ),
        zillow=make_reference(Provider.ZILLOW, 0.95),
    )

    result = merger.merge(ADDRESS, records, references)

    assert result.property.details.year_built == 2001
    assert result.conflicts[0].resolution is ResolutionMethod.MOST_RECENT


def test_incomplete_nested_entries_are_skipped(
    merger: PropertyMerger,
    references: SourceReferences,
) -> None:
    records = SourceRecords.from_payloads(
        zillow={
            "priceHistory": [{"date": "2019-01-01"}, {"date": "2021-04-02", "price": "$400,000"}],
            "schools": [{"rating": 7}],
        },
        redfin={"hoa": {"frequency": "Monthly"}},
    )

    result = merger.merge(ADDRESS, records, references)

    price_history = result.property.valuation.price_history
    assert price_history is not None
    assert [entry.date for entry in price_history] == ["2021-04-02"]
    assert price_history[0].event is PriceEvent.PRICE_CHANGE
    assert result.property.neighborhood.schools is None
    assert result.property.regulatory.hoa is None


def test_merge_property_data_uses_given_merger(merger: PropertyMerger) -> None:
    result = merge_property_data(ADDRESS, merger=merger)

    assert result.property.id == "prop_test"
    assert result.property.address.city == "Springfield"


def test_default_merger_generates_prefixed_ids() -> None:
    result = merge_property_data(ADDRESS)

    assert result.property.id.startswith("prop_")
    assert result.property.created_at.tzinfo is not None


def test_user_verified_property_type_is_normalized(fixed_clock: Callable[[], datetime]) -> None:
    merger = PropertyMerger(
        strategy=UserVerifiedStrategy(overrides={"propertyType": "Condominium"}),
        id_factory=lambda: "p",
        clock=fixed_clock,
    )
    records = SourceRecords.from_payloads(zillow={"propertyType": "Single Family Residence"})

    result = merger.merge(ADDRESS, records, SourceReferences())

    assert result.property.details.property_type is PropertyType.CONDO


def test_listing_address_replaces_raw_address(merger: PropertyMerger) -> None:
    records = SourceRecords.from_payloads(zillow={"address": "123 Main St"})

    address = merger.merge(ADDRESS, records, SourceReferences()).property.address

    assert address.street == "123 Main St"
    assert address.city == ""
    assert address.formatted == "123 Main St"
