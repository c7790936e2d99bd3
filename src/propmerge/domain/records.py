"""Pydantic models for raw provider records.

Provider fetchers hand over loosely typed key/value payloads. Validation here
never rejects a payload: blank strings become ``None``, numeric strings such as
``"$1,250,000"`` are coerced, and values of the wrong shape are dropped to
``None`` so the merge only ever sees absent or well-typed values.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import UnionType
from typing import TYPE_CHECKING, Self, Union, cast, get_args, get_origin

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from propmerge.domain.model import Provider

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_NUMBER_NOISE = str.maketrans("", "", "$,_ ")


def _member_types(annotation: object) -> tuple[object, ...]:
    if get_origin(annotation) in (Union, UnionType):
        return tuple(arg for arg in get_args(annotation) if arg is not type(None))
    return (annotation,)


def _coerce_number(value: object, *, integral: bool) -> int | float | None:
    number: float
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.translate(_NUMBER_NOISE)
        if not _NUMBER_PATTERN.fullmatch(cleaned):
            return None
        number = float(cleaned)
    else:
        return None
    if integral:
        return int(number) if number.is_integer() else None
    return number


def _coerce_text(value: object) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return None


def _coerce_item(value: object, item_type: object) -> object | None:
    if isinstance(item_type, type) and issubclass(item_type, BaseModel):
        return value if isinstance(value, (Mapping, item_type)) else None
    if item_type is str:
        return _coerce_text(value)
    return value


def _coerce(value: object, annotation: object) -> object:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    members = _member_types(annotation)
    for member in members:
        if member is float:
            return _coerce_number(value, integral=False)
        if member is int:
            return _coerce_number(value, integral=True)
        if member is str:
            return _coerce_text(value)
        if get_origin(member) is list:
            if not isinstance(value, list):
                return None
            (item_type,) = get_args(member)
            items = [_coerce_item(item, item_type) for item in cast(list[object], value)]
            return [item for item in items if item is not None]
        if isinstance(member, type) and issubclass(member, BaseModel):
            return value if isinstance(value, (Mapping, member)) else None
    return value


class ProviderRecordModel(BaseModel):
    """Base for lenient provider payload models (camelCase on the wire)."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def coerce_loose_value(cls, value: object, info: ValidationInfo) -> object:
        if value is None or info.field_name is None:
            return value
        annotation = cls.model_fields[info.field_name].annotation
        coerced = _coerce(value, annotation)
        if coerced is None:
            log.debug("%s.%s: dropping unusable value %r", cls.__name__, info.field_name, value)
        return coerced

    @classmethod
    def from_payload(cls, payload: object) -> Self | None:
        """Validate ``payload``; anything that is not a mapping yields ``None``."""

        if payload is None:
            return None
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, Mapping):
            log.warning("%s: ignoring non-mapping payload of type %s", cls.__name__, type(payload))
            return None
        return cls.model_validate(payload)

    def populated_fields(self) -> tuple[str, ...]:
        """Wire names of fields carrying a value (empty lists count as absent)."""

        names: list[str] = []
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None or value == []:
                continue
            names.append(info.alias or name)
        return tuple(names)


# ---------------------------------------------------------------------------
# Zillow
# ---------------------------------------------------------------------------


class ZillowPriceHistoryItem(ProviderRecordModel):
    date: str | None = None
    price: float | None = None
    event: str | None = None


class ZillowTaxHistoryItem(ProviderRecordModel):
    year: int | None = None
    tax: float | None = None
    assessment: float | None = None


class ZillowSchool(ProviderRecordModel):
    name: str | None = None
    rating: float | None = None
    distance: str | None = None
    type: str | None = None


class ZillowRecord(ProviderRecordModel):
    zpid: str | None = None
    address: str | None = None
    price: float | None = None
    zestimate: float | None = None
    rent_zestimate: float | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    sqft: float | None = None
    lot_size: str | None = None
    year_built: int | None = None
    property_type: str | None = None
    home_status: str | None = None
    description: str | None = None
    facts: list[str] | None = None
    tax_history: list[ZillowTaxHistoryItem] | None = None
    price_history: list[ZillowPriceHistoryItem] | None = None
    schools: list[ZillowSchool] | None = None
    walk_score: float | None = None
    transit_score: float | None = None
    bike_score: float | None = None
    latitude: float | None = None
    longitude: float | None = None


# ---------------------------------------------------------------------------
# Redfin
# ---------------------------------------------------------------------------


class RedfinTaxInfo(ProviderRecordModel):
    annual_amount: float | None = None
    assessed_value: float | None = None


class RedfinHoa(ProviderRecordModel):
    fee: float | None = None
    frequency: str | None = None


class RedfinRecord(ProviderRecordModel):
    listing_id: str | None = None
    address: str | None = None
    price: float | None = None
    estimate: float | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    sqft: float | None = None
    lot_size: str | None = None
    year_built: int | None = None
    property_type: str | None = None
    status: str | None = None
    description: str | None = None
    features: list[str] | None = None
    tax_info: RedfinTaxInfo | None = None
    hoa: RedfinHoa | None = None
    latitude: float | None = None
    longitude: float | None = None


# ---------------------------------------------------------------------------
# County assessor
# ---------------------------------------------------------------------------


class CountyAssessorPermit(ProviderRecordModel):
    date: str | None = None
    type: str | None = None
    description: str | None = None


class CountyAssessorRecord(ProviderRecordModel):
    parcel_number: str | None = None
    owner_name: str | None = None
    legal_description: str | None = None
    zoning: str | None = None
    assessed_value: float | None = None
    land_value: float | None = None
    improvement_value: float | None = None
    tax_amount: float | None = None
    lot_size: str | None = None
    lot_dimensions: str | None = None
    year_built: int | None = None
    sqft: float | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    stories: float | None = None
    construction: str | None = None
    foundation: str | None = None
    roof_type: str | None = None
    heating: str | None = None
    cooling: str | None = None
    garage: str | None = None
    basement: str | None = None
    permit_history: list[CountyAssessorPermit] | None = None


type ProviderRecord = ZillowRecord | RedfinRecord | CountyAssessorRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceRecords:
    """At most one raw record per provider family."""

    zillow: ZillowRecord | None = None
    redfin: RedfinRecord | None = None
    county_assessor: CountyAssessorRecord | None = None

    @classmethod
    def from_payloads(
        cls,
        *,
        zillow: object = None,
        redfin: object = None,
        county_assessor: object = None,
    ) -> SourceRecords:
        return cls(
            zillow=ZillowRecord.from_payload(zillow),
            redfin=RedfinRecord.from_payload(redfin),
            county_assessor=CountyAssessorRecord.from_payload(county_assessor),
        )

    def record_for(self, provider: Provider) -> ProviderRecord | None:
        match provider:
            case Provider.ZILLOW:
                return self.zillow
            case Provider.REDFIN:
                return self.redfin
            case Provider.COUNTY_ASSESSOR:
                return self.county_assessor

    def supplied(self) -> Iterator[tuple[Provider, ProviderRecord]]:
        """Yield providers that supplied a record, in canonical provider order."""

        for provider in Provider:
            record = self.record_for(provider)
            if record is not None:
                yield provider, record
