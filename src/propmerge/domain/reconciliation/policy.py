"""Source-priority policy for field resolution.

The policy is plain configuration data: which providers are authoritative for
which canonical field, in what order, plus the numeric tolerance used when
deciding whether providers disagree. It is immutable once built, so one
instance can be shared by concurrent merges.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from propmerge.domain.model import Provider

DEFAULT_NUMERIC_TOLERANCE = 0.05

_ASSESSOR_FIRST = (Provider.COUNTY_ASSESSOR, Provider.ZILLOW, Provider.REDFIN)
_LISTINGS_FIRST = (Provider.ZILLOW, Provider.REDFIN, Provider.COUNTY_ASSESSOR)
_LISTINGS_ONLY = (Provider.ZILLOW, Provider.REDFIN)


def _freeze_priorities(
    priorities: Mapping[str, tuple[Provider, ...]],
) -> Mapping[str, tuple[Provider, ...]]:
    return MappingProxyType({name: tuple(order) for name, order in priorities.items()})


def _freeze_tolerances(tolerances: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType(dict(tolerances))


@dataclass(frozen=True, slots=True, kw_only=True)
class SourcePriorityPolicy:
    """Per-field provider ordering plus conflict tolerances."""

    priorities: Mapping[str, tuple[Provider, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default: tuple[Provider, ...] = _ASSESSOR_FIRST
    numeric_tolerance: float = DEFAULT_NUMERIC_TOLERANCE
    field_tolerances: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if self.numeric_tolerance < 0:
            raise ValueError("Numeric tolerance must be non-negative")
        for name, tolerance in self.field_tolerances.items():
            if tolerance < 0:
                raise ValueError(f"Numeric tolerance for {name!r} must be non-negative")
        object.__setattr__(self, "priorities", _freeze_priorities(self.priorities))
        object.__setattr__(self, "default", tuple(self.default))
        object.__setattr__(self, "field_tolerances", _freeze_tolerances(self.field_tolerances))

    def priority_for(self, field_name: str) -> tuple[Provider, ...]:
        return self.priorities.get(field_name, self.default)

    def tolerance_for(self, field_name: str) -> float:
        return self.field_tolerances.get(field_name, self.numeric_tolerance)

    def rank(self, field_name: str, source: Provider) -> int | None:
        """Position of ``source`` in the field's priority list, ``None`` if unlisted."""

        order = self.priority_for(field_name)
        if source not in order:
            return None
        return order.index(source)

    def with_overrides(
        self,
        *,
        priorities: Mapping[str, tuple[Provider, ...]] | None = None,
        default: tuple[Provider, ...] | None = None,
        numeric_tolerance: float | None = None,
        field_tolerances: Mapping[str, float] | None = None,
    ) -> SourcePriorityPolicy:
        """Return a new policy layering the given entries over this one."""

        return SourcePriorityPolicy(
            priorities={**self.priorities, **(priorities or {})},
            default=self.default if default is None else default,
            numeric_tolerance=(
                self.numeric_tolerance if numeric_tolerance is None else numeric_tolerance
            ),
            field_tolerances={**self.field_tolerances, **(field_tolerances or {})},
        )


DEFAULT_SOURCE_PRIORITY = SourcePriorityPolicy(
    priorities={
        # regulatory: the assessor is the registry of record
        "parcelNumber": _ASSESSOR_FIRST,
        "zoning": _ASSESSOR_FIRST,
        "assessedValue": _ASSESSOR_FIRST,
        "taxAmount": _ASSESSOR_FIRST,
        "legalDescription": (Provider.COUNTY_ASSESSOR,),
        "permits": (Provider.COUNTY_ASSESSOR,),
        # structure
        "yearBuilt": _ASSESSOR_FIRST,
        "sqft": _ASSESSOR_FIRST,
        "bedrooms": _ASSESSOR_FIRST,
        "bathrooms": _ASSESSOR_FIRST,
        "stories": _ASSESSOR_FIRST,
        "construction": (Provider.COUNTY_ASSESSOR,),
        "foundation": (Provider.COUNTY_ASSESSOR,),
        # market
        "price": _LISTINGS_FIRST,
        "marketEstimate": _LISTINGS_ONLY,
        "priceHistory": _LISTINGS_ONLY,
        # location and scores
        "walkScore": _LISTINGS_ONLY,
        "transitScore": (Provider.ZILLOW,),
        "bikeScore": (Provider.ZILLOW,),
        "schools": _LISTINGS_ONLY,
        "latitude": _LISTINGS_ONLY,
        "longitude": _LISTINGS_ONLY,
        "address": _LISTINGS_ONLY,
        "hoa": (Provider.REDFIN, Provider.ZILLOW),
    },
    default=_ASSESSOR_FIRST,
    numeric_tolerance=DEFAULT_NUMERIC_TOLERANCE,
    # a construction year is an identifier, not a measurement
    field_tolerances={"yearBuilt": 0.0},
)
