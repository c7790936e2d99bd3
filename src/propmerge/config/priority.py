"""Source-priority policy loading from TOML files.

Expected layout::

    [source_priority]
    default = ["county-assessor", "zillow", "redfin"]
    zoning = ["county-assessor"]

    [numeric_tolerance]
    default = 0.05
    yearBuilt = 0

Entries are layered over the built-in policy, so a file only needs to list
the fields it changes.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from propmerge.domain.model import Provider
from propmerge.domain.reconciliation.policy import DEFAULT_SOURCE_PRIORITY

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

    from propmerge.domain.reconciliation.policy import SourcePriorityPolicy

_DEFAULT_KEY = "default"


def _providers(field_name: str, raw: object) -> tuple[Provider, ...]:
    if not isinstance(raw, list):
        raise ConfigurationError(f"Priority for {field_name!r} must be a list of provider names")
    providers: list[Provider] = []
    for item in cast(list[object], raw):
        try:
            providers.append(Provider(str(item)))
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown provider {item!r} in priority for {field_name!r}"
            ) from exc
    return tuple(providers)


def _tolerance(field_name: str, raw: object) -> float:
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        raise ConfigurationError(f"Tolerance for {field_name!r} must be a number")
    if raw < 0:
        raise ConfigurationError(f"Tolerance for {field_name!r} must be non-negative")
    return float(raw)


def _table(document: Mapping[str, object], name: str) -> Mapping[str, object]:
    table = document.get(name, {})
    if not isinstance(table, Mapping):
        raise ConfigurationError(f"[{name}] must be a table")
    return cast(Mapping[str, object], table)


def policy_from_document(
    document: Mapping[str, object],
    *,
    base: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
) -> SourcePriorityPolicy:
    """Layer a parsed TOML document over ``base``."""

    priority_table = _table(document, "source_priority")
    tolerance_table = _table(document, "numeric_tolerance")

    priorities = {
        name: _providers(name, raw) for name, raw in priority_table.items() if name != _DEFAULT_KEY
    }
    default = (
        _providers(_DEFAULT_KEY, priority_table[_DEFAULT_KEY])
        if _DEFAULT_KEY in priority_table
        else None
    )
    field_tolerances = {
        name: _tolerance(name, raw) for name, raw in tolerance_table.items() if name != _DEFAULT_KEY
    }
    numeric_tolerance = (
        _tolerance(_DEFAULT_KEY, tolerance_table[_DEFAULT_KEY])
        if _DEFAULT_KEY in tolerance_table
        else None
    )
    return base.with_overrides(
        priorities=priorities,
        default=default,
        numeric_tolerance=numeric_tolerance,
        field_tolerances=field_tolerances,
    )


def load_source_priority(
    path: Path,
    *,
    base: SourcePriorityPolicy = DEFAULT_SOURCE_PRIORITY,
) -> SourcePriorityPolicy:
    """Read a priority TOML file and layer it over ``base``."""

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise MissingConfigurationError(f"Priority file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid priority file {path}: {exc}") from exc
    return policy_from_document(document, base=base)
