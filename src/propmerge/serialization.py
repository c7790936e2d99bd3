"""JSON-compatible rendering of merge results.

Keys are camelCased to match the providers' wire format. Dumped with
``sort_keys=True`` the output is byte-stable for identical merge inputs.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, cast

from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from propmerge.domain.model import MergeResult

type JsonValue = None | bool | int | float | str | list[JsonValue] | dict[str, JsonValue]


def to_jsonable(value: object) -> JsonValue:
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, Enum):
        return cast(JsonValue, value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(item.name): to_jsonable(getattr(value, item.name)) for item in fields(value)
        }
    if isinstance(value, Mapping):
        mapping = cast(Mapping[object, object], value)
        return {str(key): to_jsonable(item) for key, item in mapping.items()}
    if isinstance(value, list | tuple):
        return [to_jsonable(item) for item in cast(list[object] | tuple[object, ...], value)]
    raise TypeError(f"Cannot serialize value of type {type(value).__name__}")


def merge_result_to_dict(result: MergeResult) -> dict[str, JsonValue]:
    return cast(dict[str, JsonValue], to_jsonable(result))


def dumps_merge_result(result: MergeResult, *, indent: int | None = 2) -> str:
    return json.dumps(merge_result_to_dict(result), indent=indent, sort_keys=True)
