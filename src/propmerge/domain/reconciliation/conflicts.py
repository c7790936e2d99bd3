"""Disagreement detection between provider values.

Rules:
- fewer than two present values never conflict
- numbers conflict when their spread exceeds ``tolerance`` times the
  magnitude of their mean, so 1000 and 1030 agree while 1000 and 1100 do not
- strings conflict when they differ after trimming and case folding
- anything else (mixed or non-scalar types) is not reported as a conflict
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeGuard

from .policy import DEFAULT_NUMERIC_TOLERANCE

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


def _is_number(value: object) -> TypeGuard[int | float]:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _all_numbers(values: Sequence[object]) -> TypeGuard[Sequence[int | float]]:
    return all(_is_number(value) for value in values)


def _all_strings(values: Sequence[object]) -> TypeGuard[Sequence[str]]:
    return all(isinstance(value, str) for value in values)


def numbers_disagree(values: Sequence[int | float], *, tolerance: float) -> bool:
    mean = sum(values) / len(values)
    if mean == 0:
        return any(value != 0 for value in values)
    return max(values) - min(values) > tolerance * abs(mean)


def strings_disagree(values: Iterable[str]) -> bool:
    return len({value.strip().lower() for value in values}) > 1


def has_conflict(
    values: Iterable[object],
    *,
    tolerance: float = DEFAULT_NUMERIC_TOLERANCE,
) -> bool:
    """Return whether the present values in ``values`` meaningfully disagree."""

    present = [value for value in values if value is not None]
    if len(present) <= 1:
        return False
    if _all_numbers(present):
        return numbers_disagree(present, tolerance=tolerance)
    if _all_strings(present):
        return strings_disagree(present)
    return False
