"""Client-side sum/average over fetched documents."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from firestore_mcp.firestore_api import DocumentRecord
from firestore_mcp.tools.values import MISSING

Number = Union[int, float]


@dataclass(frozen=True, slots=True)
class NumericStats:
    sum: Number
    average: Number
    valid_count: int
    invalid_count: int


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def lookup_field(data: Mapping[str, Any], field: str) -> Any:
    """Return the value at ``field`` (top-level key, then dotted path) or MISSING."""
    if field in data:
        return data[field]
    current: Any = data
    for part in field.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


def collect_numeric_stats(docs: Iterable[DocumentRecord], field: str) -> NumericStats:
    """
    Sum the numeric values of ``field`` across ``docs``.

    Documents where the field is absent count towards neither total; documents
    where it is present but not a finite number are counted as invalid.
    """
    total: Number = 0
    valid_count = 0
    invalid_count = 0

    for doc in docs:
        value = lookup_field(doc.data, field)
        if value is MISSING:
            continue
        if _is_finite_number(value):
            total += value
            valid_count += 1
        else:
            invalid_count += 1

    average = total / valid_count if valid_count > 0 else 0
    return NumericStats(sum=total, average=average, valid_count=valid_count, invalid_count=invalid_count)


def format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def format_numeric_line(label: str, value: Number, invalid_count: int) -> str:
    base = f"{label}: {format_number(value)}"
    if invalid_count == 0:
        return base
    plural = "" if invalid_count == 1 else "s"
    return f"{base} (ignored {invalid_count} document{plural} with non-numeric values)"
