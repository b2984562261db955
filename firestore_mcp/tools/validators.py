"""Argument validation for the Firestore tools.

Raw tool arguments arrive as untyped JSON. Each ``parse_*`` function either
returns a frozen, normalized structure or raises ``InvalidArgumentError`` with
a message naming the offending field or index. Nothing is coerced silently and
invalid entries are never dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from firestore_mcp.config import DEFAULT_SAMPLE_SIZE
from firestore_mcp.tools.values import MISSING

WHERE_OPERATORS: Tuple[str, ...] = (
    "==",
    "!=",
    "<",
    "<=",
    ">",
    ">=",
    "array-contains",
    "array-contains-any",
    "in",
    "not-in",
)
ORDER_DIRECTIONS: Tuple[str, ...] = ("asc", "desc")


class InvalidArgumentError(ValueError):
    """Raised when tool arguments are missing, malformed or out of range."""


@dataclass(frozen=True, slots=True)
class FilterClause:
    field: str
    operator: str
    value: Any


@dataclass(frozen=True, slots=True)
class OrderClause:
    field: str
    direction: str


@dataclass(frozen=True, slots=True)
class AggregationSpec:
    count: bool = False
    sum: Optional[str] = None
    avg: Optional[str] = None


@dataclass(frozen=True, slots=True)
class InspectArguments:
    collection_path: str
    sample_size: int = DEFAULT_SAMPLE_SIZE


@dataclass(frozen=True, slots=True)
class QueryArguments:
    collection_path: str
    filters: Tuple[FilterClause, ...] = ()
    order_by: Tuple[OrderClause, ...] = ()
    limit: Optional[int] = None
    aggregation: Optional[AggregationSpec] = None


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


def _non_blank(value: Any) -> Optional[str]:
    """Return the trimmed string, or None if ``value`` is not a non-blank string."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def _positive_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a count.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and value > 0:
        return int(value)
    return None


def _truthy(value: Any) -> bool:
    """JSON truthiness: only false, 0, "", null and NaN are false."""
    if isinstance(value, (list, dict)):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def parse_collection_path(raw: Dict[str, Any]) -> str:
    collection_path = _non_blank(raw.get("collectionPath"))
    if collection_path is None:
        raise InvalidArgumentError("collectionPath must be a non-empty string.")
    return collection_path


def parse_inspect_args(raw: Any, *, default_sample_size: int = DEFAULT_SAMPLE_SIZE) -> InspectArguments:
    if not _is_object(raw):
        raise InvalidArgumentError(
            "inspect_collection_schema expects an object with collectionPath (string) "
            "and optional sampleSize (number)."
        )
    collection_path = parse_collection_path(raw)

    sample_size = default_sample_size
    # A present null is rejected like any other non-integer.
    if "sampleSize" in raw:
        parsed = _positive_int(raw["sampleSize"])
        if parsed is None:
            raise InvalidArgumentError("sampleSize must be a positive integer when provided.")
        sample_size = parsed

    return InspectArguments(collection_path=collection_path, sample_size=sample_size)


def parse_filters(value: Any = MISSING) -> Tuple[FilterClause, ...]:
    if value is MISSING:
        return ()
    if not isinstance(value, list):
        raise InvalidArgumentError("filters must be an array when provided.")

    clauses = []
    for index, item in enumerate(value):
        if not _is_object(item):
            raise InvalidArgumentError(f"filters[{index}] must be an object with field, operator, and value.")
        field = _non_blank(item.get("field"))
        if field is None:
            raise InvalidArgumentError(f"filters[{index}].field must be a non-empty string.")
        operator = item.get("operator")
        if not isinstance(operator, str) or operator not in WHERE_OPERATORS:
            raise InvalidArgumentError(
                f"filters[{index}].operator must be one of: {', '.join(WHERE_OPERATORS)}."
            )
        # A null value is legitimate; only a missing key is an error.
        if "value" not in item:
            raise InvalidArgumentError(f"filters[{index}] must include a value property.")
        clauses.append(FilterClause(field=field, operator=operator, value=item["value"]))
    return tuple(clauses)


def parse_order_by(value: Any = MISSING) -> Tuple[OrderClause, ...]:
    if value is MISSING:
        return ()
    if not isinstance(value, list):
        raise InvalidArgumentError("orderBy must be an array when provided.")

    clauses = []
    for index, item in enumerate(value):
        if not _is_object(item):
            raise InvalidArgumentError(f"orderBy[{index}] must be an object with field and direction.")
        field = _non_blank(item.get("field"))
        if field is None:
            raise InvalidArgumentError(f"orderBy[{index}].field must be a non-empty string.")
        direction = item.get("direction")
        if not isinstance(direction, str) or direction not in ORDER_DIRECTIONS:
            raise InvalidArgumentError(f"orderBy[{index}].direction must be either 'asc' or 'desc'.")
        clauses.append(OrderClause(field=field, direction=direction))
    return tuple(clauses)


def parse_limit(value: Any = MISSING) -> Optional[int]:
    if value is MISSING:
        return None
    parsed = _positive_int(value)
    if parsed is None:
        raise InvalidArgumentError("limit must be a positive integer when provided.")
    return parsed


def parse_aggregation(value: Any = MISSING) -> Optional[AggregationSpec]:
    if value is MISSING:
        return None
    if not _is_object(value):
        raise InvalidArgumentError("aggregation must be an object when provided.")

    present = False
    count = False
    sum_field: Optional[str] = None
    avg_field: Optional[str] = None

    if "count" in value:
        present = True
        count = _truthy(value["count"])
    if "sum" in value:
        present = True
        sum_field = _non_blank(value["sum"])
        if sum_field is None:
            raise InvalidArgumentError("aggregation.sum must be a non-empty string when provided.")
    if "avg" in value:
        present = True
        avg_field = _non_blank(value["avg"])
        if avg_field is None:
            raise InvalidArgumentError("aggregation.avg must be a non-empty string when provided.")

    if not present:
        return None
    return AggregationSpec(count=count, sum=sum_field, avg=avg_field)


def parse_query_args(raw: Any) -> QueryArguments:
    if not _is_object(raw):
        raise InvalidArgumentError("query_firestore expects an object with query parameters.")

    return QueryArguments(
        collection_path=parse_collection_path(raw),
        filters=parse_filters(raw.get("filters", MISSING)),
        order_by=parse_order_by(raw.get("orderBy", MISSING)),
        limit=parse_limit(raw.get("limit", MISSING)),
        aggregation=parse_aggregation(raw.get("aggregation", MISSING)),
    )
