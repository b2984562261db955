"""
Classification of values handed back by the Firestore client.

Every raw field value is mapped onto one member of ``ValueKind`` before the
sanitizer or the schema inferencer looks at it, so both agree on what a
timestamp, geopoint or document reference is.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any

from google.cloud.firestore import GeoPoint
from google.cloud.firestore_v1.base_document import BaseDocumentReference
from google.protobuf.timestamp_pb2 import Timestamp


class _Missing:
    """Marker for a field that is absent, as opposed to present with ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueKind(str, Enum):
    NULL = "null"
    MISSING = "undefined"
    ARRAY = "array"
    TIMESTAMP = "timestamp"
    GEOPOINT = "geopoint"
    REFERENCE = "reference"
    MAP = "object"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    BYTES = "bytes"
    OTHER = "other"


def classify_value(value: Any) -> ValueKind:
    if value is MISSING:
        return ValueKind.MISSING
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BYTES
    if isinstance(value, (dt.datetime, dt.date, Timestamp)):
        return ValueKind.TIMESTAMP
    if isinstance(value, GeoPoint):
        return ValueKind.GEOPOINT
    if isinstance(value, BaseDocumentReference):
        return ValueKind.REFERENCE
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, (Sequence, Set)):
        return ValueKind.ARRAY
    return ValueKind.OTHER


def describe_value_type(value: Any) -> str:
    """Return the schema type tag for ``value``."""
    kind = classify_value(value)
    if kind is ValueKind.OTHER:
        return type(value).__name__
    return kind.value
