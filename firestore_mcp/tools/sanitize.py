"""
Conversion of Firestore values into JSON-safe plain values.

``sanitize_value`` is total: every input yields a value that ``json.dumps``
accepts, and no branch raises. Cycles render as ``"[Circular]"``.
"""

from __future__ import annotations

import base64
import calendar
import dataclasses
import datetime as dt
import logging
import math
from typing import Any, Dict, Optional, Set

from google.api_core.datetime_helpers import DatetimeWithNanoseconds
from google.protobuf.timestamp_pb2 import Timestamp

from firestore_mcp.tools.values import ValueKind, classify_value

logger = logging.getLogger(__name__)

CIRCULAR_MARKER = "[Circular]"
# Largest integer a JSON consumer using IEEE doubles can hold exactly.
MAX_SAFE_INTEGER = 2**53 - 1


def _timestamp_components(value: Any) -> Dict[str, Optional[int]]:
    if isinstance(value, Timestamp):
        return {"seconds": value.seconds, "nanoseconds": value.nanos}
    seconds: Optional[int] = None
    nanoseconds: Optional[int] = None
    try:
        if isinstance(value, dt.datetime):
            seconds = calendar.timegm(value.utctimetuple())
            nanoseconds = getattr(value, "nanosecond", None) or value.microsecond * 1000
        elif isinstance(value, dt.date):
            seconds = calendar.timegm(value.timetuple())
            nanoseconds = 0
    except Exception:
        logger.debug("Could not split timestamp %r into components", type(value))
    return {"seconds": seconds, "nanoseconds": nanoseconds}


def _sanitize_timestamp(value: Any) -> Any:
    try:
        if isinstance(value, DatetimeWithNanoseconds):
            return value.rfc3339()
        if isinstance(value, Timestamp):
            return value.ToJsonString()
        return value.isoformat()
    except Exception:
        return _timestamp_components(value)


def _sanitize_number(value: Any) -> Any:
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            return str(value)
        return value
    if not math.isfinite(value):
        return None
    return value


def _object_fields(value: Any) -> Optional[Dict[str, Any]]:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name, None) for f in dataclasses.fields(value)}
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return dict(vars(value))
    return None


def _stringify(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<{type(value).__name__}>"


def sanitize_value(value: Any, _seen: Optional[Set[int]] = None) -> Any:
    """
    Recursively convert ``value`` into plain JSON types.

    Args:
        value: Anything returned by the Firestore client (or already plain data).
        _seen: ids of the containers on the current recursion path.

    Returns:
        A structure of dicts, lists, strings, numbers, booleans and None.
    """
    seen = _seen if _seen is not None else set()
    kind = classify_value(value)

    if kind in (ValueKind.NULL, ValueKind.MISSING):
        return None
    if kind in (ValueKind.BOOLEAN, ValueKind.STRING):
        return value
    if kind is ValueKind.NUMBER:
        return _sanitize_number(value)
    if kind is ValueKind.TIMESTAMP:
        return _sanitize_timestamp(value)
    if kind is ValueKind.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if kind is ValueKind.GEOPOINT:
        return {"latitude": value.latitude, "longitude": value.longitude}
    if kind is ValueKind.REFERENCE:
        return {"path": value.path, "id": value.id}

    if kind is ValueKind.OTHER:
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            try:
                serialized = to_dict()
            except Exception:
                logger.debug("to_dict() failed for %s; using attributes", type(value).__name__)
            else:
                return sanitize_value(serialized, seen)

    marker = id(value)
    if marker in seen:
        return CIRCULAR_MARKER

    if kind is ValueKind.ARRAY:
        seen.add(marker)
        try:
            return [sanitize_value(item, seen) for item in value]
        except Exception:
            return _stringify(value)
        finally:
            seen.discard(marker)

    if kind is ValueKind.MAP:
        items = value
    else:
        try:
            items = _object_fields(value)
        except Exception:
            items = None
        if items is None:
            return _stringify(value)

    seen.add(marker)
    try:
        return {str(key): sanitize_value(nested, seen) for key, nested in items.items()}
    except Exception:
        return _stringify(value)
    finally:
        seen.discard(marker)
