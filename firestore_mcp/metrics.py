"""Minimal in-process metrics recorder (not suitable for multi-process aggregation)."""

from __future__ import annotations

from collections import Counter, OrderedDict
from threading import Lock
from typing import Dict, Optional

MAX_TRACKED_DURATIONS = 100


class MetricsRecorder:
    def __init__(self, max_durations: int = MAX_TRACKED_DURATIONS) -> None:
        self._lock = Lock()
        self._max_durations = max_durations
        self._requests = 0
        self._request_durations_ms: "OrderedDict[str, float]" = OrderedDict()
        self._rate_limited = 0
        self._tool_success: Counter[str] = Counter()
        self._tool_error: Counter[str] = Counter()
        self._tool_duration_ms: Dict[str, float] = {}

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._request_durations_ms[request_id] = duration_ms
            while len(self._request_durations_ms) > self._max_durations:
                self._request_durations_ms.popitem(last=False)

    def incr_rate_limited(self) -> None:
        with self._lock:
            self._rate_limited += 1

    def record_tool(self, tool: str, *, success: bool, duration_ms: Optional[float] = None) -> None:
        with self._lock:
            if duration_ms is not None:
                self._tool_duration_ms[tool] = self._tool_duration_ms.get(tool, 0.0) + duration_ms
            if success:
                self._tool_success[tool] += 1
            else:
                self._tool_error[tool] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "rate_limited": self._rate_limited,
                "tool_success": dict(self._tool_success),
                "tool_error": dict(self._tool_error),
                "tool_duration_ms_total": dict(self._tool_duration_ms),
                "recent_request_durations_ms": dict(self._request_durations_ms),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._request_durations_ms.clear()
            self._rate_limited = 0
            self._tool_success.clear()
            self._tool_error.clear()
            self._tool_duration_ms.clear()


default_metrics = MetricsRecorder()
