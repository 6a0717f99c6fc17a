"""In-process counters for tool outcomes and HTTP requests (single process only)."""

from __future__ import annotations

from collections import Counter, OrderedDict
from threading import Lock
from typing import Dict, Optional

RECENT_REQUESTS = 100


class MetricsRecorder:
    def __init__(self, *, recent_requests: int = RECENT_REQUESTS) -> None:
        self._lock = Lock()
        self._recent_limit = recent_requests
        self._requests = 0
        self._recent_durations_ms: "OrderedDict[str, float]" = OrderedDict()
        self._tool_success: Counter[str] = Counter()
        self._tool_error: Counter[str] = Counter()
        self._tool_duration_ms: Counter[str] = Counter()
        self._error_codes: Counter[str] = Counter()

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        """Keep the durations of the most recent HTTP requests only."""
        with self._lock:
            self._recent_durations_ms[request_id] = duration_ms
            while len(self._recent_durations_ms) > self._recent_limit:
                self._recent_durations_ms.popitem(last=False)

    def record_tool(
        self,
        tool: str,
        *,
        success: bool,
        error_code: Optional[str] = None,
        duration_ms: float = 0.0,
    ) -> None:
        with self._lock:
            if success:
                self._tool_success[tool] += 1
            else:
                self._tool_error[tool] += 1
                if error_code:
                    self._error_codes[error_code] += 1
            self._tool_duration_ms[tool] += duration_ms

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "tool_success": dict(self._tool_success),
                "tool_error": dict(self._tool_error),
                "tool_duration_ms": {tool: round(total, 2) for tool, total in self._tool_duration_ms.items()},
                "error_codes": dict(self._error_codes),
                "recent_request_durations_ms": dict(self._recent_durations_ms),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._recent_durations_ms.clear()
            self._tool_success.clear()
            self._tool_error.clear()
            self._tool_duration_ms.clear()
            self._error_codes.clear()


default_metrics = MetricsRecorder()
