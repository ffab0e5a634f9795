from __future__ import annotations

import threading
from collections import defaultdict

from core.logging_utils import log_structured

METRIC_IDENTITY_DERIVED = "identity.derived"
METRIC_INVALID_PRIVATE_KEY = "identity.invalid_private_key"
METRIC_HASH_GENERATION_FAILED = "content_hash.generation_failed"
METRIC_HASH_MISMATCH = "content_hash.mismatch"
METRIC_UNEXPECTED_EXCEPTION = "runtime.unexpected_exception"


class _InMemoryCounters:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, int] = defaultdict(int)

    def increment(self, metric: str, value: int = 1) -> int:
        if value < 0:
            raise ValueError("counter increments must be non-negative")
        with self._lock:
            self._counters[metric] += value
            return self._counters[metric]

    def value(self, metric: str) -> int:
        with self._lock:
            return self._counters.get(metric, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


COUNTERS = _InMemoryCounters()


def increment_metric(metric: str, *, reason: str | None = None, quiet: bool = False) -> int:
    current = COUNTERS.increment(metric)
    if not quiet:
        log_structured(
            "metric.increment",
            metric=metric,
            value=current,
            reason=reason,
        )
    return current


def unexpected_exception_metric(error_class: str) -> int:
    base = increment_metric(METRIC_UNEXPECTED_EXCEPTION, reason=error_class)
    COUNTERS.increment(f"{METRIC_UNEXPECTED_EXCEPTION}.{error_class}")
    return base
