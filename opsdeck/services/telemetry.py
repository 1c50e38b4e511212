from __future__ import annotations

import math
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque


@dataclass(frozen=True)
class ApiCallSample:
    ts: float
    method: str
    path: str
    status_code: int | None
    latency_ms: float


_api_samples: Deque[ApiCallSample] = deque(maxlen=5000)
_counters: dict[str, int] = defaultdict(int)


def record_api_call(*, method: str, path: str, status_code: int | None, latency_ms: float) -> None:
    # Track client-side API latency and outcome; status_code is None for transport failures.
    _api_samples.append(
        ApiCallSample(
            ts=time.time(),
            method=method,
            path=path,
            status_code=status_code,
            latency_ms=latency_ms,
        )
    )


def increment_counter(name: str, value: int = 1) -> None:
    # Store counters for cache behavior (fetches, de-duplication, discarded responses).
    _counters[name] += value


def _window_samples(window_s: int) -> list[ApiCallSample]:
    cutoff = time.time() - window_s
    return [sample for sample in _api_samples if sample.ts >= cutoff]


def api_latency_by_path(window_s: int) -> dict[str, dict[str, float]]:
    # Aggregate p50/p95/max per request path for the console status line.
    grouped: dict[str, list[float]] = defaultdict(list)
    for sample in _window_samples(window_s):
        grouped[sample.path].append(sample.latency_ms)
    result: dict[str, dict[str, float]] = {}
    for path, latencies in grouped.items():
        latencies.sort()
        p50_idx = max(0, math.ceil(0.5 * len(latencies)) - 1)
        p95_idx = max(0, math.ceil(0.95 * len(latencies)) - 1)
        result[path] = {
            "p50": latencies[p50_idx],
            "p95": latencies[p95_idx],
            "max": latencies[-1],
        }
    return result


def api_failure_count(window_s: int) -> int:
    # Count transport failures and 5xx answers in the window.
    return sum(
        1
        for sample in _window_samples(window_s)
        if sample.status_code is None or sample.status_code >= 500
    )


def counters_snapshot() -> dict[str, int]:
    # Return a copy of all counters for reporting.
    return dict(_counters)


def reset_telemetry() -> None:
    # Clear samples and counters between test cases.
    _api_samples.clear()
    _counters.clear()
