"""Clock and memory adapters used by ZoneProfiler."""

import time
from typing import Protocol, runtime_checkable

import psutil


@runtime_checkable
class Clock(Protocol):
    def now_ms(self) -> float: ...


class MonotonicClock:
    """Monotonic wall clock in milliseconds (perf_counter_ns, ~100ns overhead)."""

    def now_ms(self) -> float:
        return time.perf_counter_ns() / 1_000_000.0


def ms_between(t1_ms: float, t0_ms: float) -> float:
    elapsed = t1_ms - t0_ms
    assert elapsed >= 0, (
        f"Elapsed time cannot be negative: {elapsed:.6f}ms. "
        f"Clock went backwards or timing bug."
    )
    return elapsed


def process_memory_gb() -> float:
    """Resident set size of the current process in GB."""
    return psutil.Process().memory_info().rss / 1024**3
