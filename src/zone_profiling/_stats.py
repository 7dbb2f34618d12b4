"""Statistics over per-zone sample arrays.

Design by Contract:
- mean/worst/std_dev require a non-empty sample array (crash otherwise)
- median of an empty array is 0.0
- std_dev is Bessel-corrected; a single sample has no spread (0.0)

All functions are pure and deterministic.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from beartype import beartype


@dataclass(frozen=True)
class ZoneResult:
    """Read-only statistics snapshot for one zone.

    For index 0 ("all") the numbers describe the pass where every zone ran.
    For index k > 0 they describe the pass where only zone k was skipped,
    so zone k's own cost is ``stat(results[0]) - stat(results[k])``.
    """

    name: str
    sorted_samples: tuple[float, ...]
    median: float
    mean: float
    worst: float
    std_dev: float


Results = tuple[ZoneResult, ...]


@beartype
def sort_samples(samples: Sequence[float]) -> list[float]:
    return sorted(samples)


@beartype
def median(sorted_samples: Sequence[float]) -> float:
    """Median of an already sorted array (mean of the middle pair for even sizes)."""
    n = len(sorted_samples)
    if n == 0:
        return 0.0
    middle = n // 2
    if n % 2 == 0:
        return 0.5 * (sorted_samples[middle - 1] + sorted_samples[middle])
    return float(sorted_samples[middle])


@beartype
def mean(samples: Sequence[float]) -> float:
    assert len(samples) > 0, "Mean of an empty sample array is undefined"
    return math.fsum(samples) / len(samples)


@beartype
def worst(samples: Sequence[float]) -> float:
    assert len(samples) > 0, "Worst of an empty sample array is undefined"
    return float(max(samples))


@beartype
def std_dev(samples: Sequence[float], sample_mean: float | None = None) -> float:
    """Sample standard deviation with Bessel correction.

    Args:
        samples: Sample array (MUST be non-empty)
        sample_mean: Precomputed mean, computed here when omitted

    Returns:
        sqrt(sum((x - mean)^2) / (n - 1)), or 0.0 for a single sample.
    """
    n = len(samples)
    assert n > 0, "Standard deviation of an empty sample array is undefined"
    if n == 1:
        return 0.0
    if sample_mean is None:
        sample_mean = mean(samples)
    squares = math.fsum((x - sample_mean) ** 2 for x in samples)
    return math.sqrt(squares / (n - 1))


@beartype
def evaluate_zone(name: str, samples: Sequence[float]) -> ZoneResult:
    ordered = sort_samples(samples)
    zone_mean = mean(ordered)
    return ZoneResult(
        name=name,
        sorted_samples=tuple(ordered),
        median=median(ordered),
        mean=zone_mean,
        worst=ordered[-1],
        std_dev=std_dev(ordered, zone_mean),
    )


@beartype
def evaluate_zones(zones: Sequence[tuple[str, Sequence[float]]]) -> Results:
    """Evaluate ``(name, samples)`` pairs in order, aggregate first."""
    return tuple(evaluate_zone(name, samples) for name, samples in zones)
