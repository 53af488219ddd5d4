"""Ranking and comparison of benchmarks.

Every comparison follows one sign convention: a positive result means
the first benchmark is *better* on the chosen metric.  Lower is better
for time metrics, higher is better for throughput metrics.  A benchmark
with an error always loses against one without.
"""

from __future__ import annotations

import enum
import functools
import math
from typing import TYPE_CHECKING, Any, Callable

from asyncbench.errors import InvalidMetricError

if TYPE_CHECKING:
    from asyncbench.benchmark import Benchmark


class CompareBy(str, enum.Enum):
    """Metric used to compare or rank benchmarks."""

    MEAN_TIME = "mean_time"
    MEDIAN_TIME = "median_time"
    STANDARD_DEVIATION = "standard_deviation"
    MAX_TIME = "max_time"
    MIN_TIME = "min_time"
    HZ = "hz"
    RUN_TIME = "run_time"
    CYCLES = "cycles"
    PERCENT = "percent"

    def __str__(self) -> str:
        return self.value


# Metrics where a smaller value ranks higher.
LOWER_IS_BETTER = frozenset(
    {
        CompareBy.MEAN_TIME,
        CompareBy.MEDIAN_TIME,
        CompareBy.STANDARD_DEVIATION,
        CompareBy.MAX_TIME,
        CompareBy.MIN_TIME,
        CompareBy.RUN_TIME,
    }
)
HIGHER_IS_BETTER = frozenset({CompareBy.HZ, CompareBy.CYCLES})


def parse_metric(metric: CompareBy | str) -> CompareBy:
    """Resolve a metric name to a CompareBy member.

    Raises:
        InvalidMetricError: If *metric* names no known metric.
    """
    if isinstance(metric, CompareBy):
        return metric
    try:
        return CompareBy(metric)
    except ValueError:
        raise InvalidMetricError(metric) from None


def percent_difference(mean_a: float, mean_b: float) -> float:
    """Percentage by which *mean_b* is slower than *mean_a*.

    Truncated (not rounded) to two decimal places.  Negative when
    *mean_b* is faster.
    """
    if mean_a == 0:
        return 0.0 if mean_b == 0 else math.inf
    return math.trunc((100 / mean_a * mean_b - 100) * 100) / 100


def compare_benchmarks(a: Benchmark, b: Benchmark, metric: CompareBy | str) -> float:
    """Compare *a* against *b* on *metric*.

    Returns:
        A positive number when *a* is better, negative when *b* is,
        zero on a tie.  For ``percent`` the value is the percentage by
        which *b* is slower than *a*.

    Raises:
        InvalidMetricError: If *metric* is unknown.
    """
    metric = parse_metric(metric)

    if a.error is not None and b.error is None:
        return -1
    if b.error is not None and a.error is None:
        return 1

    if metric is CompareBy.PERCENT:
        return percent_difference(a.mean_time, b.mean_time)

    value_a = getattr(a, metric.value)
    value_b = getattr(b, metric.value)
    if metric in LOWER_IS_BETTER:
        return value_b - value_a
    return value_a - value_b


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def rank_key(metric: CompareBy | str) -> Callable[[Benchmark], Any]:
    """Sort key placing the best benchmark first for *metric*."""
    metric = parse_metric(metric)

    def _cmp(a: Benchmark, b: Benchmark) -> int:
        return _sign(b.compare_with(a, metric))

    return functools.cmp_to_key(_cmp)


def rank(benchmarks: list[Benchmark], metric: CompareBy | str) -> list[Benchmark]:
    """Return *benchmarks* sorted best first (stable)."""
    return sorted(benchmarks, key=rank_key(metric))
