"""Summary statistics over per-cycle durations.

Pure functions: nothing here mutates its input.  In particular the
median is taken from a sorted copy, so a benchmark's ``times`` list keeps
execution order after statistics have been computed.

All values are in milliseconds except ``hz`` (cycles per second).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class TimingStats:
    """Statistics derived from one benchmark's cycle durations."""

    n: int
    run_time: float
    hz: float
    mean_time: float
    median_time: float
    standard_deviation: float
    max_time: float
    min_time: float

    def to_dict(self) -> dict[str, float | int]:
        """Serialize to a dict with rounded values."""
        return {
            "n": self.n,
            "run_time": round(self.run_time, 6),
            "hz": self.hz if math.isinf(self.hz) else round(self.hz, 6),
            "mean_time": round(self.mean_time, 6),
            "median_time": round(self.median_time, 6),
            "standard_deviation": round(self.standard_deviation, 6),
            "max_time": round(self.max_time, 6),
            "min_time": round(self.min_time, 6),
        }


EMPTY_STATS = TimingStats(
    n=0,
    run_time=0.0,
    hz=0.0,
    mean_time=0.0,
    median_time=0.0,
    standard_deviation=0.0,
    max_time=0.0,
    min_time=0.0,
)


def compute_stats(times: Sequence[float], cycles: int | None = None) -> TimingStats:
    """Compute summary statistics for a sequence of cycle durations.

    Args:
        times: Per-cycle durations in milliseconds, in execution order.
        cycles: Cycle count used for ``hz``.  Defaults to ``len(times)``.

    Returns:
        TimingStats.  An empty sequence yields all-zero statistics.
    """
    n = len(times)
    if cycles is None:
        cycles = n
    if n == 0:
        return EMPTY_STATS

    run_time = math.fsum(times)
    mean = run_time / n
    ordered = sorted(times)
    variance = math.fsum((t - mean) ** 2 for t in times) / n

    return TimingStats(
        n=n,
        run_time=run_time,
        hz=throughput(cycles, run_time),
        mean_time=mean,
        median_time=ordered[n // 2],
        standard_deviation=math.sqrt(variance),
        max_time=ordered[-1],
        min_time=ordered[0],
    )


def throughput(cycles: int, run_time_ms: float) -> float:
    """Cycles per second for *cycles* completed in *run_time_ms*.

    A zero run time with at least one cycle is infinitely fast.
    """
    if cycles <= 0:
        return 0.0
    if run_time_ms <= 0:
        return math.inf
    return cycles / (run_time_ms / 1000.0)
