"""Monotonic clock used for all benchmark timing.

Every duration in asyncbench is expressed in milliseconds.  Entities take
a ``clock`` argument so tests (and exotic environments) can inject their
own time source; it must never go backwards.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


def perf_counter_ms() -> float:
    """Return the high-resolution performance counter in milliseconds."""
    return time.perf_counter() * 1000.0


DEFAULT_CLOCK: Clock = perf_counter_ms
