"""asyncbench: micro-benchmarks with properly awaited async hooks.

Measures a unit of work (a plain function or a coroutine function) by
running it repeatedly in one-second samples, derives summary statistics,
and ranks benchmarks grouped in suites.
"""

from __future__ import annotations

from asyncbench.benchmark import Benchmark
from asyncbench.compare import CompareBy
from asyncbench.config import DEFAULTS, BenchmarkOptions, SuiteOptions
from asyncbench.errors import BenchmarkError, InvalidMetricError, Stage
from asyncbench.lifecycle import Routine
from asyncbench.suite import FastestSlowest, Suite

__version__ = "0.3.0"

__all__ = [
    "DEFAULTS",
    "Benchmark",
    "BenchmarkError",
    "BenchmarkOptions",
    "CompareBy",
    "FastestSlowest",
    "InvalidMetricError",
    "Routine",
    "Stage",
    "Suite",
    "SuiteOptions",
    "__version__",
]
