"""Terminal display formatting for suite results.

Produces aligned tables of benchmark statistics and the classic
"X is faster than Y by N%" summary line.  No external dependencies.
"""

from __future__ import annotations

import math

from asyncbench.benchmark import Benchmark
from asyncbench.compare import CompareBy, parse_metric
from asyncbench.suite import Suite


def format_ms(ms: float, precision: int = 2) -> str:
    """Format a millisecond duration with adaptive units."""
    if math.isnan(ms):
        return "N/A"
    if math.isinf(ms):
        return "∞"
    if ms < 0.001:
        return f"{ms * 1_000_000:.0f}ns"
    if ms < 1:
        return f"{ms * 1000:.{precision}f}µs"
    if ms < 1000:
        return f"{ms:.{precision}f}ms"
    return f"{ms / 1000:.{precision}f}s"


def format_hz(hz: float) -> str:
    """Format a throughput with thousands separators."""
    if math.isinf(hz):
        return "∞"
    if hz >= 100:
        return f"{hz:,.0f}"
    return f"{hz:,.2f}"


def _status(bench: Benchmark) -> str:
    if bench.error is not None:
        return bench.error.kind
    if bench.cycles == 0:
        return "not run"
    return "ok"


def format_suite(suite: Suite, metric: CompareBy | str = CompareBy.MEAN_TIME) -> str:
    """Format a suite's results as a table sorted best first by *metric*.

    Args:
        suite: A suite, normally after ``run()``.
        metric: Ranking metric.

    Returns:
        Formatted string for terminal output.
    """
    metric = parse_metric(metric)
    lines: list[str] = []

    title = suite.name
    lines.append(title)
    lines.append("─" * len(title))
    if suite.error is not None:
        lines.append(f"Suite failed: {suite.error.message}")

    header = (
        f"{'Benchmark':<30s} {'ops/sec':>14s} {'mean':>10s} {'median':>10s} "
        f"{'±':>10s} {'min':>10s} {'max':>10s} {'cycles':>10s} {'samples':>8s} "
        f"{'status':>10s}"
    )
    lines.append(header)
    lines.append("─" * len(header))

    for bench in suite.get_sorted_benchmarks_by(metric):
        lines.append(
            f"{bench.name[:30]:<30s} {format_hz(bench.hz):>14s} "
            f"{format_ms(bench.mean_time):>10s} {format_ms(bench.median_time):>10s} "
            f"{format_ms(bench.standard_deviation):>10s} "
            f"{format_ms(bench.min_time):>10s} {format_ms(bench.max_time):>10s} "
            f"{bench.cycles:>10d} {bench.samples:>8d} {_status(bench):>10s}"
        )

    failed = [(b.name, b.error) for b in suite.benchmarks if b.error is not None]
    if failed:
        lines.append("")
        lines.append("Errors:")
        for name, error in failed:
            lines.append(f"  {name}: {error.message}")

    if len(suite.benchmarks) >= 2:
        lines.append("")
        lines.append(format_fastest_slowest(suite, metric))

    lines.append(
        f"Run time: {format_ms(suite.run_time)}, total time: {format_ms(suite.total_time)}"
    )
    return "\n".join(lines)


def format_fastest_slowest(suite: Suite, metric: CompareBy | str = CompareBy.PERCENT) -> str:
    """Summarize the comparison of the fastest and slowest member.

    The ``percent`` metric reads "X is faster than Y by N%"; other
    metrics report the signed difference of the metric.
    """
    metric = parse_metric(metric)
    if metric is CompareBy.MEAN_TIME:
        metric = CompareBy.PERCENT
    result = suite.compare_fastest_with_slowest(metric)
    if metric is CompareBy.PERCENT:
        return f"{result.fastest.name} is faster than {result.slowest.name} by {result.by}%"
    return (
        f"{result.fastest.name} beats {result.slowest.name} on {metric.value} by {result.by:g}"
    )
