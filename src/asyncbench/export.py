"""Export suite results to CSV and Markdown formats.

CSV format: one row per benchmark per suite (long format for
pandas/R).  Markdown format: one summary table per suite, suitable for
README files and GitHub issues.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Sequence

from asyncbench.compare import CompareBy
from asyncbench.suite import Suite

CSV_COLUMNS = [
    "suite",
    "benchmark",
    "rank",
    "error_message",
    "cycles",
    "samples",
    "hz",
    "mean_time_ms",
    "median_time_ms",
    "standard_deviation_ms",
    "min_time_ms",
    "max_time_ms",
    "run_time_ms",
    "total_time_ms",
]


def export_json(suites: Sequence[Suite]) -> str:
    """Export suites as a JSON document (a list of suite dicts)."""
    return json.dumps([s.to_dict() for s in suites], indent=2)


def export_csv(
    suites: Sequence[Suite],
    metric: CompareBy | str = CompareBy.MEAN_TIME,
) -> str:
    """Export results as CSV, members ranked by *metric* within each suite."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)

    for suite in suites:
        for rank, bench in enumerate(suite.get_sorted_benchmarks_by(metric), start=1):
            writer.writerow(
                [
                    suite.name,
                    bench.name,
                    rank,
                    bench.error.message if bench.error else "",
                    bench.cycles,
                    bench.samples,
                    f"{bench.hz:.6f}",
                    f"{bench.mean_time:.6f}",
                    f"{bench.median_time:.6f}",
                    f"{bench.standard_deviation:.6f}",
                    f"{bench.min_time:.6f}",
                    f"{bench.max_time:.6f}",
                    f"{bench.run_time:.6f}",
                    f"{bench.total_time:.6f}",
                ]
            )

    return output.getvalue()


def export_markdown(
    suites: Sequence[Suite],
    metric: CompareBy | str = CompareBy.MEAN_TIME,
) -> str:
    """Export results as a Markdown report."""
    lines: list[str] = []

    for suite in suites:
        lines.append(f"## {suite.name}")
        lines.append("")
        if suite.error is not None:
            lines.append(f"**Suite failed:** {suite.error.message}")
            lines.append("")

        lines.append("| Benchmark | ops/sec | Mean (ms) | Median (ms) | ± (ms) | Cycles | Status |")
        lines.append("|---|---:|---:|---:|---:|---:|---|")
        for bench in suite.get_sorted_benchmarks_by(metric):
            status = bench.error.kind if bench.error else "ok"
            lines.append(
                f"| {bench.name} | {bench.hz:,.2f} | {bench.mean_time:.6f} | "
                f"{bench.median_time:.6f} | {bench.standard_deviation:.6f} | "
                f"{bench.cycles} | {status} |"
            )
        lines.append("")

        if len(suite.benchmarks) >= 2:
            result = suite.compare_fastest_with_slowest(CompareBy.PERCENT)
            lines.append(
                f"*{result.fastest.name}* is faster than *{result.slowest.name}* "
                f"by {result.by}%."
            )
            lines.append("")

    return "\n".join(lines)
