"""Suites: ordered groups of benchmarks run one after another.

A suite's own hooks wrap the whole run (``before``/``after``) and each
member (``before_each``/``after_each``, called with the member and its
index).  A member that fails only records its own ``error``; the suite
keeps going.  A failing suite hook, or a member whose own ``on_error``
hook fails, stops the remaining members; that failure is stored on
the suite's ``error``.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Mapping, NamedTuple

from asyncbench.benchmark import Benchmark
from asyncbench.clock import DEFAULT_CLOCK, Clock
from asyncbench.compare import CompareBy, parse_metric, rank
from asyncbench.config import (
    DEFAULTS,
    BenchmarkOptions,
    SuiteOptions,
    raise_for_errors,
    resolve_benchmark_options,
    resolve_suite_options,
    validate_suite_options,
)
from asyncbench.errors import BenchmarkError, Stage
from asyncbench.lifecycle import Routine, run_callback
from asyncbench.logging import get_logger

log = get_logger("suite")


class FastestSlowest(NamedTuple):
    """Result of Suite.compare_fastest_with_slowest()."""

    fastest: Benchmark
    slowest: Benchmark
    by: float


class Suite:
    """An ordered collection of benchmarks sharing budgets and hooks.

    Usage::

        suite = Suite("String comparison")
        suite.add("direct", lambda: a == b)
        suite.add("regexp", lambda: pattern.match(a))
        await suite.run()
        result = suite.compare_fastest_with_slowest("percent")
    """

    defaults: ClassVar[Mapping[str, Any]] = DEFAULTS

    def __init__(
        self,
        name: str,
        options: SuiteOptions | Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self.name = name
        self.options = resolve_suite_options(options)
        self.clock: Clock = clock or DEFAULT_CLOCK

        self.benchmarks: list[Benchmark] = []
        self.error: BenchmarkError | None = None
        self.run_time = 0.0
        self.total_time = 0.0
        self.stamp: float | None = None

    def __repr__(self) -> str:
        return f"<Suite {self.name!r} ({len(self.benchmarks)} benchmarks)>"

    def __len__(self) -> int:
        return len(self.benchmarks)

    def add(
        self,
        name: str,
        fn_or_options: Callable[[], Any] | BenchmarkOptions | Mapping[str, Any],
        options: BenchmarkOptions | Mapping[str, Any] | None = None,
    ) -> Benchmark:
        """Create a benchmark owned by this suite and append it.

        The suite's ``max_time`` and ``min_samples`` are the defaults;
        *options* and *fn_or_options* override them.
        """
        resolved = resolve_benchmark_options(
            fn_or_options,
            options,
            defaults={
                "max_time": self.options.max_time,
                "min_samples": self.options.min_samples,
            },
        )
        benchmark = Benchmark(name, resolved, clock=self.clock)
        self.benchmarks.append(benchmark)
        return benchmark

    # -- execution ----------------------------------------------------------

    async def run(self) -> None:
        """Run every member in declaration order.

        Suite hook failures, and the fatal error of a member whose
        ``on_error`` hook failed, are stored on ``error`` and passed to the
        suite's ``on_error``.  Other member failures stay on the members.

        Raises:
            ValueError: If the suite or a member has invalid options.
            BenchmarkError: With stage ON_ERROR, if the suite's ``on_error``
                hook fails.
        """
        self.stamp = self.clock()
        raise_for_errors(validate_suite_options(self.options), f"suite '{self.name}'")
        opts = self.options
        before_each = Routine.wrap(opts.before_each)
        after_each = Routine.wrap(opts.after_each)
        total = len(self.benchmarks)

        log.info("Running suite '%s' (%d benchmarks)", self.name, total)

        try:
            error = await run_callback(self, Stage.BEFORE, Routine.wrap(opts.before))
            if error:
                raise error

            for index, benchmark in enumerate(self.benchmarks):
                error = await run_callback(
                    self, Stage.BEFORE_EACH, before_each, benchmark, index
                )
                if error:
                    raise error

                log.info("  [%d/%d] %s", index + 1, total, benchmark.name)
                await benchmark.run()
                self.run_time += benchmark.run_time
                self.total_time += benchmark.total_time

                error = await run_callback(self, Stage.AFTER_EACH, after_each, benchmark, index)
                if error:
                    raise error

            error = await run_callback(self, Stage.AFTER, Routine.wrap(opts.after))
            if error:
                raise error
        except BenchmarkError as exc:
            self.error = exc
            log.warning("%s in suite '%s': %s", exc.kind, self.name, exc.message)
            fatal = await run_callback(self, Stage.ON_ERROR, Routine.wrap(opts.on_error), exc)
            if fatal:
                log.error("Suite '%s': %s", self.name, fatal.message)
                raise fatal

    # -- ranking ------------------------------------------------------------

    def get_sorted_benchmarks_by(self, sort_by: CompareBy | str) -> list[Benchmark]:
        """Members sorted best first; errored members sort last."""
        return rank(self.benchmarks, sort_by)

    def get_fastest(self, sort_by: CompareBy | str) -> Benchmark | None:
        """Best member for *sort_by*, or None for an empty suite."""
        ranked = self.get_sorted_benchmarks_by(sort_by)
        return ranked[0] if ranked else None

    def get_slowest(self, sort_by: CompareBy | str) -> Benchmark | None:
        """Worst member for *sort_by*, or None for an empty suite."""
        ranked = self.get_sorted_benchmarks_by(sort_by)
        return ranked[-1] if ranked else None

    def compare_fastest_with_slowest(self, compare_by: CompareBy | str) -> FastestSlowest:
        """Compare the best member with the worst one.

        ``percent`` ranks members by ``mean_time`` and then reports the
        percentage by which the slowest is slower than the fastest.

        Raises:
            ValueError: If the suite has no benchmarks.
        """
        metric = parse_metric(compare_by)
        if not self.benchmarks:
            raise ValueError(f"Suite '{self.name}' has no benchmarks to compare")

        sort_by = CompareBy.MEAN_TIME if metric is CompareBy.PERCENT else metric
        ranked = self.get_sorted_benchmarks_by(sort_by)
        fastest, slowest = ranked[0], ranked[-1]
        return FastestSlowest(fastest, slowest, fastest.compare_with(slowest, metric))

    @property
    def passed(self) -> bool:
        """True when no suite-level stage failed."""
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, members sorted by mean time."""
        d: dict[str, Any] = {"name": self.name}
        if self.error is not None:
            d["error_message"] = self.error.message
        d.update(
            {
                "run_time": self.run_time,
                "total_time": self.total_time,
                "passed": self.passed,
                "benchmarks": [
                    b.to_dict() for b in self.get_sorted_benchmarks_by(CompareBy.MEAN_TIME)
                ],
            }
        )
        return d
