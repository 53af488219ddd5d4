"""Benchmark execution engine.

A run is a sequence of stages::

    before -> sample* -> statistics -> after
                 |
                 +-- cycle*: before_each -> fn (timed) -> after_each

Each sample runs cycles for a fixed one-second budget.  Samples repeat
while fewer than ``min_samples`` have run or the accumulated total time
is below ``max_time``.  Every hook and every async ``fn`` call is awaited
before the next step starts, so no timed region ever overlaps a hook.

A failing stage ends the run: the error is stored on ``error`` and the
``on_error`` hook is called.  Only a failure of ``on_error`` itself is
raised to the caller of ``run()``.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Mapping, cast

from asyncbench.clock import DEFAULT_CLOCK, Clock
from asyncbench.compare import CompareBy, compare_benchmarks
from asyncbench.config import (
    DEFAULTS,
    BenchmarkOptions,
    raise_for_errors,
    resolve_benchmark_options,
    validate_options,
)
from asyncbench.errors import BenchmarkError, Stage
from asyncbench.lifecycle import Routine, run_callback
from asyncbench.logging import get_logger
from asyncbench.stats import TimingStats, compute_stats

log = get_logger("benchmark")

# Wall-clock budget of one sample, independent of max_time.
SAMPLE_BUDGET_MS = 1000.0


class Benchmark:
    """A measured unit of work.

    Usage::

        bench = Benchmark("regexp", lambda: pattern.search(text))
        await bench.run()
        print(bench.hz, bench.mean_time)

    Args:
        name: Display name (not required to be unique).
        fn_or_options: The function to measure, or options containing it
            under ``fn`` (a BenchmarkOptions or a mapping).
        options: Further options; *fn_or_options* wins on conflicts.
        clock: Monotonic millisecond clock.
    """

    defaults: ClassVar[Mapping[str, Any]] = DEFAULTS

    def __init__(
        self,
        name: str,
        fn_or_options: Callable[[], Any] | BenchmarkOptions | Mapping[str, Any],
        options: BenchmarkOptions | Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self.name = name
        self.options = resolve_benchmark_options(fn_or_options, options)
        self.clock: Clock = clock or DEFAULT_CLOCK

        self.error: BenchmarkError | None = None
        self.cycles = 0
        self.samples = 0
        self.times: list[float] = []
        self.run_time = 0.0
        self.total_time = 0.0
        self.stamp: float | None = None
        self.stats: TimingStats | None = None

        self.hz = 0.0
        self.mean_time = 0.0
        self.median_time = 0.0
        self.standard_deviation = 0.0
        self.max_time = 0.0
        self.min_time = 0.0

    def __repr__(self) -> str:
        state = "error" if self.error else f"{self.cycles} cycles"
        return f"<Benchmark {self.name!r} ({state})>"

    # -- execution ----------------------------------------------------------

    async def run(self) -> None:
        """Run the benchmark to completion.

        Stage failures are stored on ``error`` and do not raise.

        Raises:
            ValueError: If the options are invalid (e.g. no ``fn``).
            BenchmarkError: With stage ON_ERROR, if the ``on_error`` hook
                itself fails.
        """
        self.stamp = self.clock()
        raise_for_errors(validate_options(self.options), f"benchmark '{self.name}'")

        opts = self.options
        fn = cast(Routine, Routine.wrap(opts.fn, asynchronous=opts.asynchronous))
        before_each = Routine.wrap(opts.before_each)
        after_each = Routine.wrap(opts.after_each)
        max_time_ms = opts.max_time * 1000

        log.debug(
            "Running benchmark '%s' (max_time=%ss, min_samples=%d, async=%s)",
            self.name,
            opts.max_time,
            opts.min_samples,
            fn.is_async,
        )

        try:
            error = await run_callback(self, Stage.BEFORE, Routine.wrap(opts.before))
            if error:
                raise error

            while self.samples < opts.min_samples or self.total_time < max_time_ms:
                self.samples += 1
                await self._run_sample(fn, before_each, after_each)
                log.debug(
                    "Benchmark '%s': sample %d done, %d cycles, %.3fms total",
                    self.name,
                    self.samples,
                    self.cycles,
                    self.total_time,
                )

            if not self.times:
                raise BenchmarkError(
                    Stage.RUN, f"Benchmark `{self.name}` completed without timing any cycle"
                )
            self._compute_stats()

            error = await run_callback(self, Stage.AFTER, Routine.wrap(opts.after))
            if error:
                raise error
        except BenchmarkError as exc:
            await self._handle_error(exc)
            return

        log.debug(
            "Benchmark '%s' done: %d cycles, %.1f hz, mean %.6fms",
            self.name,
            self.cycles,
            self.hz,
            self.mean_time,
        )

    async def _run_sample(
        self,
        fn: Routine,
        before_each: Routine | None,
        after_each: Routine | None,
    ) -> None:
        """Run cycles until the sample budget is spent.

        Raises:
            BenchmarkError: On the first failing cycle stage.
        """
        now = self.clock
        sample_start = now()

        while now() - sample_start < SAMPLE_BUDGET_MS:
            cycle_start = now()
            self.cycles += 1

            error = await run_callback(self, Stage.BEFORE_EACH, before_each)
            if error:
                raise error

            try:
                if fn.is_async:
                    start = now()
                    await fn.func()
                    duration = now() - start
                else:
                    start = now()
                    fn.func()
                    duration = now() - start
            except Exception as exc:  # noqa: BLE001
                raise BenchmarkError.wrap(
                    Stage.RUN,
                    f"Benchmark `{self.name}` failed to run `fn`: {exc}",
                    exc,
                ) from exc

            self.times.append(duration)
            self.run_time += duration

            error = await run_callback(self, Stage.AFTER_EACH, after_each)
            if error:
                raise error

            self.total_time += now() - cycle_start

    def _compute_stats(self) -> None:
        stats = compute_stats(self.times, self.cycles)
        self.stats = stats
        self.hz = stats.hz
        self.mean_time = stats.mean_time
        self.median_time = stats.median_time
        self.standard_deviation = stats.standard_deviation
        self.max_time = stats.max_time
        self.min_time = stats.min_time

    async def _handle_error(self, error: BenchmarkError) -> None:
        self.error = error
        log.warning("%s in benchmark '%s': %s", error.kind, self.name, error.message)

        fatal = await run_callback(
            self, Stage.ON_ERROR, Routine.wrap(self.options.on_error), error
        )
        if fatal:
            log.error("Benchmark '%s': %s", self.name, fatal.message)
            raise fatal

    # -- comparison & serialization -----------------------------------------

    def compare_with(
        self, other: Benchmark, compare_by: CompareBy | str = CompareBy.PERCENT
    ) -> float:
        """Compare with *other*; positive means this benchmark is better.

        For ``percent`` the result is the percentage by which *other* is
        slower than this benchmark.
        """
        return compare_benchmarks(self, other, compare_by)

    def to_dict(self) -> dict[str, Any]:
        """Serialize results to a JSON-compatible dict.

        ``error_message`` is only present when the benchmark failed.
        """
        d: dict[str, Any] = {"name": self.name}
        if self.error is not None:
            d["error_message"] = self.error.message
        d.update(
            {
                "cycles": self.cycles,
                "samples": self.samples,
                "hz": self.hz,
                "mean_time": self.mean_time,
                "median_time": self.median_time,
                "standard_deviation": self.standard_deviation,
                "max_time": self.max_time,
                "min_time": self.min_time,
                "run_time": self.run_time,
                "total_time": self.total_time,
            }
        )
        return d
