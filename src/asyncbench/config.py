"""Benchmark and suite configuration.

Handles:
- Option dataclasses for benchmarks and suites, with static defaults.
- Merging a function/options argument pair into resolved options.
- Validating options before a run starts.
- Loading run settings from YAML profiles and applying CLI overrides.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Union

from asyncbench.compare import CompareBy, parse_metric
from asyncbench.logging import get_logger

if TYPE_CHECKING:
    from asyncbench.suite import Suite

log = get_logger("config")

DEFAULTS: dict[str, Any] = {
    "max_time": 5,
    "min_samples": 1,
}

# Plain callables or Routine instances declaring their sync/async nature.
Hook = Callable[..., Any]


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass
class BenchmarkOptions:
    """Configuration of a single benchmark."""

    max_time: float = DEFAULTS["max_time"]  # seconds, hooks included
    min_samples: int = DEFAULTS["min_samples"]
    fn: Hook | None = None
    before: Hook | None = None
    before_each: Hook | None = None
    after_each: Hook | None = None
    after: Hook | None = None
    on_error: Hook | None = None
    # None = declared by definition (``async def``).
    asynchronous: bool | None = None


@dataclass
class SuiteOptions:
    """Configuration of a suite; budgets are inherited by its benchmarks."""

    max_time: float = DEFAULTS["max_time"]
    min_samples: int = DEFAULTS["min_samples"]
    before: Hook | None = None
    before_each: Hook | None = None
    after_each: Hook | None = None
    after: Hook | None = None
    on_error: Hook | None = None


OptionsArg = Union[BenchmarkOptions, Mapping[str, Any], None]


def _option_items(options: Any, cls: type) -> dict[str, Any]:
    """Return the explicitly given options as a dict.

    Dataclass instances contribute every field; mappings contribute their
    keys, which must all be known option names.
    """
    if options is None:
        return {}
    if isinstance(options, cls):
        return {f.name: getattr(options, f.name) for f in dataclasses.fields(cls)}
    if not isinstance(options, Mapping):
        raise TypeError(
            f"Options must be a {cls.__name__} or a mapping, got {type(options).__name__}"
        )
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise ValueError(
            f"Unknown option(s) {', '.join(unknown)}. Valid options: {', '.join(sorted(known))}"
        )
    return dict(options)


def resolve_benchmark_options(
    fn_or_options: Hook | OptionsArg,
    options: OptionsArg = None,
    *,
    defaults: Mapping[str, Any] | None = None,
) -> BenchmarkOptions:
    """Merge the constructor arguments of a benchmark.

    Precedence (last wins): *defaults*, *options*, *fn_or_options*.
    When *fn_or_options* is callable it becomes ``fn``.

    Raises:
        TypeError: If an options argument has the wrong type.
        ValueError: If a mapping contains unknown option names.
    """
    merged: dict[str, Any] = dict(DEFAULTS)
    if defaults:
        merged.update(defaults)
    merged.update(_option_items(options, BenchmarkOptions))

    if callable(fn_or_options) and not isinstance(fn_or_options, Mapping):
        merged["fn"] = fn_or_options
    else:
        merged.update(_option_items(fn_or_options, BenchmarkOptions))

    return BenchmarkOptions(**merged)


def resolve_suite_options(options: SuiteOptions | Mapping[str, Any] | None) -> SuiteOptions:
    """Merge suite options over the static defaults."""
    merged: dict[str, Any] = dict(DEFAULTS)
    merged.update(_option_items(options, SuiteOptions))
    return SuiteOptions(**merged)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def _validate_budget(
    max_time: Any, min_samples: Any, errors: list[ValidationError]
) -> None:
    if not isinstance(min_samples, int) or isinstance(min_samples, bool) or min_samples < 1:
        errors.append(
            ValidationError(
                field="min_samples",
                message=f"min_samples must be an integer >= 1 (got {min_samples!r}).",
            )
        )
    if not isinstance(max_time, (int, float)) or isinstance(max_time, bool) or max_time < 0:
        errors.append(
            ValidationError(
                field="max_time",
                message=f"max_time must be a non-negative number of seconds (got {max_time!r}).",
            )
        )


def validate_options(options: BenchmarkOptions) -> list[ValidationError]:
    """Validate benchmark options.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if options.fn is None:
        errors.append(
            ValidationError(field="fn", message="No function to benchmark was given.")
        )
    elif not callable(options.fn):
        errors.append(
            ValidationError(
                field="fn",
                message=f"fn must be callable (got {type(options.fn).__name__}).",
            )
        )

    for hook in ("before", "before_each", "after_each", "after", "on_error"):
        value = getattr(options, hook)
        if value is not None and not callable(value):
            errors.append(
                ValidationError(
                    field=hook,
                    message=f"{hook} must be callable (got {type(value).__name__}).",
                )
            )

    _validate_budget(options.max_time, options.min_samples, errors)

    if options.max_time == 0 and options.min_samples == 1:
        errors.append(
            ValidationError(
                field="max_time",
                message="max_time is 0: only a single one-second sample will be taken.",
                severity="warning",
            )
        )

    return errors


def validate_suite_options(options: SuiteOptions) -> list[ValidationError]:
    """Validate suite options.  Same contract as validate_options()."""
    errors: list[ValidationError] = []
    for hook in ("before", "before_each", "after_each", "after", "on_error"):
        value = getattr(options, hook)
        if value is not None and not callable(value):
            errors.append(
                ValidationError(
                    field=hook,
                    message=f"{hook} must be callable (got {type(value).__name__}).",
                )
            )
    _validate_budget(options.max_time, options.min_samples, errors)
    return errors


def raise_for_errors(errors: list[ValidationError], what: str) -> None:
    """Log warnings and raise a single ValueError for fatal errors."""
    fatal = [e for e in errors if e.severity == "error"]
    for w in errors:
        if w.severity == "warning":
            log.warning("Config warning for %s: %s: %s", what, w.field, w.message)
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError(f"Invalid configuration for {what}:\n" + "\n".join(messages))


# ---------------------------------------------------------------------------
# Run settings (CLI + YAML profile)
# ---------------------------------------------------------------------------


OUTPUT_FORMATS = ("table", "json", "csv", "markdown")


@dataclass
class RunSettings:
    """Resolved settings for a CLI benchmark run."""

    max_time: float | None = None  # None = keep what the suite declares
    min_samples: int | None = None
    metric: CompareBy = CompareBy.MEAN_TIME
    output_format: str = "table"
    suites: list[str] = field(default_factory=list)  # empty = all
    allow_failures: bool = False


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load run settings from a YAML file.

    Profile format::

        max_time: 2
        min_samples: 3
        metric: hz
        format: markdown
        suites: ["String comparison"]

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")
    return data


_PROFILE_KEYS = {"max_time", "min_samples", "metric", "format", "suites", "allow_failures"}


def settings_from_profile(
    profile_data: Mapping[str, Any] | None = None,
    *,
    cli_overrides: Mapping[str, Any] | None = None,
) -> RunSettings:
    """Build RunSettings from a parsed profile and CLI values.

    CLI values that are not None take precedence over profile values.

    Raises:
        ValueError: On unknown profile keys or invalid values.
    """
    profile = dict(profile_data or {})
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    unknown = sorted(set(profile) - _PROFILE_KEYS)
    if unknown:
        raise ValueError(
            f"Unknown profile key(s): {', '.join(unknown)}. "
            f"Valid keys: {', '.join(sorted(_PROFILE_KEYS))}"
        )

    def pick(key: str, default: Any = None) -> Any:
        if key in cli:
            return cli[key]
        return profile.get(key, default)

    suites = pick("suites", [])
    if isinstance(suites, str):
        suites = [suites]

    output_format = pick("format", "table")
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output format '{output_format}'. Valid: {', '.join(OUTPUT_FORMATS)}"
        )

    settings = RunSettings(
        max_time=pick("max_time"),
        min_samples=pick("min_samples"),
        metric=parse_metric(pick("metric", CompareBy.MEAN_TIME)),
        output_format=output_format,
        suites=list(suites),
        allow_failures=bool(pick("allow_failures", False)),
    )

    errors: list[ValidationError] = []
    _validate_budget(
        settings.max_time if settings.max_time is not None else 0,
        settings.min_samples if settings.min_samples is not None else 1,
        errors,
    )
    raise_for_errors(errors, "run settings")
    return settings


def apply_overrides(
    suite: Suite,
    *,
    max_time: float | None = None,
    min_samples: int | None = None,
) -> None:
    """Re-apply time budgets to a suite and every benchmark it owns."""
    changes: dict[str, Any] = {}
    if max_time is not None:
        changes["max_time"] = max_time
    if min_samples is not None:
        changes["min_samples"] = min_samples
    if not changes:
        return

    suite.options = dataclasses.replace(suite.options, **changes)
    for bench in suite.benchmarks:
        bench.options = dataclasses.replace(bench.options, **changes)
    log.debug("Applied overrides %s to suite '%s'", changes, suite.name)
