"""Command-line interface for asyncbench.

Subcommands:
    asyncbench run        Run the suites defined in a benchmark file
    asyncbench defaults   Print the default time budgets
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from asyncbench import __version__
from asyncbench.compare import CompareBy
from asyncbench.config import DEFAULTS, OUTPUT_FORMATS
from asyncbench.errors import BenchmarkError
from asyncbench.logging import setup_logging
from asyncbench.suite import Suite


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """asyncbench — micro-benchmarks with properly awaited async hooks."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


async def _run_suites(suites: list[Suite]) -> None:
    for suite in suites:
        await suite.run()


@main.command()
@click.argument("target")
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    help="YAML profile with run settings.",
)
@click.option(
    "--max-time",
    type=float,
    default=None,
    help=f"Seconds per benchmark, hooks included (default: {DEFAULTS['max_time']}).",
)
@click.option(
    "--min-samples",
    type=int,
    default=None,
    help=f"Minimum one-second samples per benchmark (default: {DEFAULTS['min_samples']}).",
)
@click.option(
    "--metric",
    type=click.Choice([m.value for m in CompareBy]),
    default=None,
    help="Metric used to rank benchmarks (default: mean_time).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default: table).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (default: stdout).",
)
@click.option(
    "--suite",
    "suite_names",
    type=str,
    multiple=True,
    help="Only run the suite with this name (repeatable).",
)
@click.option(
    "--allow-failures",
    is_flag=True,
    help="Exit 0 even when individual benchmarks fail.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write a DEBUG log to this file.",
)
def run(  # noqa: PLR0913
    target: str,
    profile_path: Path | None,
    max_time: float | None,
    min_samples: int | None,
    metric: str | None,
    output_format: str | None,
    output: Path | None,
    suite_names: tuple[str, ...],
    allow_failures: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Run the suites defined in TARGET.

    TARGET is a Python file or an importable module that creates Suite
    objects at module level.

    \b
    Examples:
        asyncbench run bench/strings.py
        asyncbench run bench/strings.py --max-time 1 --metric hz
        asyncbench run mypkg.benchmarks --format markdown -o report.md
    """
    from asyncbench.config import apply_overrides, load_profile, settings_from_profile
    from asyncbench.discovery import find_suites, load_target
    from asyncbench.display import format_suite
    from asyncbench.export import export_csv, export_json, export_markdown

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        profile = load_profile(profile_path) if profile_path else {}
        settings = settings_from_profile(
            profile,
            cli_overrides={
                "max_time": max_time,
                "min_samples": min_samples,
                "metric": metric,
                "format": output_format,
                "suites": list(suite_names) or None,
                "allow_failures": allow_failures or None,
            },
        )
        module = load_target(target)
        suites = find_suites(module, settings.suites)
    except (ValueError, LookupError, OSError, ImportError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not suites:
        click.echo(f"Error: no Suite objects found in {target}", err=True)
        raise SystemExit(1)

    for suite in suites:
        apply_overrides(suite, max_time=settings.max_time, min_samples=settings.min_samples)

    try:
        asyncio.run(_run_suites(suites))
    except (ValueError, BenchmarkError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    if settings.output_format == "json":
        text = export_json(suites)
    elif settings.output_format == "csv":
        text = export_csv(suites, settings.metric)
    elif settings.output_format == "markdown":
        text = export_markdown(suites, settings.metric)
    else:
        text = "\n\n".join(format_suite(s, settings.metric) for s in suites)

    if output:
        output.write_text(text + "\n")
        click.echo(f"Results written to {output}")
    else:
        click.echo(text)

    suite_failed = any(s.error is not None for s in suites)
    bench_failed = any(b.error is not None for s in suites for b in s.benchmarks)
    if suite_failed or (bench_failed and not settings.allow_failures):
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# defaults
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def defaults(as_json: bool) -> None:
    """Print the default benchmark budgets."""
    if as_json:
        click.echo(json.dumps(DEFAULTS, indent=2))
        return
    click.echo(f"max_time:    {DEFAULTS['max_time']} s")
    click.echo(f"min_samples: {DEFAULTS['min_samples']}")
