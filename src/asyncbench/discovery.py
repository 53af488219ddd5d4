"""Discovery of suites in user benchmark files.

A benchmark file is a Python file (or importable module) that creates
:class:`~asyncbench.suite.Suite` objects at module level::

    suite = Suite("String comparison")
    suite.add("direct", lambda: "a" == "a")

Suites are returned in definition order.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from asyncbench.logging import get_logger
from asyncbench.suite import Suite

log = get_logger("discovery")


def load_target(target: str) -> ModuleType:
    """Import *target*, a ``.py`` path or a dotted module name.

    Raises:
        FileNotFoundError: If a path target does not exist.
        ImportError: If the module cannot be imported.
    """
    path = Path(target)
    if target.endswith(".py") or path.is_file():
        if not path.exists():
            raise FileNotFoundError(f"Benchmark file not found: {target}")
        module_name = f"_asyncbench_target_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load benchmark file: {target}")
        module = importlib.util.module_from_spec(spec)
        # Allow sibling imports from the benchmark file's directory.
        sys.path.insert(0, str(path.resolve().parent))
        try:
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        finally:
            sys.path.pop(0)
        log.debug("Loaded benchmark file %s", path)
        return module

    module = importlib.import_module(target)
    log.debug("Imported benchmark module %s", target)
    return module


def find_suites(module: ModuleType, names: list[str] | None = None) -> list[Suite]:
    """Collect module-level suites, optionally filtered by suite name.

    Raises:
        LookupError: If a requested name matches no suite.
    """
    suites: list[Suite] = []
    seen: set[int] = set()
    for value in vars(module).values():
        if isinstance(value, Suite) and id(value) not in seen:
            seen.add(id(value))
            suites.append(value)

    if names:
        by_name = {s.name for s in suites}
        missing = [n for n in names if n not in by_name]
        if missing:
            raise LookupError(
                f"No suite named {', '.join(repr(n) for n in missing)}. "
                f"Available: {', '.join(repr(s.name) for s in suites) or 'none'}"
            )
        wanted = set(names)
        suites = [s for s in suites if s.name in wanted]

    log.debug("Found %d suite(s) in %s", len(suites), module.__name__)
    return suites
