"""Logging for asyncbench.

Every module logs through a child of the ``asyncbench`` logger obtained
with :func:`get_logger` (``asyncbench.benchmark``, ``asyncbench.suite``,
...).  Nothing is configured on import; the CLI calls
:func:`setup_logging` once per invocation.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "asyncbench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the asyncbench logger.

    Calling it again replaces the previous handlers, closing them first.
    *verbose* wins over *quiet*.  The file handler always logs at DEBUG,
    so per-sample progress ends up in *log_file* even for quiet runs.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``asyncbench.<name>`` logger."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
