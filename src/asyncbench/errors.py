"""Stage-tagged benchmark errors.

A failure anywhere in a benchmark's lifecycle is reported as a single
:class:`BenchmarkError` tagged with the :class:`Stage` that produced it.
The original exception is kept as ``__cause__`` and its traceback is
attached, so ``traceback.format_exception`` shows both.
"""

from __future__ import annotations

import enum


class Stage(enum.IntEnum):
    """Lifecycle stage whose callback failed.

    The integer values are the stable status codes reported by
    ``BenchmarkError.status_code``.
    """

    BEFORE_EACH = 1
    AFTER_EACH = 2
    RUN = 3
    AFTER = 4
    BEFORE = 5
    ON_ERROR = 7

    @property
    def kind(self) -> str:
        """Historical error name for this stage (e.g. ``"RunError"``)."""
        return _KINDS[self]


_KINDS: dict[Stage, str] = {
    Stage.BEFORE_EACH: "BeforeEachError",
    Stage.AFTER_EACH: "AfterEachError",
    Stage.RUN: "RunError",
    Stage.AFTER: "AfterError",
    Stage.BEFORE: "BeforeError",
    Stage.ON_ERROR: "FatalError",
}


class BenchmarkError(Exception):
    """A lifecycle stage of a benchmark or suite failed."""

    def __init__(self, stage: Stage, message: str = "Something went wrong") -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message

    @property
    def status_code(self) -> int:
        return int(self.stage)

    @property
    def kind(self) -> str:
        return self.stage.kind

    @classmethod
    def wrap(cls, stage: Stage, message: str, cause: BaseException) -> BenchmarkError:
        """Build a stage error around *cause*, keeping its traceback."""
        error = cls(stage, message)
        error.__cause__ = cause
        return error.with_traceback(cause.__traceback__)

    def __repr__(self) -> str:
        return f"BenchmarkError({self.stage.name}, {self.message!r})"


class InvalidMetricError(ValueError):
    """An unknown comparison metric was requested."""

    def __init__(self, metric: object) -> None:
        super().__init__(f"Unknown compare field: {metric}")
        self.metric = metric
