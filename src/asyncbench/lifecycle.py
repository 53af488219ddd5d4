"""Invocation of user callbacks (hooks and measured functions).

The measured function is timed, so whether it is asynchronous is decided
once, when it is wrapped in a :class:`Routine`, never per call.  ``async
def`` functions are declared asynchronous by their definition; anything
else (a lambda returning a coroutine, a callable object with an async
``__call__``) can be declared explicitly with ``asynchronous=True``.

Hooks are not timed.  A hook may be declared the same way (pass a
``Routine`` wherever a hook is accepted), and a plain hook that returns
an awaitable, such as ``lambda bench: setup()``, is awaited as well.
Either way a hook has finished before the next step starts.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable

from asyncbench.errors import BenchmarkError, Stage
from asyncbench.logging import get_logger

log = get_logger("lifecycle")


@dataclass(frozen=True)
class Routine:
    """A user callable tagged as synchronous or asynchronous.

    Routines are callable themselves, so a declared routine can be given
    as ``fn`` or as any hook::

        Benchmark("fetch", {
            "fn": fetch,
            "before": Routine.wrap(lambda bench: connect(), asynchronous=True),
        })
    """

    func: Callable[..., Any]
    is_async: bool

    @classmethod
    def wrap(
        cls,
        func: Callable[..., Any] | Routine | None,
        *,
        asynchronous: bool | None = None,
    ) -> Routine | None:
        """Wrap *func*, or return None when there is nothing to call.

        Args:
            func: The callable (or an existing Routine, returned as is
                unless *asynchronous* overrides its tag).
            asynchronous: Explicit declaration.  None means "declared by
                the definition": true only for coroutine functions.
        """
        if func is None:
            return None
        if isinstance(func, Routine):
            if asynchronous is None or asynchronous == func.is_async:
                return func
            return cls(func.func, asynchronous)
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")
        if asynchronous is None:
            asynchronous = inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
                getattr(func, "__call__", None)
            )
        return cls(func, asynchronous)

    def __call__(self, *args: Any) -> Any:
        return self.func(*args)

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", None) or type(self.func).__name__

    async def invoke(self, *args: Any) -> Any:
        """Call the routine as a hook and wait until it has finished.

        Declared routines are always awaited; an undeclared one is awaited
        when it returns an awaitable.
        """
        result = self.func(*args)
        if self.is_async or inspect.isawaitable(result):
            result = await result
        return result


async def run_callback(
    owner: Any,
    stage: Stage,
    callback: Routine | None,
    *args: Any,
) -> BenchmarkError | None:
    """Run an optional lifecycle callback bound to *owner*.

    The callback receives *owner* as its first argument, followed by
    *args*.  A missing callback is a no-op.  Failures are returned, not
    raised, so the caller decides whether they are fatal.

    Returns:
        None on success, otherwise a BenchmarkError tagged with *stage*.
    """
    if callback is None:
        return None
    try:
        await callback.invoke(owner, *args)
    except Exception as exc:  # noqa: BLE001
        name = getattr(owner, "name", owner)
        log.debug("Callback %s of %s failed: %s", callback.name, name, exc)
        return BenchmarkError.wrap(
            stage,
            f"Benchmark `{name}` failed to run `{callback.name}` callback: {exc}",
            exc,
        )
    return None
