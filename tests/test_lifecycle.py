"""Tests for asyncbench.lifecycle and asyncbench.errors."""

from __future__ import annotations

import asyncio
import functools
import traceback
import unittest

from bench_test_helpers import failing

from asyncbench.errors import BenchmarkError, InvalidMetricError, Stage
from asyncbench.lifecycle import Routine, run_callback


class _Owner:
    name = "owner"


class TestStage(unittest.TestCase):
    """Tests for the Stage enum and BenchmarkError."""

    def test_status_codes(self) -> None:
        self.assertEqual(Stage.BEFORE_EACH, 1)
        self.assertEqual(Stage.AFTER_EACH, 2)
        self.assertEqual(Stage.RUN, 3)
        self.assertEqual(Stage.AFTER, 4)
        self.assertEqual(Stage.BEFORE, 5)
        self.assertEqual(Stage.ON_ERROR, 7)

    def test_kinds(self) -> None:
        self.assertEqual(Stage.RUN.kind, "RunError")
        self.assertEqual(Stage.ON_ERROR.kind, "FatalError")
        self.assertEqual(Stage.BEFORE_EACH.kind, "BeforeEachError")

    def test_error_fields(self) -> None:
        err = BenchmarkError(Stage.AFTER, "after broke")
        self.assertEqual(err.status_code, 4)
        self.assertEqual(err.kind, "AfterError")
        self.assertEqual(err.message, "after broke")
        self.assertEqual(str(err), "after broke")

    def test_wrap_keeps_cause_and_traceback(self) -> None:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            cause = exc
        err = BenchmarkError.wrap(Stage.RUN, "wrapped", cause)
        self.assertIs(err.__cause__, cause)
        self.assertIs(err.__traceback__, cause.__traceback__)
        formatted = "".join(traceback.format_exception(err))
        self.assertIn("KeyError", formatted)

    def test_invalid_metric_is_value_error(self) -> None:
        err = InvalidMetricError("speed")
        self.assertIsInstance(err, ValueError)
        self.assertIn("speed", str(err))


class TestRoutine(unittest.TestCase):
    """Tests for Routine.wrap()."""

    def test_none(self) -> None:
        self.assertIsNone(Routine.wrap(None))

    def test_sync_function(self) -> None:
        routine = Routine.wrap(lambda: 1)
        assert routine is not None
        self.assertFalse(routine.is_async)

    def test_coroutine_function(self) -> None:
        async def work() -> None:
            pass

        routine = Routine.wrap(work)
        assert routine is not None
        self.assertTrue(routine.is_async)
        self.assertEqual(routine.name, "work")

    def test_partial_of_coroutine_function(self) -> None:
        async def work(n: int) -> int:
            return n

        routine = Routine.wrap(functools.partial(work, 3))
        assert routine is not None
        self.assertTrue(routine.is_async)

    def test_async_callable_object(self) -> None:
        class Job:
            async def __call__(self) -> None:
                pass

        routine = Routine.wrap(Job())
        assert routine is not None
        self.assertTrue(routine.is_async)
        self.assertEqual(routine.name, "Job")

    def test_explicit_declaration_wins(self) -> None:
        async def work() -> None:
            pass

        routine = Routine.wrap(lambda: work(), asynchronous=True)
        assert routine is not None
        self.assertTrue(routine.is_async)

    def test_rewrap_routine(self) -> None:
        routine = Routine.wrap(lambda: None)
        self.assertIs(Routine.wrap(routine), routine)
        retagged = Routine.wrap(routine, asynchronous=True)
        assert retagged is not None
        self.assertTrue(retagged.is_async)

    def test_not_callable(self) -> None:
        with self.assertRaises(TypeError):
            Routine.wrap(42)  # type: ignore[arg-type]

    def test_routine_is_callable(self) -> None:
        routine = Routine.wrap(lambda x: x * 2)
        assert routine is not None
        self.assertTrue(callable(routine))
        self.assertEqual(routine(21), 42)


class TestRunCallback(unittest.IsolatedAsyncioTestCase):
    """Tests for run_callback()."""

    async def test_missing_callback_is_noop(self) -> None:
        self.assertIsNone(await run_callback(_Owner(), Stage.BEFORE, None))

    async def test_owner_and_args_passed(self) -> None:
        seen: list[object] = []
        owner = _Owner()
        routine = Routine.wrap(lambda *args: seen.extend(args))
        result = await run_callback(owner, Stage.BEFORE_EACH, routine, "x", 2)
        self.assertIsNone(result)
        self.assertEqual(seen, [owner, "x", 2])

    async def test_async_callback_completes_before_return(self) -> None:
        done: list[str] = []

        async def hook(owner: object) -> None:
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            done.append("hook")

        await run_callback(_Owner(), Stage.BEFORE, Routine.wrap(hook))
        self.assertEqual(done, ["hook"])

    async def test_hook_returning_coroutine_is_awaited(self) -> None:
        done: list[object] = []

        async def setup(owner: object) -> None:
            await asyncio.sleep(0)
            done.append(owner)

        owner = _Owner()
        routine = Routine.wrap(lambda o: setup(o))
        assert routine is not None
        self.assertFalse(routine.is_async)
        self.assertIsNone(await run_callback(owner, Stage.BEFORE, routine))
        self.assertEqual(done, [owner])

    async def test_rejection_of_returned_coroutine(self) -> None:
        async def setup() -> None:
            raise ConnectionError("refused")

        error = await run_callback(_Owner(), Stage.BEFORE, Routine.wrap(lambda o: setup()))
        assert error is not None
        self.assertIs(error.stage, Stage.BEFORE)
        self.assertIn("refused", error.message)

    async def test_sync_failure_returned(self) -> None:
        def setup(owner: object) -> None:
            raise RuntimeError("no database")

        error = await run_callback(_Owner(), Stage.BEFORE, Routine.wrap(setup))
        assert error is not None
        self.assertIsInstance(error, BenchmarkError)
        self.assertIs(error.stage, Stage.BEFORE)
        self.assertEqual(
            error.message,
            "Benchmark `owner` failed to run `setup` callback: no database",
        )
        self.assertIsInstance(error.__cause__, RuntimeError)
        self.assertIsNotNone(error.__traceback__)

    async def test_async_failure_returned(self) -> None:
        async def teardown(owner: object) -> None:
            await asyncio.sleep(0)
            raise ValueError("late failure")

        error = await run_callback(_Owner(), Stage.AFTER, Routine.wrap(teardown))
        assert error is not None
        self.assertIs(error.stage, Stage.AFTER)
        self.assertIn("late failure", error.message)

    async def test_failure_tagged_with_given_stage(self) -> None:
        for stage in Stage:
            error = await run_callback(_Owner(), stage, Routine.wrap(failing()))
            assert error is not None
            self.assertEqual(error.status_code, int(stage))
