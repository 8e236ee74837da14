import asyncio

import pytest

from fvframework import TaskOutcome, ValidationTask


class TestValidationTask:
    async def test_coroutine_result(self):
        async def check() -> bool:
            await asyncio.sleep(0)
            return True

        task = ValidationTask(check(), name="check")
        assert not task.done
        outcome = await task.wait()
        assert outcome == TaskOutcome(valid=True)
        assert task.done

    async def test_only_true_is_valid(self):
        async def check():
            return "yes"

        outcome = await ValidationTask(check()).wait()
        assert not outcome.valid
        assert not outcome.cancelled
        assert outcome.error is None

    async def test_error_outcome(self):
        async def check() -> bool:
            raise ConnectionError("unreachable")

        outcome = await ValidationTask(check()).wait()
        assert isinstance(outcome.error, ConnectionError)
        assert not outcome.valid

    async def test_callbacks_fire_once(self):
        task = ValidationTask.deferred()
        calls: list[TaskOutcome] = []
        task.add_done_callback(lambda _, outcome: calls.append(outcome))
        task.resolve(False)
        task.resolve(True)
        task.cancel()
        await task.wait()
        assert calls == [TaskOutcome(valid=False)]

    async def test_callback_after_settlement_is_called_immediately(self):
        task = ValidationTask.deferred()
        task.resolve(True)
        await task.wait()
        calls: list[TaskOutcome] = []
        task.add_done_callback(lambda _, outcome: calls.append(outcome))
        assert calls == [TaskOutcome(valid=True)]

    async def test_cancel_is_idempotent(self):
        task = ValidationTask.deferred()
        task.cancel()
        task.cancel()
        outcome = await task.wait()
        assert outcome.cancelled
        task.cancel()
        task.resolve(True)
        assert task.outcome == TaskOutcome(cancelled=True)

    async def test_cancel_stops_the_coroutine(self):
        started = asyncio.Event()
        finished = False

        async def check() -> bool:
            nonlocal finished
            started.set()
            await asyncio.sleep(3600)
            finished = True
            return True

        task = ValidationTask(check())
        await started.wait()
        task.cancel()
        assert (await task.wait()).cancelled
        assert not finished

    async def test_reject(self):
        task = ValidationTask.deferred()
        task.reject(ValueError("broken"))
        outcome = await task.wait()
        assert isinstance(outcome.error, ValueError)

    async def test_failing_callback_does_not_break_other_callbacks(self, caplog: pytest.LogCaptureFixture):
        task = ValidationTask.deferred()
        calls: list[bool] = []

        def broken(_task, _outcome):
            raise RuntimeError("boom")

        task.add_done_callback(broken)
        task.add_done_callback(lambda _, outcome: calls.append(outcome.valid))
        task.resolve(True)
        await task.wait()
        assert calls == [True]
        assert "Completion callback" in caplog.text

    def test_requires_running_loop(self):
        async def check() -> bool:
            return True

        coroutine = check()
        with pytest.raises(RuntimeError):
            ValidationTask(coroutine)
        coroutine.close()
