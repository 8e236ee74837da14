"""
Contains the cancellable task which represents a single in-flight asynchronous validator check.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome:
    """
    The settlement of a `ValidationTask`. At most one of `cancelled` and `error` is set; `valid` is only True if the
    awaitable returned exactly `True`.
    """

    valid: bool = False
    cancelled: bool = False
    error: Optional[BaseException] = None


TaskCallback = Callable[["ValidationTask", TaskOutcome], None]


class ValidationTask:
    """
    Wraps an awaitable which resolves to a boolean into a future on the running event loop.

    Every completion callback is invoked exactly once, also if the task got cancelled or the awaitable raised.
    `cancel` may be called any number of times and after the settlement, in which case it does nothing.
    """

    def __init__(self, awaitable: Awaitable[Any], name: Optional[str] = None):
        self.name = name
        loop = asyncio.get_running_loop()
        self._future: asyncio.Future = asyncio.ensure_future(awaitable, loop=loop)
        self._callbacks: list[TaskCallback] = []
        self._outcome: Optional[TaskOutcome] = None
        self._settled = asyncio.Event()
        self._future.add_done_callback(self._settle)

    @classmethod
    def deferred(cls, name: Optional[str] = None) -> "ValidationTask":
        """
        Creates a task which is settled by calling `resolve` or `reject`. This is meant for validators which get their
        result through a callback instead of a coroutine.
        """
        return cls(asyncio.get_running_loop().create_future(), name=name)

    def resolve(self, valid: bool) -> None:
        """Settles a deferred task. Does nothing if the task is already done."""
        if not self._future.done():
            self._future.set_result(valid)

    def reject(self, error: BaseException) -> None:
        """Settles a deferred task with an error. Does nothing if the task is already done."""
        if not self._future.done():
            self._future.set_exception(error)

    def cancel(self) -> None:
        """Cancels the underlying future"""
        if self._future.done():
            return
        self._future.cancel()

    @property
    def done(self) -> bool:
        """True if the completion callbacks were fired"""
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[TaskOutcome]:
        """The outcome or None if the task is still running"""
        return self._outcome

    def add_done_callback(self, callback: TaskCallback) -> None:
        """
        Registers a callback which receives this task and its outcome. If the task is already settled the callback is
        invoked immediately.
        """
        if self._outcome is not None:
            callback(self, self._outcome)
        else:
            self._callbacks.append(callback)

    async def wait(self) -> TaskOutcome:
        """Waits until the task is settled and all callbacks got invoked. Never raises on failed checks."""
        await self._settled.wait()
        assert self._outcome is not None
        return self._outcome

    def _settle(self, future: asyncio.Future) -> None:
        if self._outcome is not None:
            return
        if future.cancelled():
            outcome = TaskOutcome(cancelled=True)
        elif future.exception() is not None:
            outcome = TaskOutcome(error=future.exception())
        else:
            outcome = TaskOutcome(valid=future.result() is True)
        self._outcome = outcome
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self, outcome)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Completion callback of task %s failed", self)
        self._settled.set()

    def __repr__(self):
        state = "pending" if self._outcome is None else self._outcome
        return f"ValidationTask({self.name!r}, {state})"
