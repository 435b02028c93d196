import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from .errors import Cancelled

T = TypeVar("T")


class Context:
    """
    Cancellable request context handed to every store operation.

    A context is done once `cancel()` was called or its deadline passed. Work
    started through `run()` is cancelled as soon as the context is done, and the
    caller gets `Cancelled` instead of a result.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._done = asyncio.Event()
        self._reason: Optional[str] = None

    @classmethod
    def background(cls) -> "Context":
        return cls()

    def cancel(self, reason: str = "context cancelled"):
        if self._reason is None:
            self._reason = reason
        self._done.set()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._done.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> Optional[str]:
        if self._reason:
            return self._reason
        if self.cancelled:
            return "deadline exceeded"
        return None

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self):
        if self.cancelled:
            raise Cancelled(self.reason)

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, aborting it when the context is done first."""
        if self.cancelled:
            # never started, so nothing to roll back
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise Cancelled(self.reason)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._done.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            # the caller's own task got cancelled; that stays an asyncio cancellation
            waiter.cancel()
            await self._abort(task)
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        await self._abort(task)
        if not task.cancelled() and task.exception() is None:
            # it got past its commit before it could be stopped
            return task.result()
        raise Cancelled(self._reason or "deadline exceeded")

    @staticmethod
    async def _abort(task: asyncio.Future):
        task.cancel()
        # wait for the task to unwind so its transaction is rolled back before returning
        await asyncio.gather(task, return_exceptions=True)
