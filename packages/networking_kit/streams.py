"""Single-event result streams delivered on a fixed callback loop.

A ``ResultStream`` wraps a coroutine factory. Each subscription runs the
factory once, as an ``asyncio.Task`` on the callback loop, and delivers
exactly one terminal event: a value followed by completion, or a
``NetworkError``. Cancelling a subscription cancels that task.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
import threading
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

from .errors import NetworkError, as_network_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle for one in-flight stream subscription."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._cancelled = False
        self._done = False
        self._task: asyncio.Task[object] | None = None

    @property
    def cancelled(self) -> bool:
        """Return whether ``cancel`` was called before delivery."""
        return self._cancelled

    @property
    def done(self) -> bool:
        """Return whether the terminal event has been delivered."""
        return self._done

    def cancel(self) -> None:
        """Cancel the running work; no callback fires after this returns.

        Safe to call from inside a callback of the same subscription (for
        example a progress observer) and from other threads.
        """
        with self._lock:
            if self._done or self._cancelled:
                return
            self._cancelled = True
            task = self._task
        if task is None:
            return
        if _running_on(self._loop):
            task.cancel()
        else:
            self._loop.call_soon_threadsafe(task.cancel)

    def _start(
        self,
        work: Callable[[], Awaitable[object]],
        deliver: Callable[[asyncio.Task[object]], None],
    ) -> None:
        """Create the task on the loop unless the subscription was cancelled."""
        context = contextvars.copy_context()
        context.run(_ACTIVE_SUBSCRIPTION.set, self)
        with self._lock:
            if self._cancelled:
                return
            task = self._loop.create_task(work(), context=context)
            self._task = task
        task.add_done_callback(deliver)

    def _claim_delivery(self) -> bool:
        """Mark the subscription delivered; ``False`` when already cancelled."""
        with self._lock:
            if self._cancelled or self._done:
                return False
            self._done = True
            return True


_ACTIVE_SUBSCRIPTION: contextvars.ContextVar[Subscription | None] = (
    contextvars.ContextVar("networking_kit_active_subscription", default=None)
)


def cancellation_requested() -> bool:
    """Return whether the work running in this context has been cancelled.

    True once the owning subscription was cancelled, or when the current task
    has a pending cancellation request.
    """
    subscription = _ACTIVE_SUBSCRIPTION.get()
    if subscription is not None and subscription.cancelled:
        return True
    try:
        task = asyncio.current_task()
    except RuntimeError:
        return False
    return task is not None and task.cancelling() > 0


def _running_on(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class ResultStream(Generic[T]):
    """Cold stream emitting exactly one value or one ``NetworkError``."""

    def __init__(
        self,
        factory: Callable[[], Awaitable[T]],
        *,
        callback_loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Wrap ``factory``; callbacks run on ``callback_loop`` when given."""
        self._factory = factory
        self._callback_loop = callback_loop

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[NetworkError], None] | None = None,
        on_completed: Callable[[], None] | None = None,
    ) -> Subscription:
        """Start the work and deliver its outcome to the given callbacks.

        Without an explicit callback loop this must be called from a running
        event loop, which then hosts both the work and the callbacks. With one,
        it may be called from any thread.
        """
        loop = self._callback_loop or asyncio.get_running_loop()
        subscription = Subscription(loop)

        async def _run() -> T:
            return await self._factory()

        def _deliver(task: asyncio.Task[T]) -> None:
            if task.cancelled() or not subscription._claim_delivery():
                return
            error = task.exception()
            if error is None:
                on_next(task.result())
                if on_completed is not None:
                    on_completed()
                return
            failure = as_network_error(error)
            if on_error is None:
                logger.warning("unhandled stream failure: %s", failure)
                return
            on_error(failure)

        if _running_on(loop):
            subscription._start(_run, _deliver)
        else:
            loop.call_soon_threadsafe(subscription._start, _run, _deliver)
        return subscription

    async def first(self) -> T:
        """Await the single value, raising the ``NetworkError`` on failure."""
        try:
            return await self._factory()
        except NetworkError:
            raise
        except Exception as exc:
            raise as_network_error(exc) from exc

    async def __aiter__(self) -> AsyncIterator[T]:
        """Yield the single value, or raise the ``NetworkError``."""
        yield await self.first()
