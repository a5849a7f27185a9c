"""Debounce gate for search-as-you-type input."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebounceGate(Generic[T]):
    """Coalesce a burst of values into one callback with the latest value.

    Every :meth:`submit` cancels the pending timer and starts a new one; the
    callback fires only after ``delay`` seconds pass without a newer value.
    Coroutine callbacks are started as tasks which the gate keeps track of
    until they finish.

    The gate only guarantees single-flight at the scheduling layer: a
    callback task that is already running is never cancelled by a newer
    submission. Callers that issue requests from the callback must discard
    stale responses themselves.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[T], Awaitable[Any] | None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._latest: T | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a trigger is scheduled and has not fired yet."""
        return self._handle is not None

    @property
    def idle(self) -> bool:
        """Whether nothing is scheduled and no callback task is running."""
        return self._handle is None and not self._tasks

    def submit(self, value: T) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._latest = value
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending trigger, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        value = self._latest
        self._latest = None
        try:
            result = self._callback(value)  # type: ignore[arg-type]
        except Exception:
            _logger.warning("Debounced callback failed", exc_info=True)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Debounced callback failed", exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait for callback tasks that already started."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel the pending trigger and let running callbacks finish."""
        self.cancel()
        await self.wait_idle()
