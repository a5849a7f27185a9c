"""Broadcast counter for the unread-notification badge."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

_logger = logging.getLogger(__name__)

CounterObserver = Callable[[int], None]


class BroadcastCounter:
    """A non-negative integer with synchronous fan-out to observers.

    One instance is owned by the client for its whole lifetime; every view
    that shows the badge subscribes on mount and calls the returned
    unsubscribe function on unmount. Tests construct their own instances.

    Values are clamped to ``>= 0`` and non-finite values become ``0``. All
    observers have been called with the new value by the time
    :meth:`set` returns.
    """

    def __init__(self, initial: int = 0) -> None:
        self._value = 0
        self._observers: dict[int, CounterObserver] = {}
        self._next_token = 0
        self._value = self._clamp(initial)

    @staticmethod
    def _clamp(value: float) -> int:
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            return 0
        return max(0, int(value))

    def get(self) -> int:
        return self._value

    def set(self, value: float) -> None:
        self._value = self._clamp(value)
        current = self._value
        # Copy so observers may unsubscribe while being notified.
        for observer in list(self._observers.values()):
            try:
                observer(current)
            except Exception:
                _logger.warning("Counter observer %r failed", observer, exc_info=True)

    def adjust(self, delta: int) -> None:
        self.set(self._value + delta)

    def subscribe(self, observer: CounterObserver) -> Callable[[], None]:
        """Register *observer*, deliver the current value, return an unsubscriber."""
        token = self._next_token
        self._next_token += 1
        self._observers[token] = observer

        def _unsubscribe() -> None:
            self._observers.pop(token, None)

        try:
            observer(self._value)
        except Exception:
            _logger.warning("Counter observer %r failed", observer, exc_info=True)
        return _unsubscribe

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def close(self) -> None:
        """Drop every observer (client teardown)."""
        self._observers.clear()
