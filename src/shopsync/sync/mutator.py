"""Optimistic item edits with background server sync.

An edit is applied to the cached list and to the unread counter before the
confirming request is sent. The request runs as a background task; its
result is never merged back. What happens when it fails is decided by
:class:`RollbackPolicy`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from shopsync.models.query import QueryKey
from shopsync.state.cache import PageCache
from shopsync.state.counter import BroadcastCounter

_logger = logging.getLogger(__name__)

RemoteCall = Callable[[], Awaitable[Any]]


class RollbackPolicy(StrEnum):
    KEEP = "keep"
    """Keep the optimistic state and only log the failure."""
    REVERT = "revert"
    """Restore the previous item(s) and counter value."""


@dataclass(frozen=True)
class Mutation:
    """A field update plus the counter change it implies.

    ``counter_delta`` is applied only when the update actually changes the
    item, so marking an already-read notification read leaves the counter
    alone.
    """

    changes: dict[str, Any] = field(default_factory=dict)
    counter_delta: int = 0

    def apply(self, item: Any) -> Any:
        return item.model_copy(update=self.changes)

    def changes_item(self, item: Any) -> bool:
        return any(getattr(item, name, None) != value for name, value in self.changes.items())


MARK_READ = Mutation(changes={"is_read": True}, counter_delta=-1)


class OptimisticMutator:
    """Apply edits locally at once and confirm them in the background."""

    def __init__(
        self,
        cache: PageCache,
        counter: BroadcastCounter,
        *,
        rollback: RollbackPolicy = RollbackPolicy.KEEP,
    ) -> None:
        self._cache = cache
        self._counter = counter
        self._rollback = rollback
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def rollback_policy(self) -> RollbackPolicy:
        return self._rollback

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def apply_and_sync(
        self,
        key: QueryKey,
        item_id: int,
        mutation: Mutation,
        remote_call: RemoteCall,
    ) -> asyncio.Task[None]:
        """Edit one cached item, adjust the counter, then confirm remotely.

        The cache and counter observers have seen the new state when this
        returns. The returned task never raises.
        """
        previous: Any = None
        updated: Any = None
        delta = 0
        current = next((item for item in self._cache.items(key) if item.id == item_id), None)
        if current is None:
            _logger.debug("Item %d not cached under %s; syncing without local edit", item_id, key)
        elif mutation.changes_item(current):
            result = self._cache.update_item(key, item_id, mutation.apply)
            if result is not None:
                previous, updated = result
                delta = mutation.counter_delta
                if delta:
                    self._counter.adjust(delta)

        def _revert() -> None:
            if previous is not None and self._cache.restore_item(key, updated, previous):
                if delta:
                    self._counter.adjust(-delta)

        return self._spawn(f"item {item_id} of {key}", remote_call, _revert)

    def apply_all_and_sync(
        self,
        key: QueryKey,
        mutation: Mutation,
        remote_call: RemoteCall,
    ) -> asyncio.Task[None]:
        """Edit every cached item, zero the counter, then confirm remotely."""
        previous_count = self._counter.get()
        previous_items = self._cache.update_all(key, mutation.apply)
        updated_items = self._cache.items(key)
        self._counter.set(0)

        def _revert() -> None:
            if self._cache.restore_items(key, updated_items, previous_items):
                self._counter.set(previous_count)

        return self._spawn(f"all items of {key}", remote_call, _revert)

    def _spawn(self, label: str, remote_call: RemoteCall, revert: Callable[[], None]) -> asyncio.Task[None]:
        async def _sync() -> None:
            try:
                await remote_call()
            except Exception:
                _logger.warning("Background sync for %s failed", label, exc_info=True)
                if self._rollback == RollbackPolicy.REVERT:
                    revert()
                    _logger.debug("Reverted optimistic edit for %s", label)

        task = asyncio.get_running_loop().create_task(_sync())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every outstanding background sync."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
