"""In-memory page cache keyed by :class:`QueryKey`.

Each key owns one accumulated list:

* ``replace`` swaps the list wholesale (first load, refetch, search);
* ``append`` adds a page at the end, dropping ids already present so the
  first occurrence of an id keeps its position;
* ``fail`` records an error but keeps whatever was shown before.

An entry lives as long as it has observers. Entries that were never
subscribed to stay until :meth:`PageCache.discard` is called. Listeners
registered with :meth:`PageCache.on_discard` hear about every dropped key.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shopsync.models._base import ShopSyncBaseModel
from shopsync.models.page import Page
from shopsync.models.query import QueryKey

_logger = logging.getLogger(__name__)


class FetchState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    LOADED = "loaded"
    ERROR = "error"


class CacheSnapshot(BaseModel):
    """Immutable view of one cache entry handed to observers."""

    model_config = ConfigDict(frozen=True)

    key: QueryKey
    items: tuple[ShopSyncBaseModel, ...] = ()
    state: FetchState = FetchState.IDLE
    has_more: bool = False
    page_number: int = 0
    last_error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.state in (FetchState.LOADING, FetchState.LOADING_MORE)


class _CacheEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[ShopSyncBaseModel] = Field(default_factory=list)
    state: FetchState = FetchState.IDLE
    has_more: bool = False
    page_number: int = 0
    last_error: str | None = None
    observers: dict[int, Callable[[CacheSnapshot], None]] = Field(default_factory=dict)


CacheObserver = Callable[[CacheSnapshot], None]
DiscardListener = Callable[[QueryKey], None]
ItemUpdate = Callable[[ShopSyncBaseModel], ShopSyncBaseModel]


def _dedupe(existing: Iterable[ShopSyncBaseModel], incoming: Iterable[ShopSyncBaseModel]) -> list[ShopSyncBaseModel]:
    merged = list(existing)
    seen = {item.id for item in merged}
    for item in incoming:
        if item.id in seen:
            continue
        seen.add(item.id)
        merged.append(item)
    return merged


class PageCache:
    """Accumulated lists per query key with synchronous change notification."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, _CacheEntry] = {}
        self._next_token = 0
        self._discard_listeners: list[DiscardListener] = []

    def _entry(self, key: QueryKey) -> _CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _CacheEntry()
            self._entries[key] = entry
        return entry

    def _snapshot_of(self, key: QueryKey, entry: _CacheEntry) -> CacheSnapshot:
        return CacheSnapshot(
            key=key,
            items=tuple(entry.items),
            state=entry.state,
            has_more=entry.has_more,
            page_number=entry.page_number,
            last_error=entry.last_error,
        )

    def _notify(self, key: QueryKey, entry: _CacheEntry) -> None:
        if not entry.observers:
            return
        snapshot = self._snapshot_of(key, entry)
        for observer in list(entry.observers.values()):
            try:
                observer(snapshot)
            except Exception:
                _logger.warning("Cache observer for %s failed", key, exc_info=True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self, key: QueryKey) -> CacheSnapshot:
        entry = self._entries.get(key)
        if entry is None:
            return CacheSnapshot(key=key)
        return self._snapshot_of(key, entry)

    def items(self, key: QueryKey) -> list[Any]:
        entry = self._entries.get(key)
        return list(entry.items) if entry is not None else []

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # ------------------------------------------------------------------
    # Fetch-state transitions
    # ------------------------------------------------------------------

    def begin_load(self, key: QueryKey) -> None:
        """Enter ``loading``; the current list stays visible until replaced."""
        entry = self._entry(key)
        entry.state = FetchState.LOADING
        entry.last_error = None
        self._notify(key, entry)

    def begin_load_more(self, key: QueryKey) -> bool:
        """Enter ``loading_more`` if a next page may be requested.

        Returns ``False`` (and changes nothing) unless the entry is
        ``loaded`` with ``has_more`` set.
        """
        entry = self._entries.get(key)
        if entry is None or entry.state != FetchState.LOADED or not entry.has_more:
            return False
        entry.state = FetchState.LOADING_MORE
        self._notify(key, entry)
        return True

    def replace(self, key: QueryKey, page: Page[Any]) -> None:
        entry = self._entry(key)
        entry.items = _dedupe((), page.items)
        entry.page_number = page.page_number
        entry.has_more = page.has_more
        entry.state = FetchState.LOADED
        entry.last_error = None
        self._notify(key, entry)

    def append(self, key: QueryKey, page: Page[Any]) -> None:
        entry = self._entry(key)
        before = len(entry.items)
        entry.items = _dedupe(entry.items, page.items)
        dropped = len(page.items) - (len(entry.items) - before)
        if dropped:
            _logger.debug("Dropped %d duplicate item(s) appending page %d to %s", dropped, page.page_number, key)
        entry.page_number = page.page_number
        entry.has_more = page.has_more
        entry.state = FetchState.LOADED
        entry.last_error = None
        self._notify(key, entry)

    def clear(self, key: QueryKey) -> None:
        """Show an empty, fully loaded list."""
        self.replace(key, Page.empty())

    def fail(self, key: QueryKey, error: BaseException | str) -> None:
        """Enter ``error`` without touching the accumulated list."""
        entry = self._entry(key)
        entry.state = FetchState.ERROR
        entry.last_error = str(error)
        self._notify(key, entry)

    # ------------------------------------------------------------------
    # Item edits
    # ------------------------------------------------------------------

    def update_item(self, key: QueryKey, item_id: int, fn: ItemUpdate) -> tuple[Any, Any] | None:
        """Replace the item with *item_id* by ``fn(item)``.

        Returns ``(previous, updated)`` or ``None`` if the id is not cached.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        for index, item in enumerate(entry.items):
            if item.id == item_id:
                updated = fn(item)
                entry.items[index] = updated
                self._notify(key, entry)
                return item, updated
        return None

    def update_all(self, key: QueryKey, fn: ItemUpdate) -> list[Any]:
        """Apply *fn* to every cached item; returns the previous list."""
        entry = self._entries.get(key)
        if entry is None:
            return []
        previous = list(entry.items)
        entry.items = [fn(item) for item in previous]
        self._notify(key, entry)
        return previous

    def restore_item(self, key: QueryKey, expected: Any, previous: Any) -> bool:
        """Put *previous* back if the slot still holds *expected*."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        for index, item in enumerate(entry.items):
            if item is expected:
                entry.items[index] = previous
                self._notify(key, entry)
                return True
        return False

    def restore_items(self, key: QueryKey, expected: list[Any], previous: list[Any]) -> bool:
        """Put *previous* back if the list was not replaced in the meantime."""
        entry = self._entries.get(key)
        if entry is None or len(entry.items) != len(expected):
            return False
        if any(current is not item for current, item in zip(entry.items, expected, strict=True)):
            return False
        entry.items = list(previous)
        self._notify(key, entry)
        return True

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, key: QueryKey, observer: CacheObserver) -> Callable[[], None]:
        """Observe *key*; the current snapshot is delivered immediately.

        When the last observer of a key unsubscribes its entry is dropped.
        """
        entry = self._entry(key)
        token = self._next_token
        self._next_token += 1
        entry.observers[token] = observer

        def _unsubscribe() -> None:
            current = self._entries.get(key)
            if current is not entry:
                return
            entry.observers.pop(token, None)
            if not entry.observers:
                self.discard(key)

        try:
            observer(self._snapshot_of(key, entry))
        except Exception:
            _logger.warning("Cache observer for %s failed", key, exc_info=True)
        return _unsubscribe

    def on_discard(self, listener: DiscardListener) -> None:
        """Call *listener* with the key of every entry that is dropped."""
        self._discard_listeners.append(listener)

    def discard(self, key: QueryKey) -> None:
        if self._entries.pop(key, None) is None:
            return
        _logger.debug("Discarded cache entry %s", key)
        for listener in list(self._discard_listeners):
            try:
                listener(key)
            except Exception:
                _logger.warning("Discard listener for %s failed", key, exc_info=True)

    def clear_all(self) -> None:
        for key in list(self._entries):
            self._entries[key].observers.clear()
            self.discard(key)
