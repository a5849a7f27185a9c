"""Fetch lifecycle for paginated lists.

The coordinator is the only writer of list data into the :class:`PageCache`
and the boundary past which fetch errors do not propagate:

* :class:`NetworkError` marks the entry ``error``, keeps the items already
  shown and is reported once through ``on_error``;
* :class:`MalformedPayloadError` and :class:`SessionMissingError` degrade to
  an empty page with no report.

Every request is tagged with a sequence number. Only the response to the
latest request of a key may write to that key; older responses are dropped
when they arrive. In-flight requests are never aborted. When the cache
drops a key its sequence number is forgotten too, so a response still in
flight for it cannot bring the entry back.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from shopsync.exceptions import (
    IdentifierUnparseableError,
    MalformedPayloadError,
    SessionMissingError,
    ShopSyncError,
)
from shopsync.models.page import Page
from shopsync.models.query import QueryKey, QueryResource
from shopsync.state.cache import CacheSnapshot, FetchState, PageCache
from shopsync.state.counter import BroadcastCounter
from shopsync.sync.debounce import DebounceGate

_logger = logging.getLogger(__name__)

PageFetcher = Callable[[QueryKey, int], Awaitable[Page[Any]]]
ErrorReporter = Callable[[QueryKey, ShopSyncError], None]


def parse_identifier(text: str) -> int:
    """Parse search text as a positive numeric id (``"42"`` or ``"#42"``)."""
    term = text.strip().removeprefix("#").strip()
    if not term.isdecimal():
        raise IdentifierUnparseableError(text)
    value = int(term)
    if value <= 0:
        raise IdentifierUnparseableError(text)
    return value


class QueryCoordinator:
    """Load, paginate, refetch and search lists held in a :class:`PageCache`."""

    def __init__(
        self,
        cache: PageCache,
        fetch_page: PageFetcher,
        *,
        counter: BroadcastCounter | None = None,
        debounce_delay: float = 0.5,
        on_error: ErrorReporter | None = None,
    ) -> None:
        self._cache = cache
        self._fetch_page = fetch_page
        self._counter = counter
        self._on_error = on_error
        self._debounce_delay = debounce_delay
        self._last_token = 0
        self._sequence: dict[QueryKey, int] = {}
        self._loads: dict[QueryKey, asyncio.Future[None]] = {}
        # Key actually sent to the server for the list stored under a key;
        # differs from the key itself while search results are shown.
        self._fetch_keys: dict[QueryKey, QueryKey] = {}
        self._gates: dict[QueryKey, DebounceGate[tuple[QueryKey, str]]] = {}
        cache.on_discard(self._forget)

    @property
    def cache(self) -> PageCache:
        return self._cache

    # ------------------------------------------------------------------
    # Sequence tokens
    # ------------------------------------------------------------------

    def _issue(self, key: QueryKey) -> int:
        # Tokens are unique across keys so a forgotten key never reuses one.
        self._last_token += 1
        self._sequence[key] = self._last_token
        return self._last_token

    def _is_current(self, key: QueryKey, token: int) -> bool:
        return self._sequence.get(key) == token

    def latest_token(self, key: QueryKey) -> int:
        return self._sequence.get(key, 0)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def load(self, key: QueryKey) -> CacheSnapshot:
        """Fetch page 1 unless the list is already loaded.

        If a first-page fetch for *key* is in flight, wait for it instead of
        starting another one.
        """
        if key in self._loads:
            while (waiter := self._loads.get(key)) is not None:
                await asyncio.shield(waiter)
            return self._cache.snapshot(key)
        current = self._cache.snapshot(key)
        if key in self._cache and current.state in (FetchState.LOADED, FetchState.LOADING_MORE):
            return current
        return await self.refetch(key)

    async def refetch(self, key: QueryKey) -> CacheSnapshot:
        """Fetch page 1 again and replace the accumulated list on success."""
        self._fetch_keys[key] = key
        return await self._run(key, key, 1, append=False)

    async def fetch_next_page(self, key: QueryKey) -> CacheSnapshot:
        """Append the next page; a no-op unless the list is loaded with more pages."""
        snapshot = self._cache.snapshot(key)
        if not self._cache.begin_load_more(key):
            return snapshot
        fetch_key = self._fetch_keys.get(key, key)
        return await self._run(key, fetch_key, snapshot.page_number + 1, append=True)

    def search(self, key: QueryKey, text: str) -> None:
        """Feed one search-input change; the lookup runs after the quiet period.

        Each key has its own quiet period, so typing into one list never
        cancels a pending search of another.
        """
        gate = self._gates.get(key)
        if gate is None:
            gate = DebounceGate(self._debounce_delay, self._on_search_trigger)
            self._gates[key] = gate
        gate.submit((key, text))

    async def search_now(self, key: QueryKey, text: str) -> CacheSnapshot:
        """Run the search for *text* against the list stored under *key*.

        Blank text restores the canonical listing. Numeric text looks up
        that exact order id. Any other text clears the list.
        """
        if not text.strip():
            return await self.refetch(key)
        try:
            identifier = parse_identifier(text)
        except IdentifierUnparseableError:
            _logger.debug("Search text %r is not an identifier; clearing %s", text, key)
            self._issue(key)
            self._fetch_keys[key] = key
            self._cache.clear(key)
            return self._cache.snapshot(key)
        lookup_key = key.with_updates(order_id=identifier)
        self._fetch_keys[key] = lookup_key
        return await self._run(key, lookup_key, 1, append=False)

    async def aclose(self) -> None:
        for gate in list(self._gates.values()):
            await gate.aclose()
        self._gates.clear()

    @property
    def search_pending(self) -> bool:
        return any(gate.pending for gate in self._gates.values())

    async def wait_search_idle(self) -> None:
        for gate in list(self._gates.values()):
            await gate.wait_idle()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _on_search_trigger(self, value: tuple[QueryKey, str]) -> None:
        key, text = value
        await self.search_now(key, text)

    def _report(self, key: QueryKey, exc: ShopSyncError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(key, exc)
        except Exception:
            _logger.warning("Error reporter failed for %s", key, exc_info=True)

    def _forget(self, key: QueryKey) -> None:
        """Drop per-key state once the cache discarded *key*."""
        self._sequence.pop(key, None)
        self._fetch_keys.pop(key, None)
        gate = self._gates.get(key)
        if gate is not None:
            gate.cancel()
            if gate.idle:
                del self._gates[key]

    async def _run(self, key: QueryKey, fetch_key: QueryKey, page_number: int, *, append: bool) -> CacheSnapshot:
        if append:
            return await self._fetch(key, fetch_key, page_number, append=True)
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._loads[key] = waiter
        try:
            return await self._fetch(key, fetch_key, page_number, append=False)
        finally:
            if self._loads.get(key) is waiter:
                del self._loads[key]
            waiter.set_result(None)

    async def _fetch(self, key: QueryKey, fetch_key: QueryKey, page_number: int, *, append: bool) -> CacheSnapshot:
        token = self._issue(key)
        if not append:
            self._cache.begin_load(key)

        try:
            page = await self._fetch_page(fetch_key, page_number)
        except (MalformedPayloadError, SessionMissingError) as exc:
            if not self._is_current(key, token):
                _logger.debug("Discarding stale failure for %s (token %d)", key, token)
                return self._cache.snapshot(key)
            _logger.debug("Nothing to show for %s: %s", key, exc)
            page = Page.empty(page_number)
        except ShopSyncError as exc:
            if not self._is_current(key, token):
                _logger.debug("Discarding stale failure for %s (token %d)", key, token)
                return self._cache.snapshot(key)
            _logger.info("Fetching %s page %d failed: %s", fetch_key, page_number, exc)
            self._cache.fail(key, exc)
            self._report(key, exc)
            return self._cache.snapshot(key)

        if not self._is_current(key, token):
            _logger.debug(
                "Discarding stale response for %s page %d (token %d, latest %d)",
                key,
                page_number,
                token,
                self.latest_token(key),
            )
            return self._cache.snapshot(key)

        if append:
            self._cache.append(key, page)
        else:
            self._cache.replace(key, page)
            self._update_counter(key, page)
        return self._cache.snapshot(key)

    def _update_counter(self, key: QueryKey, page: Page[Any]) -> None:
        """Reset the unread counter after a full notification reload."""
        if self._counter is None or key.resource != QueryResource.NOTIFICATIONS:
            return
        if page.unread_count is not None:
            self._counter.set(page.unread_count)
            return
        unread = sum(1 for item in self._cache.items(key) if not getattr(item, "is_read", True))
        self._counter.set(unread)
