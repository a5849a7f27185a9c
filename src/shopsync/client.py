"""High-level async client tying transport, cache and sync components together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from shopsync._api import notifications as _notifications_api
from shopsync._api import orders as _orders_api
from shopsync._api import products as _products_api
from shopsync._api import shifts as _shifts_api
from shopsync._api._common import require_session, require_user_id
from shopsync._transport import HttpTransport, Transport
from shopsync.config import ShopSyncConfig
from shopsync.datetime_codec import DateTimeCodec
from shopsync.exceptions import ShopSyncError
from shopsync.models.order import Order
from shopsync.models.page import Page
from shopsync.models.product import Product, filter_products
from shopsync.models.query import QueryKey, QueryResource
from shopsync.models.shift import Shift
from shopsync.session import Session, SessionProvider
from shopsync.state.cache import CacheObserver, CacheSnapshot, PageCache
from shopsync.state.counter import BroadcastCounter, CounterObserver
from shopsync.sync.coordinator import ErrorReporter, QueryCoordinator
from shopsync.sync.mutator import MARK_READ, Mutation, OptimisticMutator, RollbackPolicy

_logger = logging.getLogger(__name__)


class ShopSyncClient:
    """Async client keeping shop lists in sync with the REST API.

    Usage::

        async with ShopSyncClient(config, session_provider) as client:
            key = await client.notifications_key()
            unsubscribe = client.subscribe(key, render)
            await client.load(key)
    """

    def __init__(
        self,
        config: ShopSyncConfig,
        session_provider: SessionProvider,
        *,
        http_session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_error: ErrorReporter | None = None,
    ) -> None:
        self._config = config
        self._session_provider = session_provider
        self._external_session = http_session is not None
        self._http_session = http_session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self.codec = DateTimeCodec(config.local_timezone)
        self.cache = PageCache()
        self.unread_counter = BroadcastCounter()
        self.coordinator = QueryCoordinator(
            self.cache,
            self._fetch_page,
            counter=self.unread_counter,
            debounce_delay=config.debounce_delay,
            on_error=on_error,
        )
        self.mutator = OptimisticMutator(
            self.cache,
            self.unread_counter,
            rollback=RollbackPolicy.REVERT if config.revert_on_sync_failure else RollbackPolicy.KEEP,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ShopSyncClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.coordinator.aclose()
        await self.mutator.drain()
        self.unread_counter.close()
        self.cache.clear_all()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ShopSyncError("Client not initialized. Use 'async with ShopSyncClient(...) as client:'")
        return self._transport

    async def ensure_session(self) -> Session:
        """Return the current session or raise :class:`SessionMissingError`."""
        return require_session(await self._session_provider.get_session())

    async def _fetch_page(self, key: QueryKey, page_number: int) -> Page[Any]:
        """Fetch one page for *key*; used by the coordinator."""
        session = await self.ensure_session()
        transport = self._require_transport()
        if key.shop_id != session.shop_id:
            _logger.debug("Key %s was built for another shop (current %d)", key, session.shop_id)

        if key.resource == QueryResource.NOTIFICATIONS:
            return await _notifications_api.fetch_notifications(
                session,
                transport,
                page_number=page_number,
                page_size=self._config.notification_page_size,
            )
        if key.resource == QueryResource.SHIFTS:
            return await _shifts_api.fetch_shifts(
                session,
                transport,
                page_number=page_number,
                page_size=self._config.page_size,
            )
        if key.resource == QueryResource.ORDERS:
            return await _orders_api.fetch_orders(
                session,
                transport,
                page_number=page_number,
                page_size=self._config.page_size,
                shift_id=key.shift_id,
                order_id=key.order_id,
            )
        if key.resource == QueryResource.ORDER_LINES:
            if key.order_id is None:
                raise ValueError("ORDER_LINES keys need an order_id")
            return await _orders_api.fetch_order_lines(
                session,
                transport,
                key.order_id,
                page_number=page_number,
                page_size=self._config.page_size,
            )
        if key.resource == QueryResource.PRODUCTS:
            page = await _products_api.fetch_products(
                session,
                transport,
                page_number=page_number,
                page_size=self._config.product_page_size,
            )
            with_units = await _products_api.attach_units(
                session,
                transport,
                page.items,
                page_size=self._config.unit_page_size,
            )
            return page.model_copy(update={"items": with_units})
        if key.resource == QueryResource.PRODUCT_UNITS:
            if key.product_id is None:
                raise ValueError("PRODUCT_UNITS keys need a product_id")
            return await _products_api.fetch_product_units(
                session,
                transport,
                key.product_id,
                page_number=page_number,
                page_size=self._config.unit_page_size,
            )
        raise ValueError(f"Unsupported resource: {key.resource}")

    # ------------------------------------------------------------------
    # Query keys
    # ------------------------------------------------------------------

    async def notifications_key(self) -> QueryKey:
        session = await self.ensure_session()
        return QueryKey(
            resource=QueryResource.NOTIFICATIONS,
            shop_id=session.shop_id,
            user_id=require_user_id(session),
        )

    async def shifts_key(self) -> QueryKey:
        session = await self.ensure_session()
        return QueryKey(resource=QueryResource.SHIFTS, shop_id=session.shop_id)

    async def orders_key(self, shift_id: int | None = None) -> QueryKey:
        """Key of the order list for *shift_id* (defaults to the session's shift)."""
        session = await self.ensure_session()
        return QueryKey(
            resource=QueryResource.ORDERS,
            shop_id=session.shop_id,
            shift_id=shift_id if shift_id is not None else session.shift_id,
        )

    async def order_lines_key(self, order_id: int) -> QueryKey:
        session = await self.ensure_session()
        return QueryKey(resource=QueryResource.ORDER_LINES, shop_id=session.shop_id, order_id=order_id)

    async def products_key(self) -> QueryKey:
        session = await self.ensure_session()
        return QueryKey(resource=QueryResource.PRODUCTS, shop_id=session.shop_id)

    # ------------------------------------------------------------------
    # List operations
    # ------------------------------------------------------------------

    async def load(self, key: QueryKey) -> CacheSnapshot:
        return await self.coordinator.load(key)

    async def refetch(self, key: QueryKey) -> CacheSnapshot:
        """Pull-to-refresh, or reload after a key change."""
        return await self.coordinator.refetch(key)

    async def fetch_next_page(self, key: QueryKey) -> CacheSnapshot:
        return await self.coordinator.fetch_next_page(key)

    def search_orders(self, key: QueryKey, text: str) -> None:
        """Feed the order search box; see :meth:`QueryCoordinator.search_now`."""
        self.coordinator.search(key, text)

    def snapshot(self, key: QueryKey) -> CacheSnapshot:
        return self.cache.snapshot(key)

    def subscribe(self, key: QueryKey, observer: CacheObserver) -> Callable[[], None]:
        return self.cache.subscribe(key, observer)

    def subscribe_unread(self, observer: CounterObserver) -> Callable[[], None]:
        return self.unread_counter.subscribe(observer)

    # ------------------------------------------------------------------
    # Optimistic actions
    # ------------------------------------------------------------------

    def mark_notification_read(self, key: QueryKey, notification_id: int) -> asyncio.Task[None]:
        """Flip one notification to read now, confirm with the server later."""

        async def _remote() -> None:
            session = await self.ensure_session()
            await _notifications_api.mark_read(session, self._require_transport(), notification_id)

        return self.mutator.apply_and_sync(key, notification_id, MARK_READ, _remote)

    def mark_all_notifications_read(self, key: QueryKey) -> asyncio.Task[None]:
        async def _remote() -> None:
            session = await self.ensure_session()
            await _notifications_api.mark_all_read(session, self._require_transport())

        return self.mutator.apply_all_and_sync(key, MARK_READ, _remote)

    def close_shift(self, key: QueryKey, shift_id: int) -> asyncio.Task[None]:
        """Mark *shift_id* closed in the shift list, confirm with the server later."""

        async def _remote() -> None:
            session = await self.ensure_session()
            await _shifts_api.close_shift(session, self._require_transport(), shift_id)

        mutation = Mutation(changes={"closed_date": datetime.now(UTC)})
        return self.mutator.apply_and_sync(key, shift_id, mutation, _remote)

    # ------------------------------------------------------------------
    # Convenience reads
    # ------------------------------------------------------------------

    async def get_open_shift(self) -> Shift | None:
        """Return the first shift without a ``closedDate`` in the shift list."""
        key = await self.shifts_key()
        snapshot = await self.coordinator.load(key)
        for shift in snapshot.items:
            if isinstance(shift, Shift) and shift.is_open:
                return shift
        return None

    async def list_products_with_units(self, text: str = "") -> list[Product]:
        """Products of the first catalogue page, units attached, filtered by *text*."""
        key = await self.products_key()
        snapshot = await self.coordinator.load(key)
        products = [item for item in snapshot.items if isinstance(item, Product)]
        return filter_products(products, text)

    def display_time(self, instant: datetime | None) -> str:
        return self.codec.format(instant)

    def sort_orders_by_time(self, orders: list[Order], *, descending: bool = True) -> list[Order]:
        """Sort orders chronologically through their display strings."""
        return self.codec.sort_by_display_time(
            orders,
            lambda order: self.codec.format(order.created_at),
            descending=descending,
        )
