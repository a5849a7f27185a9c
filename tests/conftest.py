from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pytest

from shopsync.models.notification import Notification
from shopsync.models.order import Order
from shopsync.models.page import Page
from shopsync.models.query import QueryKey, QueryResource


def make_notifications(ids: Iterable[int], *, read: Iterable[int] = ()) -> list[Notification]:
    read_ids = set(read)
    return [
        Notification.model_validate({"notificationId": i, "title": f"N{i}", "isRead": i in read_ids})
        for i in ids
    ]


def make_orders(ids: Iterable[int]) -> list[Order]:
    return [Order.model_validate({"orderId": i, "finalPrice": i * 1000}) for i in ids]


def make_page(items: list[Any], page_number: int = 1, total_pages: int | None = None, **extra: Any) -> Page[Any]:
    return Page(items=items, page_number=page_number, total_pages=total_pages, **extra)


@pytest.fixture
def notifications_key() -> QueryKey:
    return QueryKey(resource=QueryResource.NOTIFICATIONS, shop_id=12, user_id=34)


@pytest.fixture
def orders_key() -> QueryKey:
    return QueryKey(resource=QueryResource.ORDERS, shop_id=12, shift_id=5)
