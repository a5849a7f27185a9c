from __future__ import annotations

from shopsync.models.page import Page
from shopsync.models.query import QueryKey
from shopsync.state.cache import CacheSnapshot, FetchState, PageCache

from conftest import make_notifications, make_page


def test_append_preserves_first_occurrence_order(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1, 2, 3]), 1, 3))
    cache.append(notifications_key, make_page(make_notifications([3, 4, 5]), 2, 3))

    items = cache.items(notifications_key)
    assert [item.id for item in items] == [1, 2, 3, 4, 5]
    assert items[2].title == "N3"
    snapshot = cache.snapshot(notifications_key)
    assert snapshot.page_number == 2
    assert snapshot.has_more is True
    assert snapshot.state == FetchState.LOADED


def test_replace_dedupes_within_a_page(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1, 2, 1, 3])))
    assert [item.id for item in cache.items(notifications_key)] == [1, 2, 3]


def test_has_more_follows_latest_page(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1]), 1, 2))
    assert cache.snapshot(notifications_key).has_more is True
    cache.append(notifications_key, make_page(make_notifications([2]), 2, 2))
    assert cache.snapshot(notifications_key).has_more is False


def test_has_more_without_total_pages_uses_page_size(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, Page(items=make_notifications([1, 2]), page_size=2))
    assert cache.snapshot(notifications_key).has_more is True
    cache.replace(notifications_key, Page(items=make_notifications([1]), page_size=2))
    assert cache.snapshot(notifications_key).has_more is False


def test_begin_load_more_requires_loaded_with_more(notifications_key: QueryKey) -> None:
    cache = PageCache()
    assert cache.begin_load_more(notifications_key) is False

    cache.replace(notifications_key, make_page(make_notifications([1]), 1, 1))
    assert cache.begin_load_more(notifications_key) is False

    cache.replace(notifications_key, make_page(make_notifications([1]), 1, 2))
    assert cache.begin_load_more(notifications_key) is True
    assert cache.snapshot(notifications_key).state == FetchState.LOADING_MORE
    assert cache.begin_load_more(notifications_key) is False


def test_fail_keeps_items(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1, 2])))
    cache.begin_load(notifications_key)
    cache.fail(notifications_key, "HTTP 500")

    snapshot = cache.snapshot(notifications_key)
    assert snapshot.state == FetchState.ERROR
    assert snapshot.last_error == "HTTP 500"
    assert [item.id for item in snapshot.items] == [1, 2]


def test_keys_are_independent(notifications_key: QueryKey) -> None:
    cache = PageCache()
    other = notifications_key.with_updates(user_id=99)
    cache.replace(notifications_key, make_page(make_notifications([1])))
    cache.replace(other, make_page(make_notifications([2])))
    assert [item.id for item in cache.items(notifications_key)] == [1]
    assert [item.id for item in cache.items(other)] == [2]


def test_subscribe_receives_snapshots_and_unsubscribe_discards(notifications_key: QueryKey) -> None:
    cache = PageCache()
    seen: list[CacheSnapshot] = []
    unsubscribe = cache.subscribe(notifications_key, seen.append)
    assert seen[0].state == FetchState.IDLE

    cache.begin_load(notifications_key)
    cache.replace(notifications_key, make_page(make_notifications([1])))
    assert [snapshot.state for snapshot in seen] == [FetchState.IDLE, FetchState.LOADING, FetchState.LOADED]

    unsubscribe()
    assert notifications_key not in cache


def test_update_and_restore_item(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1, 2])))

    result = cache.update_item(notifications_key, 2, lambda item: item.model_copy(update={"is_read": True}))
    assert result is not None
    previous, updated = result
    assert previous.is_read is False
    assert cache.items(notifications_key)[1].is_read is True

    assert cache.restore_item(notifications_key, updated, previous) is True
    assert cache.items(notifications_key)[1].is_read is False
    assert cache.update_item(notifications_key, 99, lambda item: item) is None


def test_restore_items_skips_replaced_list(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1, 2])))
    previous = cache.update_all(notifications_key, lambda item: item.model_copy(update={"is_read": True}))
    updated = cache.items(notifications_key)

    cache.replace(notifications_key, make_page(make_notifications([1, 2])))
    assert cache.restore_items(notifications_key, updated, previous) is False


def test_clear_shows_empty_loaded_list(notifications_key: QueryKey) -> None:
    cache = PageCache()
    cache.replace(notifications_key, make_page(make_notifications([1]), 1, 3))
    cache.clear(notifications_key)
    snapshot = cache.snapshot(notifications_key)
    assert snapshot.items == ()
    assert snapshot.state == FetchState.LOADED
    assert snapshot.has_more is False


def test_discard_listeners_hear_dropped_keys(notifications_key: QueryKey) -> None:
    cache = PageCache()
    dropped: list[QueryKey] = []
    cache.on_discard(dropped.append)
    other = notifications_key.with_updates(user_id=99)

    unsubscribe = cache.subscribe(notifications_key, lambda snapshot: None)
    cache.replace(other, make_page(make_notifications([1])))
    unsubscribe()
    assert dropped == [notifications_key]

    cache.clear_all()
    assert dropped == [notifications_key, other]
    cache.discard(other)
    assert dropped == [notifications_key, other]
