from __future__ import annotations

import asyncio

import pytest

from shopsync.exceptions import NetworkError
from shopsync.models.query import QueryKey
from shopsync.state.cache import CacheSnapshot, PageCache
from shopsync.state.counter import BroadcastCounter
from shopsync.sync.mutator import MARK_READ, Mutation, OptimisticMutator, RollbackPolicy

from conftest import make_notifications, make_page


def _seeded(key: QueryKey, *, unread: int = 3, read: tuple[int, ...] = ()) -> tuple[PageCache, BroadcastCounter]:
    cache = PageCache()
    cache.replace(key, make_page(make_notifications([1, 2, 3], read=read), 1, 1))
    return cache, BroadcastCounter(unread)


def _read_flags(cache: PageCache, key: QueryKey) -> dict[int, bool]:
    return {item.id: item.is_read for item in cache.items(key)}


@pytest.mark.asyncio
async def test_mark_read_is_visible_before_remote_completes(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter)
    release = asyncio.Event()
    calls: list[str] = []

    async def _remote() -> None:
        calls.append("sent")
        await release.wait()

    task = mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    assert _read_flags(cache, notifications_key)[2] is True
    assert counter.get() == 2
    assert mutator.pending == 1

    release.set()
    await task
    assert calls == ["sent"]
    assert mutator.pending == 0


@pytest.mark.asyncio
async def test_observers_see_edit_synchronously(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter)
    snapshots: list[CacheSnapshot] = []
    counts: list[int] = []
    cache.subscribe(notifications_key, snapshots.append)
    counter.subscribe(counts.append)

    async def _remote() -> None:
        return None

    task = mutator.apply_and_sync(notifications_key, 1, MARK_READ, _remote)
    assert snapshots[-1].items[0].is_read is True
    assert counts == [3, 2]
    await task


@pytest.mark.asyncio
async def test_keep_policy_swallows_remote_failure(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter)

    async def _remote() -> None:
        raise NetworkError("HTTP 500", status_code=500)

    await mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    assert mutator.rollback_policy == RollbackPolicy.KEEP
    assert _read_flags(cache, notifications_key)[2] is True
    assert counter.get() == 2


@pytest.mark.asyncio
async def test_revert_policy_restores_item_and_counter(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter, rollback=RollbackPolicy.REVERT)

    async def _remote() -> None:
        raise NetworkError("offline")

    await mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    assert _read_flags(cache, notifications_key)[2] is False
    assert counter.get() == 3


@pytest.mark.asyncio
async def test_revert_skips_item_replaced_by_refetch(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter, rollback=RollbackPolicy.REVERT)
    release = asyncio.Event()

    async def _remote() -> None:
        await release.wait()
        raise NetworkError("offline")

    task = mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    cache.replace(notifications_key, make_page(make_notifications([1, 2, 3], read=[2]), 1, 1))
    counter.set(2)

    release.set()
    await task
    assert _read_flags(cache, notifications_key)[2] is True
    assert counter.get() == 2


@pytest.mark.asyncio
async def test_already_read_item_leaves_counter_alone(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key, unread=2, read=(2,))
    mutator = OptimisticMutator(cache, counter)
    calls: list[int] = []

    async def _remote() -> None:
        calls.append(2)

    await mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    assert counter.get() == 2
    assert calls == [2]


@pytest.mark.asyncio
async def test_counter_never_goes_negative(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key, unread=0)
    mutator = OptimisticMutator(cache, counter)

    async def _remote() -> None:
        return None

    await mutator.apply_and_sync(notifications_key, 1, MARK_READ, _remote)
    assert counter.get() == 0


@pytest.mark.asyncio
async def test_uncached_item_still_syncs(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter)
    calls: list[str] = []

    async def _remote() -> None:
        calls.append("sent")

    await mutator.apply_and_sync(notifications_key, 99, MARK_READ, _remote)
    assert calls == ["sent"]
    assert counter.get() == 3


@pytest.mark.asyncio
async def test_mark_all_read_then_mark_one_keeps_counter_at_zero(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key)
    mutator = OptimisticMutator(cache, counter)

    async def _remote() -> None:
        return None

    mutator.apply_all_and_sync(notifications_key, MARK_READ, _remote)
    assert set(_read_flags(cache, notifications_key).values()) == {True}
    assert counter.get() == 0

    mutator.apply_and_sync(notifications_key, 2, MARK_READ, _remote)
    assert counter.get() == 0
    await mutator.drain()
    assert mutator.pending == 0


@pytest.mark.asyncio
async def test_mark_all_read_revert_restores_previous_state(notifications_key: QueryKey) -> None:
    cache, counter = _seeded(notifications_key, read=(3,), unread=2)
    mutator = OptimisticMutator(cache, counter, rollback=RollbackPolicy.REVERT)

    async def _remote() -> None:
        raise NetworkError("offline")

    await mutator.apply_all_and_sync(notifications_key, MARK_READ, _remote)
    assert _read_flags(cache, notifications_key) == {1: False, 2: False, 3: True}
    assert counter.get() == 2


def test_mutation_detects_no_op() -> None:
    (item,) = make_notifications([1], read=[1])
    assert MARK_READ.changes_item(item) is False
    assert Mutation(changes={"title": "Khác"}).changes_item(item) is True
    assert Mutation(changes={"title": "Khác"}).apply(item).title == "Khác"
