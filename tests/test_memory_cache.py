import asyncio
import threading
import time

import pytest

from property_service.core.exceptions import CacheError
from property_service.infrastructure.cache import MemoryCache


async def test_get_returns_none_for_missing_key(memory_cache):
    assert await memory_cache.get("property:nowhere") is None


async def test_set_then_get_returns_value(memory_cache):
    assert await memory_cache.set("property:a", {"owner": "A"}) is True
    assert await memory_cache.get("property:a") == {"owner": "A"}


async def test_values_are_copied_in_and_out(memory_cache):
    value = {"rooms": [1, 2]}
    await memory_cache.set("k", value)
    value["rooms"].append(3)

    fetched = await memory_cache.get("k")
    fetched["rooms"].append(4)

    assert await memory_cache.get("k") == {"rooms": [1, 2]}


async def test_entry_expires_after_default_ttl(memory_cache, fake_clock):
    await memory_cache.set("k", "v")

    fake_clock.advance(3599)
    assert await memory_cache.get("k") == "v"

    fake_clock.advance(1)
    assert await memory_cache.get("k") is None


async def test_explicit_ttl_overrides_default(memory_cache, fake_clock):
    await memory_cache.set("short", "v", ttl=10)
    await memory_cache.set("forever", "v", ttl=0)

    fake_clock.advance(10_000)

    assert await memory_cache.get("short") is None
    assert await memory_cache.get("forever") == "v"


async def test_delete_returns_removed_count(memory_cache):
    await memory_cache.set("k", "v")

    assert await memory_cache.delete("k") == 1
    assert await memory_cache.delete("k") == 0
    assert await memory_cache.get("k") is None


async def test_delete_by_pattern_uses_substring_matching(memory_cache):
    await memory_cache.set("property:1 Main St, Austin", 1)
    await memory_cache.set("property:2 Main St, Dallas", 2)
    await memory_cache.set("other:Main St", 3)

    assert await memory_cache.delete_by_pattern("property:") == 2
    assert await memory_cache.get("other:Main St") == 3


async def test_delete_by_pattern_treats_wildcards_literally(memory_cache):
    await memory_cache.set("property:a", 1)

    assert await memory_cache.delete_by_pattern("property:*") == 0
    assert await memory_cache.get("property:a") == 1


async def test_flush_clears_everything(memory_cache):
    await memory_cache.set("a", 1)
    await memory_cache.set("b", 2)

    assert await memory_cache.flush() == 2
    assert await memory_cache.get("a") is None
    assert (await memory_cache.get_stats())["keys"] == 0


async def test_stats_count_hits_and_misses(memory_cache):
    await memory_cache.set("a", 1)
    await memory_cache.get("a")
    await memory_cache.get("missing")

    stats = await memory_cache.get_stats()

    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["keys"] == 1


async def test_non_string_key_is_rejected(memory_cache):
    with pytest.raises(CacheError):
        await memory_cache.set(("tuple", "key"), 1)


async def test_cleanup_removes_expired_entries_without_access(memory_cache, fake_clock):
    await memory_cache.set("old", 1, ttl=5)
    await memory_cache.set("new", 2, ttl=60)
    fake_clock.advance(30)

    assert memory_cache._cleanup_expired() == 1
    assert (await memory_cache.get_stats())["keys"] == 1


def test_start_and_close_manage_cleanup_thread():
    cache = MemoryCache(default_ttl=60, cleanup_interval=3600)
    cache.start()
    try:
        assert any(t.name == "memory-cache-cleanup" for t in threading.enumerate())
    finally:
        cache.close()

    assert not any(t.name == "memory-cache-cleanup" for t in threading.enumerate())


def test_zero_cleanup_interval_disables_thread():
    cache = MemoryCache(cleanup_interval=0)
    cache.start()

    assert cache._cleanup_thread is None


def _wait_until(condition, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def test_sweeper_evicts_expired_entries_without_access(fake_clock):
    cache = MemoryCache(default_ttl=60, cleanup_interval=0.01, clock=fake_clock)
    try:
        asyncio.run(cache.set("property:stale", {"owner": "A"}, ttl=5))
        asyncio.run(cache.set("property:fresh", {"owner": "B"}, ttl=60))
        fake_clock.advance(10)

        cache.start()

        assert _wait_until(lambda: len(cache._cache) == 1)
        assert "property:fresh" in cache._cache
    finally:
        cache.close()


def test_concurrent_access_from_many_threads_stays_consistent():
    cache = MemoryCache(default_ttl=60, cleanup_interval=0.01)
    workers = 8
    rounds = 200
    errors = []

    async def exercise(worker: int) -> None:
        for i in range(rounds):
            key = f"property:{i % 10}"
            ttl = 0.001 if i % 7 == 0 else 60
            await cache.set(key, {"worker": worker, "round": i}, ttl=ttl)
            value = await cache.get(key)
            if value is not None:
                assert set(value) == {"worker", "round"}
            if i % 25 == 0:
                await cache.delete_by_pattern("property:")
            await cache.set("shared", {"worker": worker, "round": i})
        await cache.set(f"final:{worker}", {"worker": worker, "round": rounds})

    def run(worker: int) -> None:
        try:
            asyncio.run(exercise(worker))
        except Exception as e:
            errors.append(e)

    cache.start()
    try:
        threads = [threading.Thread(target=run, args=(n,)) for n in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        assert not any(thread.is_alive() for thread in threads)

        for n in range(workers):
            assert asyncio.run(cache.get(f"final:{n}")) == {"worker": n, "round": rounds}

        # Whoever wrote last wins, and the value is never torn
        shared = asyncio.run(cache.get("shared"))
        assert shared["worker"] in range(workers)
        assert shared["round"] == rounds - 1

        stats = asyncio.run(cache.get_stats())
        assert stats["hits"] + stats["misses"] == workers * rounds + workers + 1
    finally:
        cache.close()
