from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pytest

from sheetflow.configuration.members import MemberCache
from sheetflow.core.cache import MemoCache


@dataclass
class Invoice:
    number: str
    amount: float


def test_get_or_add_computes_once() -> None:
    cache: MemoCache[str, list[str]] = MemoCache()
    calls: list[str] = []

    def factory(key: str) -> list[str]:
        calls.append(key)
        return [key.upper()]

    first = cache.get_or_add("a", factory)
    second = cache.get_or_add("a", factory)

    assert first is second
    assert calls == ["a"]
    assert "a" in cache
    assert len(cache) == 1


def test_concurrent_first_access_populates_once() -> None:
    cache: MemoCache[str, object] = MemoCache()
    calls = 0
    calls_lock = threading.Lock()
    barrier = threading.Barrier(16)

    def factory(_: str) -> object:
        nonlocal calls
        with calls_lock:
            calls += 1
        time.sleep(0.05)
        return object()

    def worker(_: int) -> object:
        barrier.wait()
        return cache.get_or_add("shape", factory)

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(worker, range(16)))

    assert calls == 1
    assert all(result is results[0] for result in results)


def test_failed_factory_leaves_key_unpopulated() -> None:
    cache: MemoCache[str, int] = MemoCache()

    def boom(_: str) -> int:
        raise RuntimeError("reflection failed")

    with pytest.raises(RuntimeError):
        cache.get_or_add("k", boom)

    assert "k" not in cache
    assert cache.get_or_add("k", lambda _: 7) == 7


def test_clear_drops_entries() -> None:
    cache: MemoCache[str, int] = MemoCache()
    cache.get_or_add("k", lambda _: 1)

    cache.clear()

    assert len(cache) == 0
    assert cache.get_or_add("k", lambda _: 2) == 2


def test_member_cache_returns_shared_member_tuple() -> None:
    cache = MemberCache()

    members = cache.get_members(Invoice)

    assert [m.name for m in members] == ["number", "amount"]
    assert [m.value_type for m in members] == [str, float]
    assert cache.get_members(Invoice) is members
    assert Invoice in cache


def test_member_cache_concurrent_lookups_share_result() -> None:
    cache = MemberCache()
    barrier = threading.Barrier(8)

    def worker(_: int):  # type: ignore[no-untyped-def]
        barrier.wait()
        return cache.get_members(Invoice)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(worker, range(8)))

    assert all(result is results[0] for result in results)


def test_clear_during_running_factory_discards_stale_value() -> None:
    cache: MemoCache[str, str] = MemoCache()
    started = threading.Event()
    release = threading.Event()
    results: list[str] = []

    def slow_factory(_: str) -> str:
        started.set()
        release.wait(timeout=5)
        return "stale"

    worker = threading.Thread(target=lambda: results.append(cache.get_or_add("k", slow_factory)))
    worker.start()
    assert started.wait(timeout=5)

    cache.clear()
    assert cache.get_or_add("k", lambda _: "fresh") == "fresh"

    release.set()
    worker.join(timeout=5)

    assert results == ["stale"]
    assert cache.get_or_add("k", lambda _: "other") == "fresh"
    assert len(cache) == 1


def test_generic_cache_module_has_no_entity_reflection() -> None:
    import sheetflow.core.cache as cache_module

    assert not hasattr(cache_module, "MemberCache")
    assert issubclass(MemberCache, MemoCache)
    assert MemberCache.__module__ == "sheetflow.configuration.members"
