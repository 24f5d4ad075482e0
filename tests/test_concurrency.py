"""
Tests for thread safety and single-flight coalescing in PathTreeCache.

Producers block on events and barriers so the tests control exactly when
a computation is in flight.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from pathcache import PathTreeCache, CacheConfig


def _wait_until(predicate, timeout=5.0):
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.001)
    return True


class TestSingleFlight:
    """Concurrent requests for one path share one producer run."""

    def test_concurrent_misses_invoke_producer_once(self):
        cache = PathTreeCache()
        release = threading.Event()
        calls = []

        def producer():
            calls.append(threading.get_ident())
            release.wait(5)
            return {"value": 42}

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(cache.cache_or_compute, ["slow"], producer) for _ in range(8)]
            assert _wait_until(lambda: cache.get_stats()['concurrent_waits'] == 7)
            release.set()
            results = [f.result(timeout=5) for f in futures]

        assert len(calls) == 1
        assert all(r == {"value": 42} for r in results)
        # Every caller gets its own instance
        assert len({id(r) for r in results}) == 8

    def test_waiters_receive_producer_exception(self):
        cache = PathTreeCache()
        release = threading.Event()

        def producer():
            release.wait(5)
            raise KeyError("missing")

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(cache.cache_or_compute, ["bad"], producer) for _ in range(4)]
            assert _wait_until(lambda: cache.get_stats()['concurrent_waits'] == 3)
            release.set()
            for future in futures:
                with pytest.raises(KeyError):
                    future.result(timeout=5)

        assert not cache.is_cached(["bad"])
        # The failed flight is gone, the next call computes again
        assert cache.cache_or_compute(["bad"], lambda: "ok") == "ok"

    def test_different_paths_run_in_parallel(self):
        cache = PathTreeCache()
        barrier = threading.Barrier(2, timeout=5)

        def producer(name):
            # Deadlocks (BrokenBarrierError) if the producers were serialized
            barrier.wait()
            return name

        with ThreadPoolExecutor(max_workers=2) as pool:
            a = pool.submit(cache.cache_or_compute, ["a"], lambda: producer("a"))
            b = pool.submit(cache.cache_or_compute, ["b"], lambda: producer("b"))
            assert a.result(timeout=5) == "a"
            assert b.result(timeout=5) == "b"

    def test_coalescing_can_be_disabled(self):
        cache = PathTreeCache(CacheConfig(coalesce=False))
        barrier = threading.Barrier(3, timeout=5)
        calls = []
        lock = threading.Lock()

        def producer():
            with lock:
                calls.append(1)
            barrier.wait()
            return len(calls)

        with ThreadPoolExecutor(max_workers=3) as pool:
            futures = [pool.submit(cache.cache_or_compute, ["p"], producer) for _ in range(3)]
            for future in futures:
                future.result(timeout=5)

        assert len(calls) == 3
        assert cache.get_stats()['concurrent_waits'] == 0


class TestThreadSafety:
    """Hammer the cache from several threads."""

    def test_parallel_writes_and_clears(self):
        cache = PathTreeCache()

        def worker(n):
            for i in range(200):
                cache.cache_or_compute(["group", n % 4, i], lambda: [n, i])
                if i % 50 == 0:
                    cache.clear(["group", n % 4], deep=True)
            return n

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert sorted(pool.map(worker, range(8))) == list(range(8))

        stats = cache.get_stats()
        assert stats['hits'] + stats['misses'] + stats['concurrent_waits'] == 8 * 200
        assert stats['entries'] == len(cache)


class TestInvalidationDuringFlight:
    """Clears and forced refreshes issued while a producer is running."""

    def _start_blocked(self, pool, cache, path, value, refresh=False):
        started = threading.Event()
        release = threading.Event()

        def producer():
            started.set()
            release.wait(5)
            return value

        future = pool.submit(cache.cache_or_compute, path, producer, refresh)
        assert started.wait(5)
        return future, release

    @pytest.mark.parametrize("clear_args", [
        ((), False),
        (["k"], False),
        (["k"], True),
    ])
    def test_clear_discards_running_result(self, clear_args):
        cache = PathTreeCache()

        with ThreadPoolExecutor(max_workers=1) as pool:
            future, release = self._start_blocked(pool, cache, ["k"], "stale")
            cache.clear(*clear_args)
            release.set()
            # The caller that started the producer still gets its result
            assert future.result(timeout=5) == "stale"

        assert not cache.is_cached(["k"])
        assert cache.cache_or_compute(["k"], lambda: "fresh") == "fresh"
        assert cache.get_stats()['misses'] == 2

    def test_deep_clear_of_prefix_discards_running_child(self):
        cache = PathTreeCache()

        with ThreadPoolExecutor(max_workers=1) as pool:
            future, release = self._start_blocked(pool, cache, ["user", 42], "stale")
            cache.clear(["user"], deep=True)
            release.set()
            future.result(timeout=5)

        assert not cache.is_cached(["user", 42])

    def test_shallow_clear_of_prefix_keeps_running_child(self):
        cache = PathTreeCache()

        with ThreadPoolExecutor(max_workers=1) as pool:
            future, release = self._start_blocked(pool, cache, ["user", 42], "kept")
            cache.clear(["user"])
            release.set()
            future.result(timeout=5)

        assert cache.cache_or_compute(["user", 42], "unused") == "kept"

    def test_call_after_clear_does_not_join_old_flight(self):
        cache = PathTreeCache()

        with ThreadPoolExecutor(max_workers=1) as pool:
            future, release = self._start_blocked(pool, cache, ["k"], "stale")
            cache.clear(["k"])
            assert cache.cache_or_compute(["k"], lambda: "fresh") == "fresh"
            release.set()
            future.result(timeout=5)

        assert cache.get_stats()['concurrent_waits'] == 0
        assert cache.cache_or_compute(["k"], "unused") == "fresh"

    def test_force_refresh_runs_its_own_producer(self):
        cache = PathTreeCache()
        calls = []

        with ThreadPoolExecutor(max_workers=1) as pool:
            future, release = self._start_blocked(pool, cache, ["k"], "old")

            def refresh():
                calls.append(1)
                return "new"

            assert cache.cache_or_compute(["k"], refresh, True) == "new"
            assert calls == [1]
            release.set()
            assert future.result(timeout=5) == "old"

        assert cache.cache_or_compute(["k"], "unused") == "new"
        assert cache.get_stats()['concurrent_waits'] == 0

    def test_later_callers_wait_for_the_refresh(self):
        cache = PathTreeCache()

        with ThreadPoolExecutor(max_workers=3) as pool:
            old, release_old = self._start_blocked(pool, cache, ["k"], "old")
            new, release_new = self._start_blocked(pool, cache, ["k"], "new", refresh=True)
            waiter = pool.submit(cache.cache_or_compute, ["k"], "unused")
            assert _wait_until(lambda: cache.get_stats()['concurrent_waits'] == 1)

            release_old.set()
            assert old.result(timeout=5) == "old"
            release_new.set()
            assert new.result(timeout=5) == "new"
            assert waiter.result(timeout=5) == "new"

        assert cache.cache_or_compute(["k"], "unused") == "new"
