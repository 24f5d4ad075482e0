"""
Thread-safe memoization cache addressed by hierarchical paths.

PathTreeCache returns the value previously stored for a path, or invokes a
producer and stores its result. Paths sharing a prefix share tree nodes,
so clear(prefix, deep=True) invalidates a whole family of entries at once.

Values are isolated from callers: the cache stores a copy of what a
producer returns and hands out a copy on every hit (see CopyMode).
"""

import logging
import threading
from typing import Any, Optional

from ..interfaces import CacheInterface
from .._common.base import BasePathCache, Flight
from .._common.config import CacheConfig
from .._common.tree import CachePath

logger = logging.getLogger(__name__)


class _Flight(Flight):
    """Thread flight: waiters block on `done` until the owner finishes."""

    __slots__ = ['done', 'value', 'error']

    def __init__(self, key: CachePath):
        super().__init__(key, threading.get_ident())
        self.done = threading.Event()
        self.value: Any = None
        self.error: Optional[BaseException] = None


class PathTreeCache(BasePathCache, CacheInterface):
    """
    Synchronous path tree cache.

    One coarse lock guards the tree and the statistics. Producers run
    outside the lock; concurrent requests for a path whose producer is
    already running wait for that result instead of producing their own.
    A clear or a forced refresh issued while a producer runs keeps that
    producer's result out of the tree.

    Example:
        cache = PathTreeCache()
        user = cache.cache_or_compute(["user", 42], lambda: fetch_user(42))
        cache.clear(["user"], deep=True)   # forget every cached user
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        super().__init__(config)
        self._lock = threading.Lock()

    def _guard(self):
        return self._lock

    def cache_or_compute(self, path: Any, producer: Any, force_refresh: bool = False) -> Any:
        """
        Return the value cached at path, producing and storing it on a miss.

        Args:
            path: Ordered sequence of hashable keys (empty = root)
            producer: Zero-argument callable returning the value, or the
                value itself. Callables are always invoked, never stored.
            force_refresh: Recompute even if a value is cached. A refresh
                never joins a producer that is already running.

        Returns:
            A copy of the cached value on a hit, otherwise the produced value

        Raises:
            InvalidCacheParameter: If path contains the reserved key
        """
        key = self._prepare_path(path)

        with self._lock:
            if not force_refresh:
                found, stored = self._tree.lookup(key)
                if found:
                    self.hits += 1
                    logger.debug("Cache hit for %s", key)
                    return self._clean(stored)

            current = self._flights.get(key) if self.config.coalesce else None
            if (current is not None and not force_refresh
                    and current.owner != threading.get_ident()):
                self.concurrent_waits += 1
                flight = None
            else:
                flight = _Flight(key)
                self._start_flight(flight, current, force_refresh)
                self.misses += 1

        if flight is None:
            logger.debug("Waiting for in-flight producer of %s", key)
            return self._wait_for(current)

        logger.debug("Cache miss for %s", key)
        try:
            value = producer() if callable(producer) else producer
            stored = self._clean(value)
            with self._lock:
                self._store_result(flight, stored)
            flight.value = stored
            return value
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self._lock:
                self._finish_flight(flight)
            flight.done.set()

    def _wait_for(self, flight: _Flight) -> Any:
        flight.done.wait()
        if flight.error is not None:
            raise flight.error
        return self._clean(flight.value)
