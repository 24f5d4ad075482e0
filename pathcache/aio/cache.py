"""
Asyncio flavour of the path tree cache.

AsyncPathTreeCache shares its tree, settings and isolation rules with
PathTreeCache but awaits producers. It is meant to be used from a single
event loop; no thread locking is performed. Uses Future-based coordination
so concurrent tasks requesting the same path share one producer run.
"""

import asyncio
import inspect
import logging
from typing import Any

from ..interfaces import AsyncCacheInterface
from .._common.base import BasePathCache, Flight
from .._common.tree import CachePath

logger = logging.getLogger(__name__)


class _AsyncFlight(Flight):
    """Task flight: waiters await a shielded copy of `future`."""

    __slots__ = ['future']

    def __init__(self, key: CachePath):
        super().__init__(key, asyncio.current_task())
        self.future = asyncio.get_running_loop().create_future()


class AsyncPathTreeCache(BasePathCache, AsyncCacheInterface):
    """
    Asynchronous path tree cache.

    Producers may be plain values, awaitables, regular callables or async
    callables. Whatever a callable returns is awaited if it is awaitable.
    A coroutine object passed as producer is closed when it is not needed.

    Example:
        cache = AsyncPathTreeCache()
        user = await cache.cache_or_compute(["user", 42], fetch_user_async)
    """

    async def cache_or_compute(self, path: Any, producer: Any, force_refresh: bool = False) -> Any:
        """
        Return the value cached at path, producing and storing it on a miss.

        Args:
            path: Ordered sequence of hashable keys (empty = root)
            producer: Value, awaitable, callable or async callable
            force_refresh: Recompute even if a value is cached. A refresh
                never joins a producer that is already running.

        Returns:
            A copy of the cached value on a hit, otherwise the produced value

        Raises:
            InvalidCacheParameter: If path contains the reserved key
        """
        key = self._prepare_path(path)

        if not force_refresh:
            found, stored = self._tree.lookup(key)
            if found:
                self.hits += 1
                logger.debug("Cache hit for %s", key)
                self._discard_producer(producer)
                return self._clean(stored)

        current = self._flights.get(key) if self.config.coalesce else None
        if (current is not None and not force_refresh
                and current.owner is not asyncio.current_task()):
            self.concurrent_waits += 1
            logger.debug("Waiting for in-flight producer of %s", key)
            self._discard_producer(producer)
            stored = await asyncio.shield(current.future)
            return self._clean(stored)

        flight = _AsyncFlight(key)
        self._start_flight(flight, current, force_refresh)
        self.misses += 1
        logger.debug("Cache miss for %s", key)
        try:
            value = await self._produce(producer)
            stored = self._clean(value)
            self._store_result(flight, stored)
            flight.future.set_result(stored)
            return value
        except BaseException as e:
            if not flight.future.done():
                if isinstance(e, asyncio.CancelledError):
                    flight.future.cancel()
                else:
                    flight.future.set_exception(e)
                    # Mark retrieved so an unawaited failure does not log a warning
                    flight.future.exception()
            raise
        finally:
            self._finish_flight(flight)

    @staticmethod
    async def _produce(producer: Any) -> Any:
        if callable(producer):
            producer = producer()
        if inspect.isawaitable(producer):
            return await producer
        return producer

    @staticmethod
    def _discard_producer(producer: Any) -> None:
        # A coroutine that is never awaited warns when garbage collected
        if inspect.iscoroutine(producer):
            producer.close()
