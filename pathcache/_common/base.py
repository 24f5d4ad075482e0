"""
Settings, statistics and clearing logic shared by the sync and async caches.

Subclasses provide cache_or_compute() and a _guard() context manager that
serializes access to the tree (a lock for threads, a no-op for asyncio).
"""

import dataclasses
import logging
import warnings
from contextlib import nullcontext
from typing import Any, Dict, List, Optional, Set, Union

from ..exceptions import CacheConfigError, InvalidCollisionMode
from ..interfaces import CacheSettings
from .config import CacheConfig, CollisionMode
from .tree import CachePath, PathTree, clean_value, normalize_path, validate_path

logger = logging.getLogger(__name__)


class Flight:
    """
    A producer invocation in progress for one path.

    A flight becomes stale when its path is cleared or a forced refresh
    supersedes it; stale flights still answer their waiters but never
    write to the tree.
    """

    __slots__ = ['key', 'owner', 'stale']

    def __init__(self, key: CachePath, owner: Any):
        self.key = key
        self.owner = owner
        self.stale = False


def _clear_covers(cleared: CachePath, key: CachePath, deep: bool) -> bool:
    """True if clearing `cleared` must invalidate a value at `key`."""
    if not cleared or key == cleared:
        return True
    return deep and key[:len(cleared)] == cleared


class BasePathCache(CacheSettings):
    """Common state of a path tree cache."""

    def __init__(self, config: Optional[CacheConfig] = None):
        """
        Initialize the cache.

        Args:
            config: Cache configuration (defaults to CacheConfig()). The
                cache keeps its own copy, so setters never leak into
                other caches built from the same config.

        Raises:
            CacheConfigError: If the configuration is invalid
        """
        self.config = dataclasses.replace(config) if config is not None else CacheConfig()
        errors = self.config.validate()
        if errors:
            raise CacheConfigError(errors)

        self._tree = PathTree()

        # Flights callers may join, and every producer currently running
        self._flights: Dict[CachePath, Flight] = {}
        self._active: Set[Flight] = set()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.concurrent_waits = 0

    def _guard(self):
        return nullcontext()

    def _prepare_path(self, path: Any) -> CachePath:
        key = normalize_path(path)
        validate_path(key)
        return key

    def _clean(self, value: Any) -> Any:
        return clean_value(value, self.config.copy_mode)

    # --- Flight bookkeeping (call with the guard held) ---

    def _start_flight(self, flight: Flight, joinable: Optional[Flight], refresh: bool) -> None:
        """
        Register a new producer run.

        Args:
            flight: The flight about to run
            joinable: Flight currently registered for the same path, if any
            refresh: Whether the run was forced; it then supersedes joinable
        """
        self._active.add(flight)
        if not self.config.coalesce:
            return
        if joinable is not None and joinable.owner == flight.owner:
            # Producer re-entered the cache for its own path
            return
        if joinable is not None and refresh:
            joinable.stale = True
        self._flights[flight.key] = flight

    def _finish_flight(self, flight: Flight) -> None:
        self._active.discard(flight)
        if self._flights.get(flight.key) is flight:
            del self._flights[flight.key]

    def _store_result(self, flight: Flight, stored: Any) -> None:
        if flight.stale:
            logger.debug("Discarding result for %s, invalidated while in flight", flight.key)
            return
        self._tree.store(flight.key, stored)

    def _invalidate_flights(self, cleared: CachePath, deep: bool) -> None:
        for flight in self._active:
            if _clear_covers(cleared, flight.key, deep):
                flight.stale = True
        for key in [k for k in self._flights if _clear_covers(cleared, k, deep)]:
            del self._flights[key]

    # --- Configuration ---

    def get_valid_collision_modes(self) -> List[CollisionMode]:
        return list(CollisionMode)

    def set_collision_mode(self, mode: Union[CollisionMode, str] = CollisionMode.IGNORE) -> None:
        try:
            resolved = CollisionMode(mode)
        except (ValueError, TypeError):
            raise InvalidCollisionMode(mode) from None
        self.config.collision_mode = resolved

    def set_debugging(self, enabled: bool = False) -> None:
        self.config.debug = bool(enabled)

    def set_memory_limit(self, megabytes: int = 0) -> None:
        """
        Record a memory limit in megabytes.

        The limit is not enforced: no eviction consults it yet.

        Raises:
            CacheConfigError: If megabytes is negative
        """
        limit = int(megabytes)
        if limit < 0:
            raise CacheConfigError(["memory_limit_mb cannot be negative"])
        if limit:
            warnings.warn(
                f"Memory limit of {limit} MB is recorded but not enforced; "
                "cached values are never evicted.",
                UserWarning,
                stacklevel=2
            )
        self.config.memory_limit_mb = limit

    # --- Clearing and introspection ---

    def clear(self, path: Any = (), deep: bool = False) -> None:
        key = self._prepare_path(path)
        with self._guard():
            self._invalidate_flights(key, deep)
            if not key:
                self._tree.reset()
                logger.info("Cleared entire cache")
                return
            removed = self._tree.discard(key, deep=deep)
        logger.debug("Cleared %s (deep=%s, removed=%s)", key, deep, removed)

    def is_cached(self, path: Any) -> bool:
        """Check whether a value is stored at path without touching statistics."""
        key = self._prepare_path(path)
        with self._guard():
            found, _ = self._tree.lookup(key)
        return found

    def __contains__(self, path: Any) -> bool:
        return self.is_cached(path)

    def __len__(self) -> int:
        with self._guard():
            return self._tree.count_values()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring and debugging.

        Returns:
            Dictionary with cache metrics and the current settings
        """
        with self._guard():
            entries = self._tree.count_values()
            nodes = self._tree.count_nodes()
            hits, misses = self.hits, self.misses
            waits = self.concurrent_waits

        total_requests = hits + misses
        return {
            'entries': entries,
            'nodes': nodes,
            'hits': hits,
            'misses': misses,
            'concurrent_waits': waits,
            'hit_rate': hits / total_requests if total_requests > 0 else 0,
            'collision_mode': self.config.collision_mode.value,
            'debug': self.config.debug,
            'memory_limit_mb': self.config.memory_limit_mb,
        }
