"""Capability interfaces for path tree caches.

Code that depends on a cache should depend on these contracts rather
than on PathTreeCache or AsyncPathTreeCache directly.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Sequence, Union

from ._common.config import CollisionMode


class CacheSettings(ABC):
    """Configuration surface shared by sync and async caches."""

    COLLISION_MODE_IGNORE = CollisionMode.IGNORE
    COLLISION_MODE_ERROR = CollisionMode.ERROR
    COLLISION_MODE_LOG = CollisionMode.LOG

    @abstractmethod
    def set_collision_mode(self, mode: Union[CollisionMode, str] = CollisionMode.IGNORE) -> None:
        """Set the collision mode.

        The collision mode only takes effect when debugging is enabled.

        Args:
            mode: A CollisionMode member or its string value

        Raises:
            InvalidCollisionMode: If mode is not a valid collision mode
        """
        pass

    @abstractmethod
    def set_debugging(self, enabled: bool = False) -> None:
        """Enable or disable debugging."""
        pass

    @abstractmethod
    def set_memory_limit(self, megabytes: int = 0) -> None:
        """Set the memory limit in megabytes (0 = unlimited)."""
        pass

    @abstractmethod
    def get_valid_collision_modes(self) -> List[CollisionMode]:
        """Return every accepted collision mode."""
        pass


class CacheInterface(CacheSettings):
    """Contract for synchronous path tree caches."""

    @abstractmethod
    def cache_or_compute(self, path: Sequence[Any], producer: Any,
                         force_refresh: bool = False) -> Any:
        """Return the value cached at path, computing and storing it on a miss.

        Args:
            path: Ordered sequence of hashable keys (empty = root)
            producer: Zero-argument callable returning the value, or the
                value itself
            force_refresh: Ignore any cached value and recompute

        Returns:
            The cached or freshly produced value

        Raises:
            InvalidCacheParameter: If path contains the reserved key
        """
        pass

    @abstractmethod
    def clear(self, path: Sequence[Any] = (), deep: bool = False) -> None:
        """Remove the value at path, or everything if path is empty.

        Args:
            path: Path to clear (empty = whole cache)
            deep: Also remove every value stored below path

        Raises:
            InvalidCacheParameter: If path contains the reserved key
        """
        pass


class AsyncCacheInterface(CacheSettings):
    """Contract for asynchronous path tree caches."""

    @abstractmethod
    async def cache_or_compute(self, path: Sequence[Any], producer: Any,
                               force_refresh: bool = False) -> Any:
        """Async version of CacheInterface.cache_or_compute.

        The producer may also be an awaitable or an async callable.
        """
        pass

    @abstractmethod
    def clear(self, path: Sequence[Any] = (), deep: bool = False) -> None:
        """Remove the value at path, or everything if path is empty."""
        pass
