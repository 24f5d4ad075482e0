"""PathCache - hierarchical memoization cache.

PathCache stores computed values under paths of hashable keys. Paths that
share a prefix share tree nodes, so related entries can be invalidated
together.

Choose your implementation:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Synchronous (thread-safe):
    from pathcache.sync import PathTreeCache

Asynchronous (asyncio):
    from pathcache.aio import AsyncPathTreeCache
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from . import sync
from . import aio

from .sync import PathTreeCache, cached_path
from .aio import AsyncPathTreeCache, async_cached_path
from .interfaces import CacheSettings, CacheInterface, AsyncCacheInterface
from .exceptions import (
    PathCacheError,
    InvalidCacheParameter,
    InvalidCollisionMode,
    CacheConfigError,
)
from ._common import (
    CacheConfig,
    CollisionMode,
    CopyMode,
    RESERVED_CACHE_KEY,
)

__all__ = [
    "__version__",
    "sync",
    "aio",
    "PathTreeCache",
    "AsyncPathTreeCache",
    "cached_path",
    "async_cached_path",
    "CacheSettings",
    "CacheInterface",
    "AsyncCacheInterface",
    "PathCacheError",
    "InvalidCacheParameter",
    "InvalidCollisionMode",
    "CacheConfigError",
    "CacheConfig",
    "CollisionMode",
    "CopyMode",
    "RESERVED_CACHE_KEY",
]
