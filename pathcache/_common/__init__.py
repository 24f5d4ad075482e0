"""Common components shared between sync and aio implementations.

This internal package contains code that is identical between both
implementations. It should NOT be imported directly by users.

Important: This package must NEVER import from sync or aio to avoid
circular dependencies.
"""

from .config import CacheConfig, CollisionMode, CopyMode
from .tree import (
    RESERVED_CACHE_KEY,
    CacheNode,
    PathTree,
    clean_value,
    normalize_path,
    validate_path,
)

__all__ = [
    'CacheConfig',
    'CollisionMode',
    'CopyMode',
    'RESERVED_CACHE_KEY',
    'CacheNode',
    'PathTree',
    'clean_value',
    'normalize_path',
    'validate_path',
]
