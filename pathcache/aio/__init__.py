"""Asynchronous implementation of PathCache.

All producers are awaited, and concurrent tasks requesting the same path
share a single producer run.
"""

from .cache import AsyncPathTreeCache
from .decorators import async_cached_path

__all__ = [
    'AsyncPathTreeCache',
    'async_cached_path',
]
