"""Memoization decorator for coroutine functions, backed by AsyncPathTreeCache."""

import functools
from typing import Any, Callable

from cachetools.keys import hashkey

from ..interfaces import AsyncCacheInterface


def async_cached_path(cache: AsyncCacheInterface, *prefix: Any,
                      key: Callable[..., Any] = hashkey) -> Callable:
    """
    Async version of cached_path.

    Concurrent calls with the same arguments share a single invocation of
    the decorated coroutine function.

    Args:
        cache: Async cache to store results in
        *prefix: Leading path components shared by all calls
        key: Builds the final path component from the call arguments

    Returns:
        Decorator
    """
    def decorator(func: Callable) -> Callable:
        base = tuple(prefix) + (func.__qualname__,)

        def cache_path(*args, **kwargs):
            return base + (key(*args, **kwargs),)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await cache.cache_or_compute(
                cache_path(*args, **kwargs),
                lambda: func(*args, **kwargs)
            )

        wrapper.cache = cache
        wrapper.cache_path = cache_path
        wrapper.cache_clear = lambda: cache.clear(base, deep=True)
        return wrapper

    return decorator
