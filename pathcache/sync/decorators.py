"""
Memoization decorator backed by a PathTreeCache.

Results are stored at ``(*prefix, func.__qualname__, key(*args, **kwargs))``
so every decorated function owns a subtree that can be cleared in one call.
"""

import functools
from typing import Any, Callable

from cachetools.keys import hashkey

from ..interfaces import CacheInterface


def cached_path(cache: CacheInterface, *prefix: Any,
                key: Callable[..., Any] = hashkey) -> Callable:
    """
    Decorator memoizing a function into a path tree cache.

    Example::

        cache = PathTreeCache()

        @cached_path(cache, "users")
        def load_user(user_id):
            return db.fetch(user_id)

        load_user(42)            # stored at ("users", "load_user", hashkey(42))
        load_user.cache_clear()  # drops every cached load_user result

    Args:
        cache: Cache to store results in
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
        def wrapper(*args, **kwargs):
            return cache.cache_or_compute(
                cache_path(*args, **kwargs),
                lambda: func(*args, **kwargs)
            )

        wrapper.cache = cache
        wrapper.cache_path = cache_path
        wrapper.cache_clear = lambda: cache.clear(base, deep=True)
        return wrapper

    return decorator
