"""Exceptions raised by PathCache.

All of them signal caller misuse. Errors raised by producers are never
wrapped; they propagate unchanged.
"""

from typing import Any, List


class PathCacheError(Exception):
    """Base class for all PathCache errors."""
    pass


class InvalidCacheParameter(PathCacheError, ValueError):
    """Raised when a cache path contains the reserved cache key."""

    def __init__(self, parameter: Any):
        self.parameter = parameter
        super().__init__(
            f"{parameter!r} is reserved for internal use and cannot be part of a cache path"
        )


class InvalidCollisionMode(PathCacheError, ValueError):
    """Raised when an unknown collision mode is configured."""

    def __init__(self, mode: Any):
        self.mode = mode
        super().__init__(
            f"Invalid collision mode {mode!r}; expected one of 'ignore', 'error', 'log'"
        )


class CacheConfigError(PathCacheError, ValueError):
    """Raised when a cache configuration fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid cache configuration: " + "; ".join(self.errors))
