"""Configuration system for PathCache.

This module defines how users tune a cache instance: how stored values are
isolated from callers, whether concurrent identical requests are coalesced,
and the reserved collision/memory settings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class CollisionMode(Enum):
    """What to do when a key collision is detected.

    Only takes effect when debugging is enabled. No collision detection
    consults this value yet; it is recorded for future use.
    """
    IGNORE = "ignore"
    ERROR = "error"
    LOG = "log"


class CopyMode(Enum):
    """How values are isolated when stored in or read from the cache."""
    SHALLOW = "shallow"   # copy.copy - one level of isolation
    DEEP = "deep"         # copy.deepcopy - full isolation
    NONE = "none"         # Values are shared with callers (fastest)


@dataclass
class CacheConfig:
    """Complete configuration for a path tree cache.

    This is the primary way users customize a cache. The cache validates
    the configuration at construction time.
    """

    # Reserved settings (recorded, reported by get_stats(), not enforced)
    collision_mode: CollisionMode = CollisionMode.IGNORE
    debug: bool = False
    memory_limit_mb: int = 0  # 0 = unlimited

    # Value isolation
    copy_mode: CopyMode = CopyMode.SHALLOW

    # Single-flight for concurrent requests on the same path
    coalesce: bool = True

    @classmethod
    def deep_isolation(cls) -> 'CacheConfig':
        """Create config that deep-copies every stored and returned value.

        Returns:
            CacheConfig with CopyMode.DEEP
        """
        return cls(copy_mode=CopyMode.DEEP)

    @classmethod
    def no_copy(cls) -> 'CacheConfig':
        """Create config that shares values with callers.

        Callers must treat returned values as read-only.

        Returns:
            CacheConfig with CopyMode.NONE
        """
        return cls(copy_mode=CopyMode.NONE)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.collision_mode, CollisionMode):
            errors.append(f"collision_mode must be a CollisionMode, got {self.collision_mode!r}")

        if not isinstance(self.copy_mode, CopyMode):
            errors.append(f"copy_mode must be a CopyMode, got {self.copy_mode!r}")

        if isinstance(self.memory_limit_mb, bool) or not isinstance(self.memory_limit_mb, int):
            errors.append(f"memory_limit_mb must be an integer, got {self.memory_limit_mb!r}")
        elif self.memory_limit_mb < 0:
            errors.append("memory_limit_mb cannot be negative")

        return errors
