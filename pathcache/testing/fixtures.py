"""Test fixtures for PathCache consumers.

These fixtures provide controlled access to internal state for testing purposes
without exposing implementation details as part of the public API.
"""

from typing import Any, Dict, List, Optional

from .._common.base import BasePathCache
from .._common.tree import CachePath, normalize_path


class CacheTestHelper:
    """Public test fixture for cache verification.

    This class provides a stable testing interface for verifying cache behavior
    without exposing internal implementation details. It's designed for use in
    test suites of projects that consume PathCache.

    Example:
        cache = PathTreeCache()
        testable = CacheTestHelper(cache)

        # Verify cache behavior
        summary = testable.get_summary()
        assert summary['total_entries'] > 0
        assert testable.was_path_cached(["user", 42])
    """

    def __init__(self, cache: BasePathCache):
        """Initialize with a PathTreeCache or AsyncPathTreeCache.

        Args:
            cache: The cache under test
        """
        self._cache = cache

    def get_summary(self) -> Dict[str, Any]:
        """Returns high-level cache state for testing.

        Returns:
            Dictionary containing:
            - total_entries: Number of paths holding a value
            - total_nodes: Number of tree nodes below the root
            - max_depth: Length of the longest cached path
            - root_cached: Whether the empty path holds a value
        """
        paths = self.get_cached_paths()
        return {
            'total_entries': len(paths),
            'total_nodes': self._cache.get_stats()['nodes'],
            'max_depth': max((len(p) for p in paths), default=0),
            'root_cached': () in paths,
        }

    def get_cached_paths(self) -> List[CachePath]:
        """Return every path currently holding a value, sorted by depth."""
        with self._cache._guard():
            paths = list(self._cache._tree.iter_paths())
        return sorted(paths, key=len)

    def was_path_cached(self, path: Any) -> bool:
        """Check if a value is stored at exactly this path.

        Args:
            path: Path to check for cache presence

        Returns:
            True if path is cached, False otherwise
        """
        return self._cache.is_cached(path)

    def has_node(self, path: Any) -> bool:
        """Check if the tree has a node for path, with or without a value.

        Useful for verifying that clear() pruned empty branches.
        """
        with self._cache._guard():
            return self._cache._tree.find(normalize_path(path)) is not None

    def get_children_keys(self, path: Any = ()) -> Optional[List[Any]]:
        """Get the child keys of the node at path.

        Returns:
            List of child keys, or None if no node exists at path
        """
        with self._cache._guard():
            node = self._cache._tree.find(normalize_path(path))
            if node is None:
                return None
            return list(node.children)

    def peek(self, path: Any, default: Any = None) -> Any:
        """Return the stored object at path itself, bypassing value isolation.

        Lets tests assert that the cache never hands out its own instance.
        Does not count as a hit or miss.
        """
        with self._cache._guard():
            found, value = self._cache._tree.lookup(normalize_path(path))
        return value if found else default
