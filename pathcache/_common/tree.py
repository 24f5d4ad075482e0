"""
Path tree storage shared by the sync and async caches.

A cache path is an ordered sequence of hashable keys. Each key selects a
child node, so paths sharing a prefix share the nodes of that prefix:

    ("user", 42)      root -> "user" -> 42
    ("user", 43)      root -> "user" -> 43
    ("user",)         root -> "user"

Every node can hold a value of its own, independently of its children.
The value lives in a dedicated slot on the node rather than under a key
of the children mapping, so no user key can ever shadow it.
"""

import copy
from typing import Any, Dict, Hashable, Iterator, Optional, Tuple

from ..exceptions import InvalidCacheParameter
from .config import CopyMode


# Kept for compatibility with callers that treat it as off-limits.
# Paths containing it are rejected even though values no longer live in
# the children mapping.
RESERVED_CACHE_KEY = 'reserved_cache_key'

CacheKey = Hashable
CachePath = Tuple[CacheKey, ...]

# Copying these is a no-op, skip the copy module entirely
_IMMUTABLE_TYPES = (type(None), bool, int, float, complex, str, bytes, range, frozenset)


class _Missing:
    """Marker for an empty value slot."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<missing>'


MISSING = _Missing()


class CacheNode:
    """A single node of the path tree.

    Holds an optional value and a mapping of child nodes. A value of
    ``None`` is a real cached value; an empty slot is ``MISSING``.
    """

    # Use __slots__ since a large cache holds one node per path component
    __slots__ = ['children', 'value']

    def __init__(self):
        self.children: Dict[CacheKey, 'CacheNode'] = {}
        self.value: Any = MISSING

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    def is_empty(self) -> bool:
        """True if the node holds neither a value nor children."""
        return self.value is MISSING and not self.children

    def __repr__(self) -> str:
        return f"CacheNode(has_value={self.has_value}, children={len(self.children)})"


def normalize_path(path: Any) -> CachePath:
    """
    Convert a caller-supplied path into a tuple of keys.

    - None becomes the empty (root) path
    - lists and tuples are converted component by component
    - any other value is a path with a single component

    Tuple keys must therefore be wrapped, e.g. ``[("a", 1)]``.

    Args:
        path: Path as supplied by the caller

    Returns:
        Tuple of path components
    """
    if path is None:
        return ()
    if isinstance(path, (list, tuple)):
        return tuple(path)
    return (path,)


def validate_path(path: CachePath) -> None:
    """
    Reject paths containing the reserved cache key.

    Args:
        path: Normalized path

    Raises:
        InvalidCacheParameter: If any component is the reserved key
    """
    for key in path:
        if isinstance(key, str) and key == RESERVED_CACHE_KEY:
            raise InvalidCacheParameter(RESERVED_CACHE_KEY)


def clean_value(value: Any, copy_mode: CopyMode = CopyMode.SHALLOW) -> Any:
    """
    Return a copy of value that shares no top-level state with it.

    Immutable scalars are returned as-is. SHALLOW only protects the outer
    container: a list of dicts is copied, the dicts themselves are not.

    Args:
        value: Value being stored or returned
        copy_mode: Isolation strategy

    Returns:
        The isolated value
    """
    if copy_mode is CopyMode.NONE or isinstance(value, _IMMUTABLE_TYPES):
        return value
    if copy_mode is CopyMode.DEEP:
        return copy.deepcopy(value)
    return copy.copy(value)


class PathTree:
    """
    Mutable tree of CacheNode objects addressed by paths.

    The tree is not thread-safe; callers own the locking discipline.
    """

    def __init__(self):
        self.root = CacheNode()

    def find(self, path: CachePath) -> Optional[CacheNode]:
        """Return the node at path without creating anything, or None."""
        node = self.root
        for key in path:
            node = node.children.get(key)
            if node is None:
                return None
        return node

    def lookup(self, path: CachePath) -> Tuple[bool, Any]:
        """
        Look up the value stored at path.

        Returns:
            (True, value) on a hit, (False, None) on a miss
        """
        node = self.find(path)
        if node is None or not node.has_value:
            return False, None
        return True, node.value

    def store(self, path: CachePath, value: Any) -> None:
        """Store value at path, creating intermediate nodes as needed."""
        node = self.root
        for key in path:
            child = node.children.get(key)
            if child is None:
                child = node.children[key] = CacheNode()
            node = child
        node.value = value

    def discard(self, path: CachePath, deep: bool = False) -> bool:
        """
        Remove the value at path.

        Shallow discards leave children of the node intact. Nodes left
        with neither value nor children are pruned back toward the root.

        Args:
            path: Path whose value should be removed (must not be empty)
            deep: If True, remove the whole subtree rooted at path

        Returns:
            True if anything was removed
        """
        if not path:
            raise ValueError("discard() needs a non-empty path, use reset() for the root")

        # Remember the chain so empty nodes can be pruned bottom-up
        chain = [self.root]
        for key in path:
            child = chain[-1].children.get(key)
            if child is None:
                return False
            chain.append(child)

        target = chain[-1]
        if deep:
            removed = target.has_value or bool(target.children)
            target.children.clear()
        else:
            removed = target.has_value
        target.value = MISSING

        for depth in range(len(path), 0, -1):
            if not chain[depth].is_empty():
                break
            del chain[depth - 1].children[path[depth - 1]]

        return removed

    def reset(self) -> None:
        """Discard every node and start over with an empty root."""
        self.root = CacheNode()

    def count_values(self) -> int:
        return sum(1 for _ in self.iter_paths())

    def count_nodes(self) -> int:
        """Count nodes below the root (the root itself is not counted)."""
        count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            count += len(node.children)
            stack.extend(node.children.values())
        return count

    def iter_paths(self) -> Iterator[CachePath]:
        """Yield every path that currently holds a value, depth-first."""
        stack = [((), self.root)]
        while stack:
            path, node = stack.pop()
            if node.has_value:
                yield path
            for key, child in node.children.items():
                stack.append((path + (key,), child))
