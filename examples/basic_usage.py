#!/usr/bin/env python3
"""
Basic example showing hierarchical memoization with PathCache.

This example demonstrates:
- Caching expensive lookups under a path
- Shallow clear vs. subtree invalidation
- Memoizing a function with cached_path
"""

import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathcache import PathTreeCache, cached_path


cache = PathTreeCache()


def fetch_user(user_id):
    """Pretend to hit a slow backend."""
    time.sleep(0.2)
    return {"id": user_id, "name": f"user-{user_id}"}


@cached_path(cache, "orders")
def load_orders(user_id):
    time.sleep(0.2)
    return [f"order-{user_id}-{n}" for n in range(3)]


def main():
    """Demonstrate caching, clearing and decorator usage."""
    logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.WARNING)

    start = time.perf_counter()
    cache.cache_or_compute(["user", 42], lambda: fetch_user(42))
    cold = time.perf_counter() - start

    start = time.perf_counter()
    cache.cache_or_compute(["user", 42], lambda: fetch_user(42))
    warm = time.perf_counter() - start

    print(f"Cold lookup: {cold * 1000:.1f} ms")
    print(f"Warm lookup: {warm * 1000:.3f} ms")

    # Shallow clear only forgets the value stored exactly at ["user"]
    cache.cache_or_compute(["user"], lambda: ["all", "users"])
    cache.clear(["user"])
    print(f"After shallow clear, ['user', 42] cached: {['user', 42] in cache}")

    # Deep clear invalidates the whole subtree
    cache.clear(["user"], deep=True)
    print(f"After deep clear, ['user', 42] cached: {['user', 42] in cache}")

    load_orders(1)
    load_orders(1)
    load_orders.cache_clear()

    print("\nStatistics:")
    for name, value in cache.get_stats().items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    main()
