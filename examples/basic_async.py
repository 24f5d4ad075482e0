#!/usr/bin/env python3
"""
Basic async example showing request coalescing with AsyncPathTreeCache.

Ten concurrent tasks ask for the same report; the producer runs once.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathcache.aio import AsyncPathTreeCache


async def build_report(name):
    """Pretend to aggregate a report remotely."""
    print(f"  building {name}...")
    await asyncio.sleep(0.5)
    return {"report": name, "rows": 1000}


async def main():
    """Demonstrate coalesced async lookups."""
    cache = AsyncPathTreeCache()
    name = sys.argv[1] if len(sys.argv) > 1 else "daily"

    results = await asyncio.gather(*(
        cache.cache_or_compute(["reports", name], lambda: build_report(name))
        for _ in range(10)
    ))

    stats = cache.get_stats()
    print(f"\nRequests: {len(results)}")
    print(f"  Producer runs: {stats['misses']}")
    print(f"  Coalesced waits: {stats['concurrent_waits']}")


if __name__ == "__main__":
    asyncio.run(main())
