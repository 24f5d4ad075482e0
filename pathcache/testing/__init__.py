"""Testing utilities for PathCache consumers."""

from .fixtures import CacheTestHelper

__all__ = ['CacheTestHelper']
