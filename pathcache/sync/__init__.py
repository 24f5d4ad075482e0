"""Synchronous, thread-safe implementation of PathCache."""

from .cache import PathTreeCache
from .decorators import cached_path

__all__ = [
    'PathTreeCache',
    'cached_path',
]
