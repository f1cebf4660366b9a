"""Utility functions and helpers for cvelookup."""

from cvelookup.utils.storage import (
    JSONFileStorage,
    KeyValueStorage,
    MemoryStorage,
    StorageError,
)

__all__ = [
    "JSONFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StorageError",
]
