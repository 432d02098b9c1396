"""
Storage layer: the guarded in-memory map behind the HTTP handlers.
"""

from .kv_store import KeyValueStore
from .rwlock import ReadWriteLock

__all__ = [
    "KeyValueStore",    # str -> str map, shared reads / exclusive writes
    "ReadWriteLock",    # The lock it uses
]
