"""
=============================================================================
IN-MEMORY KEY-VALUE STORE
=============================================================================

The only piece of shared state in the service: a dict of str -> str
behind a reader/writer lock.

    GET /list          ──► get_all()   ── shared lock ──┐
    GET /entry/:key    ──► get(key)    ── shared lock ──┼──►  _data
    PUT /entry/:k/:v   ──► set(k, v)   ── exclusive ────┘

The dict never leaves this class. get_all() hands out a copy, so callers
can format it at leisure without holding the lock.

Missing keys read as "" (an empty string), the same as a key that was
explicitly set to "". Use `key in store` when the difference matters.

=============================================================================
"""

import logging
from typing import Dict, Mapping, Optional

from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Thread-safe in-memory mapping of string keys to string values.

    Nothing here can fail: reads of unknown keys return "" and writes
    create or overwrite. There is no delete, expiry or size limit.

    Example:
        store = KeyValueStore()
        store.set("first", "hello")
        store.get("first")     # "hello"
        store.get("missing")   # ""
        store.get_all()        # {"first": "hello"}
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        """
        Args:
            initial: Optional entries to seed the store with. They are
                     copied; later changes to the mapping are not seen.
        """
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = ReadWriteLock()

    def get(self, key: str) -> str:
        """Return the value for `key`, or "" if it was never set."""
        with self._lock.read_locked():
            return self._data.get(key, "")

    def get_all(self) -> Dict[str, str]:
        """Return a snapshot copy of every entry."""
        with self._lock.read_locked():
            return dict(self._data)

    def set(self, key: str, value: str) -> None:
        """Create or overwrite `key`. Last writer wins."""
        with self._lock.write_locked():
            self._data[key] = value
        logger.debug(f"Stored key {key!r} ({len(value)} bytes)")

    def __contains__(self, key: object) -> bool:
        with self._lock.read_locked():
            return key in self._data

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._data)

    def __repr__(self) -> str:
        return f"KeyValueStore(entries={len(self)})"
