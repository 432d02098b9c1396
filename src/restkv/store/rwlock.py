"""
=============================================================================
READER/WRITER LOCK
=============================================================================

A shared/exclusive lock built on threading.Condition.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WHO MAY HOLD THE LOCK                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Readers   Writer   Allowed?                                       │
    │   ───────   ──────   ────────                                       │
    │     N          0       yes  (any number of readers together)        │
    │     0          1       yes  (one writer, alone)                     │
    │     N≥1        1       NO                                           │
    │     0          2       NO                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Writers that are waiting block NEW readers from entering. Without that,
a steady stream of overlapping GET requests would keep the reader count
above zero forever and a PUT would never get in.

=============================================================================
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Multiple readers OR one writer.

    Usage:
        lock = ReadWriteLock()

        with lock.read_locked():
            value = data.get(key)

        with lock.write_locked():
            data[key] = value
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0              # Readers currently inside
        self._writer = False           # True while a writer is inside
        self._writers_waiting = 0      # Writers queued for the lock

    # =========================================================================
    # SHARED (READ) SIDE
    # =========================================================================

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a held read lock")
            self._readers -= 1
            if self._readers == 0:
                # Last reader out: a waiting writer may proceed
                self._cond.notify_all()

    # =========================================================================
    # EXCLUSIVE (WRITE) SIDE
    # =========================================================================

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a held write lock")
            self._writer = False
            self._cond.notify_all()

    # =========================================================================
    # CONTEXT MANAGERS
    # =========================================================================

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the shared lock for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the exclusive lock for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock (for tests/monitoring)."""
        with self._cond:
            return self._readers

    @property
    def write_held(self) -> bool:
        """True while a writer holds the lock."""
        with self._cond:
            return self._writer
