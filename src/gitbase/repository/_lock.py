"""Reader/writer lock guarding a repository.

Writers (put, remove, create) are exclusive. Readers share the lock with each
other but never overlap a writer, so a read never observes a file written but
not yet committed. A waiting writer blocks new readers, so a steady stream of
reads cannot starve writes.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ReadWriteLock:
    """Non-reentrant reader/writer lock with writer preference.

    There are no timeouts: a blocked caller waits until the lock is released.

    Example:
        >>> lock = ReadWriteLock()
        >>> with lock.write_locked():
        ...     pass  # exclusive section
        >>> with lock.read_locked():
        ...     pass  # shared section
    """

    __slots__ = ("_condition", "_readers", "_waiting_writers", "_writer")

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._waiting_writers = 0
        self._writer = False

    @property
    def readers(self) -> int:
        """Number of callers currently holding the shared side."""
        return self._readers

    @property
    def write_held(self) -> bool:
        """Whether the exclusive side is currently held."""
        return self._writer

    def acquire_read(self) -> None:
        """Acquire the shared side, waiting while a writer holds or awaits it."""
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release the shared side.

        Raises:
            RuntimeError: If the shared side is not held.
        """
        with self._condition:
            if self._readers == 0:
                msg = "release_read() called without a matching acquire_read()"
                raise RuntimeError(msg)
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        """Acquire the exclusive side, waiting for readers and writers to leave."""
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        """Release the exclusive side.

        Raises:
            RuntimeError: If the exclusive side is not held.
        """
        with self._condition:
            if not self._writer:
                msg = "release_write() called without a matching acquire_write()"
                raise RuntimeError(msg)
            self._writer = False
            self._condition.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the shared side for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the exclusive side for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
