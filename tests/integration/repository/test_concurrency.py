"""Multi-thread concurrency tests for Repository.

Writers from many threads must produce exactly one commit each, never overlap
inside the write-stage-commit sequence, and never expose uncommitted content
to concurrent readers.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, override

import pytest

from gitbase.repository import ReadWriteLock, open_repository

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from gitbase.models import CommitResult

_WRITERS = 8
_WRITES_PER_WRITER = 5


class InstrumentedLock(ReadWriteLock):
    """ReadWriteLock tracking the peak number of concurrent holders."""

    def __init__(self) -> None:
        super().__init__()
        self._stats = threading.Lock()
        self.active_writers = 0
        self.max_writers = 0
        self.overlapped = False

    @override
    def acquire_write(self) -> None:
        super().acquire_write()
        with self._stats:
            self.active_writers += 1
            self.max_writers = max(self.max_writers, self.active_writers)

    @override
    def release_write(self) -> None:
        with self._stats:
            self.active_writers -= 1
        super().release_write()

    @override
    def acquire_read(self) -> None:
        super().acquire_read()
        with self._stats:
            if self.active_writers:
                self.overlapped = True


@pytest.fixture
def lock() -> InstrumentedLock:
    return InstrumentedLock()


class TestConcurrentWriters:
    def test_distinct_keys_each_commit_once(
        self, store_path: Path, logger: FilteringBoundLogger, lock: InstrumentedLock
    ) -> None:
        with open_repository(store_path, logger=logger, lock=lock) as repo:

            def write(writer: int) -> list[CommitResult]:
                return [
                    repo.put(
                        f"w{writer}/doc{i}.txt",
                        f"{writer}:{i}".encode(),
                        f"w{writer} #{i}",
                    )
                    for i in range(_WRITES_PER_WRITER)
                ]

            with ThreadPoolExecutor(max_workers=_WRITERS) as pool:
                batches = list(pool.map(write, range(_WRITERS)))
            results = [r for batch in batches for r in batch]

            total = _WRITERS * _WRITES_PER_WRITER
            assert all(not r.no_changes for r in results)
            assert len({r.sha for r in results}) == total
            assert len(repo.log(total + 10)) == total
            assert lock.max_writers == 1
            assert repo.worktree.pending_changes() == frozenset()

            for writer in range(_WRITERS):
                for i in range(_WRITES_PER_WRITER):
                    key = f"w{writer}/doc{i}.txt"
                    assert repo.fetch(key) == f"{writer}:{i}".encode()
                    assert len(repo.revisions(key)) == 1

    def test_same_key_history_is_linear(
        self, store_path: Path, logger: FilteringBoundLogger, lock: InstrumentedLock
    ) -> None:
        with open_repository(store_path, logger=logger, lock=lock) as repo:

            def write(writer: int) -> CommitResult:
                content = f"from {writer}".encode()
                return repo.put("shared.txt", content, f"writer {writer}")

            with ThreadPoolExecutor(max_workers=_WRITERS) as pool:
                results = list(pool.map(write, range(_WRITERS)))

            committed = [r.sha for r in results if not r.no_changes]
            assert len(committed) == _WRITERS
            log = repo.log(_WRITERS + 1)
            for newer, older in zip(log, log[1:], strict=False):
                assert newer.parent_shas == (older.sha,)
            assert lock.max_writers == 1

    def test_readers_only_see_committed_content(
        self, store_path: Path, logger: FilteringBoundLogger, lock: InstrumentedLock
    ) -> None:
        with open_repository(store_path, logger=logger, lock=lock) as repo:
            _ = repo.put("counter.txt", b"0", "v0")
            done = threading.Event()
            observed: list[bytes] = []

            def reader() -> None:
                while not done.is_set():
                    observed.append(repo.fetch("counter.txt"))

            readers = [threading.Thread(target=reader) for _ in range(3)]
            for thread in readers:
                thread.start()
            try:
                for i in range(1, 11):
                    _ = repo.put("counter.txt", str(i).encode(), f"v{i}")
            finally:
                done.set()
                for thread in readers:
                    thread.join(10)

            committed = {
                repo.fetch_revision("counter.txt", sha)
                for sha in repo.revisions("counter.txt")
            }
            assert set(observed) <= committed
            assert not lock.overlapped
