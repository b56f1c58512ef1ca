# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Versioned document repository.

This module provides the Repository class: a directory of documents where
every write and delete is recorded as a git commit, with per-document
history and retrieval of any past revision.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from gitbase.exceptions import (
    CollectionExistsError,
    CollectionNotFoundError,
    DocumentNotFoundError,
    StorageError,
    VersionControlError,
)
from gitbase.models import CommitResult
from gitbase.repository._collection import (
    COLLECTION_MARKER,
    Collection,
    render_marker,
    validate_collection_name,
)
from gitbase.repository._paths import key_to_path, normalize_key, path_to_key

if TYPE_CHECKING:
    from types import TracebackType

    from dulwich.repo import Repo
    from structlog.typing import FilteringBoundLogger

    from gitbase.history._protocol import HistoryBackend
    from gitbase.models import CommitInfo, Signature
    from gitbase.repository._lock import ReadWriteLock
    from gitbase.repository._worktree import WorkingTree

_GIT_DIR: Final = ".git"
_FILE_MODE: Final = 0o644
_AUTO_CREATE_REASON: Final = "automatically created collection on use"


class Repository:
    """A git-backed store of versioned documents.

    Documents are addressed by relative POSIX keys. Writes and deletes hold
    the repository's exclusive lock for the whole mutate-stage-commit
    sequence; reads hold the shared side, so they never observe a write
    that has not been committed.

    Instances are built by `open_repository`, which owns initialization.

    Example:
        >>> with open_repository(Path("/srv/store")) as repo:
        ...     repo.put("notes/todo.txt", b"buy milk", "add todo")
        ...     repo.fetch("notes/todo.txt")
        b'buy milk'
    """

    __slots__: Final = (
        "_history",
        "_lock",
        "_logger",
        "_repo",
        "_root",
        "_signature",
        "_worktree",
    )

    def __init__(  # noqa: PLR0913
        self,
        *,
        repo: Repo,
        worktree: WorkingTree,
        signature: Signature,
        history: HistoryBackend,
        lock: ReadWriteLock,
        logger: FilteringBoundLogger,
    ) -> None:
        """Assemble a repository from its collaborators.

        Args:
            repo: Open dulwich repository.
            worktree: Working tree handle over the same repository.
            signature: Identity recorded on every commit.
            history: Backend answering history and revision queries.
            lock: Repository-wide read/write lock.
            logger: Logger with the repository root bound.
        """
        self._repo = repo
        self._worktree = worktree
        self._root = worktree.root
        self._signature = signature
        self._history = history
        self._lock = lock
        self._logger = logger

    def __repr__(self) -> str:
        return f"Repository(root={str(self._root)!r})"

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release file handles held by the underlying git repository."""
        self._repo.close()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def root(self) -> Path:
        """Resolved repository root."""
        return self._root

    @property
    def worktree(self) -> WorkingTree:
        """Working tree handle."""
        return self._worktree

    @property
    def lock(self) -> ReadWriteLock:
        """Repository-wide read/write lock."""
        return self._lock

    @property
    def signature(self) -> Signature:
        """Identity recorded on every commit."""
        return self._signature

    @property
    def history_backend(self) -> HistoryBackend:
        """Backend answering history and revision queries."""
        return self._history

    # =========================================================================
    # Staging and Committing
    # =========================================================================

    def stage_changes(self) -> frozenset[Path]:
        """Stage every pending change in the working tree.

        Returns:
            Absolute paths of the staged changes.

        Raises:
            VersionControlError: If the index cannot be updated.
        """
        with self._lock.write_locked():
            return self._worktree.stage_all()

    def commit(self, reason: str) -> CommitResult:
        """Commit whatever is currently staged.

        When nothing is staged, no commit is created and the result has
        `no_changes` set.

        Args:
            reason: Commit message.

        Returns:
            CommitResult describing the commit.

        Raises:
            VersionControlError: If the commit cannot be created.
        """
        with self._lock.write_locked():
            return self._commit(reason)

    def commit_all(self, reason: str) -> CommitResult:
        """Stage every pending change and commit it.

        Args:
            reason: Commit message.

        Returns:
            CommitResult describing the commit.

        Raises:
            VersionControlError: If staging or committing fails.
        """
        with self._lock.write_locked():
            return self._commit_all(reason)

    def _record(self, key: str, reason: str) -> CommitResult:
        # Commits even when the tree is unchanged
        _ = self._worktree.stage_all([key])
        return self._commit(reason, allow_empty=True)

    def _commit_all(self, reason: str) -> CommitResult:
        _ = self._worktree.stage_all()
        return self._commit(reason)

    def _commit(self, reason: str, *, allow_empty: bool = False) -> CommitResult:
        staged = self._worktree.staged_changes()
        if not staged and not allow_empty:
            self._logger.debug("commit_skipped", reason=reason)
            return CommitResult(sha=None, files=frozenset(), no_changes=True)

        try:
            sha = self._worktree.commit(reason, self._signature)
        except VersionControlError as e:
            self._logger.error("commit_failed", reason=reason, error=str(e))
            raise

        files = frozenset(self._root / p for p in staged)
        self._logger.info("commit_created", sha=sha, reason=reason, files=len(files))
        return CommitResult(sha=sha, files=files, no_changes=not files)

    # =========================================================================
    # Documents
    # =========================================================================

    def put(self, key: str, content: bytes, reason: str) -> CommitResult:
        """Write a document and commit the change.

        Parent directories are created as needed. The path is staged even
        when an ignore rule matches it. Writing content identical to the
        current version still records a commit with `reason`; its tree is
        unchanged, so the result has no files and `no_changes` set.

        Args:
            key: Document key.
            content: Full document content.
            reason: Commit message.

        Returns:
            CommitResult describing the commit.

        Raises:
            InvalidKeyError: If the key is invalid.
            StorageError: If the file cannot be written.
            VersionControlError: If staging or committing fails.
        """
        path = key_to_path(self._root, key)
        with self._lock.write_locked():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                _ = path.write_bytes(content)
                path.chmod(_FILE_MODE)
            except OSError as e:
                msg = f"Cannot write document {key}: {e}"
                raise StorageError(msg, path=path, cause=e) from e

            stored = path_to_key(self._root, path)
            self._logger.debug("document_written", key=stored, size=len(content))
            return self._record(stored, reason)

    def remove(self, key: str, reason: str) -> CommitResult:
        """Delete a document and commit the deletion.

        Args:
            key: Document key.
            reason: Commit message.

        Returns:
            CommitResult describing the commit.

        Raises:
            InvalidKeyError: If the key is invalid.
            DocumentNotFoundError: If the document does not exist.
            StorageError: If the file cannot be deleted.
            VersionControlError: If staging or committing fails.
        """
        path = key_to_path(self._root, key)
        with self._lock.write_locked():
            try:
                path.unlink()
            except FileNotFoundError as e:
                msg = f"Document not found: {key}"
                raise DocumentNotFoundError(msg, key=key) from e
            except OSError as e:
                msg = f"Cannot delete document {key}: {e}"
                raise StorageError(msg, path=path, cause=e) from e

            stored = path_to_key(self._root, path)
            self._logger.debug("document_removed", key=stored)
            return self._record(stored, reason)

    def fetch(self, key: str) -> bytes:
        """Read a document's current content.

        Args:
            key: Document key.

        Returns:
            The document bytes.

        Raises:
            InvalidKeyError: If the key is invalid.
            DocumentNotFoundError: If the document does not exist.
            StorageError: If the file cannot be read.
        """
        path = key_to_path(self._root, key)
        with self._lock.read_locked():
            try:
                return path.read_bytes()
            except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
                msg = f"Document not found: {key}"
                raise DocumentNotFoundError(msg, key=key) from e
            except OSError as e:
                msg = f"Cannot read document {key}: {e}"
                raise StorageError(msg, path=path, cause=e) from e

    def exists(self, key: str) -> bool:
        """Check whether a document currently exists."""
        path = key_to_path(self._root, key)
        with self._lock.read_locked():
            return path.is_file()

    def documents(self, prefix: str | None = None) -> list[str]:
        """List current document keys, sorted.

        Args:
            prefix: Optional key directory to restrict the listing to.

        Returns:
            Keys of every file in the working tree (or under prefix),
            excluding git metadata and collection markers.

        Raises:
            InvalidKeyError: If the prefix is invalid.
        """
        start = self._root if prefix is None else key_to_path(self._root, prefix)
        keys: list[str] = []
        with self._lock.read_locked():
            for dirpath, dirnames, filenames in os.walk(start):
                current = Path(dirpath)
                if current == self._root and _GIT_DIR in dirnames:
                    dirnames.remove(_GIT_DIR)
                for filename in filenames:
                    key = path_to_key(self._root, current / filename)
                    if _is_marker(key):
                        continue
                    keys.append(key)
        return sorted(keys)

    # =========================================================================
    # History
    # =========================================================================

    def history(self, key: str) -> list[CommitInfo]:
        """Commits that touched a document, newest first, following renames.

        Args:
            key: Document key.

        Returns:
            List of CommitInfo. Empty if the document was never committed.

        Raises:
            InvalidKeyError: If the key is invalid.
            HistoryQueryError: If the history backend fails.
        """
        normalized = normalize_key(key)
        with self._lock.read_locked():
            if self._worktree.head_sha() is None:
                return []
            return self._history.resolve_history(self._root, normalized)

    def revisions(self, key: str) -> list[str]:
        """Revision ids (commit SHAs) of a document, newest first.

        Raises:
            InvalidKeyError: If the key is invalid.
            HistoryQueryError: If the history backend fails.
        """
        return [commit.sha for commit in self.history(key)]

    def fetch_revision(self, key: str, revision: str) -> bytes:
        """Read a document's content as of a revision.

        Args:
            key: Document key.
            revision: Revision id, as returned by `revisions`.

        Returns:
            The document bytes at that revision.

        Raises:
            InvalidKeyError: If the key is invalid.
            RevisionNotFoundError: If the revision or the document at that
                revision does not exist.
            HistoryQueryError: If the history backend fails.
        """
        normalized = normalize_key(key)
        with self._lock.read_locked():
            return self._history.show_at_revision(self._root, normalized, revision)

    def log(self, n: int = 10) -> list[CommitInfo]:
        """Most recent commits of the whole repository, newest first.

        Args:
            n: Maximum number of commits to return.
        """
        with self._lock.read_locked():
            return self._worktree.last_commits(n)

    # =========================================================================
    # Collections
    # =========================================================================

    def open(self, name: str) -> Collection:
        """Open an existing collection.

        Args:
            name: Collection name.

        Returns:
            The collection handle.

        Raises:
            InvalidKeyError: If the name is invalid.
            CollectionNotFoundError: If no collection has this name.
            StorageError: If the name is taken by something that is not a
                collection.
        """
        name = validate_collection_name(name)
        with self._lock.read_locked():
            self._check_collection(name)
        return Collection(self, name)

    def create(self, name: str, reason: str) -> Collection:
        """Create a collection and commit its marker.

        Args:
            name: Collection name.
            reason: Commit message.

        Returns:
            The new collection handle.

        Raises:
            InvalidKeyError: If the name is invalid.
            CollectionExistsError: If the name is already taken.
            StorageError: If the directory or marker cannot be written.
            VersionControlError: If staging or committing fails.
        """
        name = validate_collection_name(name)
        directory = self._root / name
        with self._lock.write_locked():
            if os.path.lexists(directory):
                msg = f"Collection already exists: {name}"
                raise CollectionExistsError(msg, name=name)

            marker = directory / COLLECTION_MARKER
            try:
                directory.mkdir(mode=0o755)
                _ = marker.write_bytes(render_marker(name, reason))
            except OSError as e:
                msg = f"Cannot create collection {name}: {e}"
                raise StorageError(msg, path=directory, cause=e) from e

            result = self._record(f"{name}/{COLLECTION_MARKER}", reason)
            self._logger.info("collection_created", collection=name, sha=result.sha)
        return Collection(self, name)

    def use(self, name: str) -> Collection:
        """Open a collection, creating it if it does not exist.

        Args:
            name: Collection name.

        Returns:
            The collection handle.

        Raises:
            InvalidKeyError: If the name is invalid.
            StorageError: If the name is taken by something that is not a
                collection.
        """
        try:
            return self.open(name)
        except CollectionNotFoundError:
            pass
        try:
            return self.create(name, _AUTO_CREATE_REASON)
        except CollectionExistsError:
            # Another caller created it between open and create
            return self.open(name)

    def collections(self) -> list[Collection]:
        """All collections, sorted by name."""
        with self._lock.read_locked():
            names = sorted(
                entry.name
                for entry in self._root.iterdir()
                if entry.name != _GIT_DIR
                and entry.is_dir()
                and (entry / COLLECTION_MARKER).is_file()
            )
        return [Collection(self, name) for name in names]

    def _check_collection(self, name: str) -> None:
        directory = self._root / name
        if not os.path.lexists(directory):
            msg = f"Collection not found: {name}"
            raise CollectionNotFoundError(msg, name=name)
        if not directory.is_dir() or not (directory / COLLECTION_MARKER).is_file():
            msg = f"Path exists but is not a collection: {name}"
            raise StorageError(msg, path=directory)


def _is_marker(key: str) -> bool:
    parts = key.split("/")
    return len(parts) == 2 and parts[1] == COLLECTION_MARKER  # noqa: PLR2004
