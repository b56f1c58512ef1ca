# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""History backend protocol.

dulwich has no path-filtered, rename-following log, so history questions are
answered by a pluggable backend. Backends are stateless: every call names the
repository root it operates on.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gitbase.models import CommitInfo


@runtime_checkable
class HistoryBackend(Protocol):
    """Answers history and historical-content queries for a document key.

    Example:
        >>> def first_version(backend: HistoryBackend, root: Path, key: str) -> bytes:
        ...     oldest = backend.resolve_history(root, key)[-1]
        ...     return backend.show_at_revision(root, key, oldest.sha)
    """

    def resolve_history(self, root: Path, key: str) -> list[CommitInfo]:
        """Return the commits that touched a key, following renames.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.

        Returns:
            CommitInfo records, newest first. Empty if the key was never committed.

        Raises:
            HistoryQueryError: If the history cannot be resolved.
        """
        ...

    def show_at_revision(self, root: Path, key: str, revision: str) -> bytes:
        """Return the content of a key as of a revision.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.
            revision: Commit identifier.

        Returns:
            The document bytes at that revision.

        Raises:
            RevisionNotFoundError: If the revision or the key at that revision
                does not exist.
            HistoryQueryError: If the query fails for any other reason.
        """
        ...
