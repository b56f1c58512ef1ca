"""gitbase document repositories.

This package provides a git-backed store where every write and delete of a
document is recorded as a commit.

Classes:
    Repository: Versioned document store rooted at a directory.
    Collection: Named sub-store of a repository.
    WorkingTree: Handle on the repository's working tree and index.
    ReadWriteLock: Writer-preferring reader/writer lock guarding a repository.

Models:
    CommitResult: Result of commit operations.
    CommitInfo: Metadata about a single commit.
    Signature: Identity recorded on every commit.

Functions:
    open_repository: Open or initialize the repository at a path.
    normalize_key: Validate and normalize a document key.
    key_to_path: Map a document key to its path under the root.
    path_to_key: Map a path under the root back to its key.

Example:
    >>> from gitbase.repository import open_repository
    >>> with open_repository("/srv/store") as repo:
    ...     repo.put("notes/todo.txt", b"buy milk", "add todo")
    ...     repo.revisions("notes/todo.txt")
    ['3f0c...']
"""

from gitbase.models import CommitInfo, CommitResult, Signature
from gitbase.repository._collection import COLLECTION_MARKER, Collection
from gitbase.repository._init import open_repository
from gitbase.repository._lock import ReadWriteLock
from gitbase.repository._paths import key_to_path, normalize_key, path_to_key
from gitbase.repository._repository import Repository
from gitbase.repository._worktree import WorkingTree

__all__ = [
    "COLLECTION_MARKER",
    "Collection",
    "CommitInfo",
    "CommitResult",
    "ReadWriteLock",
    "Repository",
    "Signature",
    "WorkingTree",
    "key_to_path",
    "normalize_key",
    "open_repository",
    "path_to_key",
]
