"""Named collections of documents.

A collection is a subdirectory of the repository root carrying a marker file.
The marker records why the collection was created and gives git something to
track before the first document arrives.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Final

import orjson

from gitbase.exceptions import InvalidKeyError, StorageError
from gitbase.repository._paths import normalize_key

if TYPE_CHECKING:
    from pathlib import Path

    from gitbase.models import CommitInfo, CommitResult
    from gitbase.repository._repository import Repository

COLLECTION_MARKER: Final = ".collection"


def validate_collection_name(name: str) -> str:
    """Validate a collection name.

    Args:
        name: Proposed collection name.

    Returns:
        The name, unchanged.

    Raises:
        InvalidKeyError: If the name is not a single, visible path component.
    """
    normalized = normalize_key(name)
    if normalized != name or len(PurePosixPath(name).parts) != 1:
        msg = f"Collection name must be a single path component: {name!r}"
        raise InvalidKeyError(msg, key=name)
    if name.startswith("."):
        msg = f"Collection name must not start with '.': {name!r}"
        raise InvalidKeyError(msg, key=name)
    return name


def render_marker(name: str, reason: str) -> bytes:
    """Serialize the marker file written when a collection is created."""
    return orjson.dumps(
        {
            "name": name,
            "reason": reason,
            "created_at": datetime.now(UTC).isoformat(),
        },
        option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS,
    )


class Collection:
    """A named sub-store of a repository.

    Document names are keys relative to the collection directory. Every
    operation delegates to the owning repository, so writes are committed
    and locked exactly like top-level documents.

    Example:
        >>> programs = repo.use("programs")
        >>> programs.put("hello.lua", b"print('hi')", "add hello")
        >>> programs.fetch("hello.lua")
        b"print('hi')"
    """

    __slots__ = ("_name", "_repository")

    def __init__(self, repository: Repository, name: str) -> None:
        self._repository = repository
        self._name = validate_collection_name(name)

    def __repr__(self) -> str:
        return f"Collection(name={self._name!r}, root={str(self._repository.root)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return (self._name, self._repository.root) == (
            other._name,
            other._repository.root,
        )

    def __hash__(self) -> int:
        return hash((self._name, self._repository.root))

    @property
    def name(self) -> str:
        """Collection name."""
        return self._name

    @property
    def repository(self) -> Repository:
        """Owning repository."""
        return self._repository

    @property
    def path(self) -> Path:
        """Absolute directory of the collection."""
        return self._repository.root / self._name

    def key(self, document: str) -> str:
        """Translate a document name to a repository key.

        Raises:
            InvalidKeyError: If the name is invalid or is the marker file.
        """
        normalized = normalize_key(document)
        if normalized == COLLECTION_MARKER:
            msg = f"Document name is reserved: {document!r}"
            raise InvalidKeyError(msg, key=document)
        return f"{self._name}/{normalized}"

    def metadata(self) -> dict[str, object]:
        """Read the marker written when the collection was created.

        Raises:
            StorageError: If the marker is unreadable or not a JSON object.
        """
        marker = self.path / COLLECTION_MARKER
        try:
            data = orjson.loads(marker.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            msg = f"Cannot read collection marker: {marker}"
            raise StorageError(msg, path=marker, cause=e) from e
        if not isinstance(data, dict):
            msg = f"Collection marker is not a JSON object: {marker}"
            raise StorageError(msg, path=marker)
        return data

    def documents(self) -> list[str]:
        """List document names in the collection, sorted."""
        prefix = f"{self._name}/"
        keys = self._repository.documents(self._name)
        return [key.removeprefix(prefix) for key in keys]

    def put(self, document: str, content: bytes, reason: str) -> CommitResult:
        """Write a document and commit it. See Repository.put."""
        return self._repository.put(self.key(document), content, reason)

    def fetch(self, document: str) -> bytes:
        """Read a document's current content. See Repository.fetch."""
        return self._repository.fetch(self.key(document))

    def remove(self, document: str, reason: str) -> CommitResult:
        """Delete a document and commit the deletion. See Repository.remove."""
        return self._repository.remove(self.key(document), reason)

    def fetch_revision(self, document: str, revision: str) -> bytes:
        """Read a document as of a revision. See Repository.fetch_revision."""
        return self._repository.fetch_revision(self.key(document), revision)

    def history(self, document: str) -> list[CommitInfo]:
        """Commits that touched a document, newest first."""
        return self._repository.history(self.key(document))

    def revisions(self, document: str) -> list[str]:
        """Revision ids of a document, newest first."""
        return self._repository.revisions(self.key(document))
