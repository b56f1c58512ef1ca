# ruff: noqa: TC003  # Path and datetime needed at runtime for dataclass fields
"""Document store models.

This module defines data structures for commit identity, commit results and
history records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Self

    from gitbase.config import AuthorConfig


@dataclass(frozen=True, slots=True)
class Signature:
    """Identity recorded as author and committer of every commit.

    Attributes:
        name: Identity name.
        email: Identity email.
    """

    name: str
    email: str

    @classmethod
    def from_config(cls, author: AuthorConfig) -> Self:
        """Build a signature from the author configuration section."""
        return cls(name=author.name, email=author.email)

    def to_bytes(self) -> bytes:
        """Format as git identity bytes, "Name <email>"."""
        return f"{self.name} <{self.email}>".encode()


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Result of a commit operation.

    Attributes:
        sha: Commit SHA hex string, None if no commit was created.
        files: Files included in commit (absolute paths).
        no_changes: True if the tree is unchanged. Either no commit was
            created (sha is None) or the commit only records a message.
    """

    sha: str | None
    files: frozenset[Path]
    no_changes: bool


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """One entry in a document's history.

    Attributes:
        sha: Full 40-character commit SHA hex string (the revision id).
        message: Complete commit message.
        author_name: Author name from commit.
        author_email: Author email from commit.
        timestamp: Author timestamp, timezone-aware.
        parent_shas: SHA hex strings of parent commits (empty for initial commit).
    """

    sha: str
    message: str
    author_name: str
    author_email: str
    timestamp: datetime
    parent_shas: tuple[str, ...] = ()
