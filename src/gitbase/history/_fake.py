# ruff: noqa: TC003  # Path needed at runtime for method signatures
"""Fake history backend for testing.

This module provides a FakeHistory class that implements HistoryBackend
without touching git, for tests of code that consumes history.
"""

from dataclasses import dataclass, field
from pathlib import Path

from gitbase.exceptions import RevisionNotFoundError
from gitbase.models import CommitInfo


@dataclass(slots=True)
class FakeHistory:
    """In-memory history backend.

    Histories and historical contents are seeded directly. Setting `error`
    makes every call raise it, to exercise failure paths.

    Example:
        >>> fake = FakeHistory()
        >>> fake.record("notes.txt", commit, b"v1")
        >>> fake.resolve_history(Path("/repo"), "notes.txt")[0].sha == commit.sha
        True
    """

    histories: dict[str, list[CommitInfo]] = field(default_factory=dict)
    contents: dict[tuple[str, str], bytes] = field(default_factory=dict)
    error: Exception | None = None
    calls: list[tuple[str, Path, str]] = field(default_factory=list)

    def record(self, key: str, commit: CommitInfo, content: bytes) -> None:
        """Prepend a commit to a key's history along with its content."""
        self.histories.setdefault(key, []).insert(0, commit)
        self.contents[key, commit.sha] = content

    def resolve_history(self, root: Path, key: str) -> list[CommitInfo]:
        """Return the seeded history for a key, newest first."""
        self.calls.append(("resolve_history", root, key))
        if self.error is not None:
            raise self.error
        return list(self.histories.get(key, []))

    def show_at_revision(self, root: Path, key: str, revision: str) -> bytes:
        """Return seeded content for a key at a revision.

        Raises:
            RevisionNotFoundError: If nothing was seeded for the pair.
        """
        self.calls.append(("show_at_revision", root, key))
        if self.error is not None:
            raise self.error
        try:
            return self.contents[key, revision]
        except KeyError as e:
            msg = f"{key} does not exist at revision {revision}"
            raise RevisionNotFoundError(msg, key=key, revision=revision) from e
