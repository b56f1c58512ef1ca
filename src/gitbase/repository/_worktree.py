# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""Working tree handle.

This module wraps a dulwich Repo with the git operations the document store
needs: staging every pending change, committing with a fixed identity, and
reading HEAD and recent history.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from dulwich import porcelain
from dulwich.errors import CommitError, HookError, NoIndexPresent, ObjectFormatException

from gitbase.exceptions import VersionControlError
from gitbase.utils._git import commit_to_info, decode_bytes

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dulwich.repo import Repo

    from gitbase.models import CommitInfo, Signature

# Exceptions dulwich raises from staging and committing
_ENGINE_ERRORS: Final = (
    porcelain.Error,
    CommitError,
    HookError,
    NoIndexPresent,
    ObjectFormatException,
    KeyError,
    OSError,
)


class WorkingTree:
    """The live, mutable checkout of a repository.

    Attributes:
        root: The resolved working tree root.
    """

    __slots__ = ("_repo", "_root")

    def __init__(self, repo: Repo, root: Path) -> None:
        """Initialize the working tree handle.

        Args:
            repo: The dulwich repository owning this working tree.
            root: Resolved working tree root.
        """
        self._repo = repo
        self._root = root

    @property
    def root(self) -> Path:
        """Resolved working tree root."""
        return self._root

    # =========================================================================
    # Status
    # =========================================================================

    def pending_changes(self) -> frozenset[str]:
        """Get repository-relative paths that differ from the index.

        Returns:
            Modified, deleted and untracked paths (POSIX, relative).

        Raises:
            VersionControlError: If status cannot be computed.
        """
        try:
            raw = porcelain.status(self._repo, untracked_files="all")
        except _ENGINE_ERRORS as e:
            msg = f"Cannot read working tree status: {e}"
            raise VersionControlError(msg, path=self._root, cause=e) from e

        unstaged = {decode_bytes(p) for p in raw.unstaged}  # pyright: ignore[reportUnknownMemberType,reportUnknownVariableType]
        untracked = {decode_bytes(p) for p in raw.untracked}  # pyright: ignore[reportUnknownMemberType,reportUnknownVariableType]
        return frozenset(unstaged | untracked)

    def staged_changes(self) -> frozenset[str]:
        """Get repository-relative paths staged relative to HEAD.

        Raises:
            VersionControlError: If status cannot be computed.
        """
        try:
            raw = porcelain.status(self._repo, untracked_files="no")
        except _ENGINE_ERRORS as e:
            msg = f"Cannot read working tree status: {e}"
            raise VersionControlError(msg, path=self._root, cause=e) from e

        staged: set[str] = set()
        for change_type in ("add", "delete", "modify"):
            files: list[bytes] = raw.staged.get(change_type, [])  # pyright: ignore[reportUnknownMemberType,reportUnknownVariableType]
            staged.update(decode_bytes(f) for f in files)  # pyright: ignore[reportUnknownArgumentType]
        return frozenset(staged)

    # =========================================================================
    # Staging and Committing
    # =========================================================================

    def stage_all(self, paths: Iterable[str] = ()) -> frozenset[Path]:
        """Stage every pending change in the working tree.

        Pending changes are found through status, which skips untracked
        files matched by ignore rules. `paths` are staged whether or not an
        ignore rule matches them. Present files are added to the index;
        files deleted from the working tree are removed from it.

        Args:
            paths: Repository-relative POSIX paths to stage unconditionally.

        Returns:
            Absolute paths of the staged changes.

        Raises:
            VersionControlError: If the index cannot be updated.
        """
        pending = self.pending_changes().union(paths)
        if not pending:
            return frozenset()

        try:
            self._repo.get_worktree().stage(sorted(pending))
        except _ENGINE_ERRORS as e:
            msg = f"Cannot stage changes: {e}"
            raise VersionControlError(msg, path=self._root, cause=e) from e

        return frozenset(self._root / p for p in pending)

    def commit(self, message: str, signature: Signature) -> str:
        """Create a commit from the current index.

        Args:
            message: Commit message, recorded verbatim.
            signature: Author and committer identity.

        Returns:
            The new commit SHA as a 40-character hex string.

        Raises:
            VersionControlError: If the commit cannot be created.
        """
        identity = signature.to_bytes()
        try:
            sha: bytes = porcelain.commit(
                self._repo,
                message=message.encode("utf-8"),
                author=identity,
                committer=identity,
            )
        except _ENGINE_ERRORS as e:
            msg = f"Cannot create commit: {e}"
            raise VersionControlError(msg, path=self._root, cause=e) from e
        return decode_bytes(sha)

    # =========================================================================
    # History
    # =========================================================================

    def head_sha(self) -> str | None:
        """Get the HEAD commit SHA, or None if there are no commits yet."""
        try:
            return decode_bytes(self._repo.head())
        except KeyError:
            return None

    def last_commits(self, n: int = 10) -> list[CommitInfo]:
        """Get the most recent commits, newest first.

        Args:
            n: Maximum number of commits to return.

        Returns:
            List of CommitInfo. Empty if the repository has no commits.
        """
        head = self.head_sha()
        if head is None:
            return []

        walker = self._repo.get_walker(include=[head.encode("ascii")], max_entries=n)
        return [commit_to_info(entry.commit) for entry in walker]
