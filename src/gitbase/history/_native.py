# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""History backend implemented on dulwich's commit walker.

Runs in-process with no git executable. Rename following relies on dulwich's
rename detector, which may pair files differently than `git log --follow`.
"""

from pathlib import Path

from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.object_store import tree_lookup_path
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from gitbase.exceptions import HistoryQueryError, RevisionNotFoundError
from gitbase.models import CommitInfo
from gitbase.utils._git import commit_to_info


class NativeHistory:
    """History backend walking the commit graph with dulwich."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NativeHistory()"

    def resolve_history(self, root: Path, key: str) -> list[CommitInfo]:
        """Walk from HEAD, keeping commits that touched the key.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.

        Returns:
            CommitInfo records, newest first. Empty for a repository
            without commits.

        Raises:
            HistoryQueryError: If the root is not a repository.
        """
        with _open(root, key) as repo:
            try:
                head = repo.head()
            except KeyError:
                return []

            walker = repo.get_walker(
                include=[head],
                paths=[key.encode("utf-8")],
                follow=True,
            )
            return [commit_to_info(entry.commit) for entry in walker]

    def show_at_revision(self, root: Path, key: str, revision: str) -> bytes:
        """Look the key up in the tree of the given commit.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.
            revision: Full commit SHA or ref name such as "HEAD".

        Returns:
            The blob content.

        Raises:
            RevisionNotFoundError: If the commit or the key in its tree
                does not exist.
            HistoryQueryError: If the root is not a repository.
        """
        with _open(root, key) as repo:
            try:
                commit = repo[revision.encode("ascii")]
            except (KeyError, ValueError, UnicodeEncodeError) as e:
                msg = f"Unknown revision: {revision}"
                raise RevisionNotFoundError(msg, key=key, revision=revision) from e

            if not isinstance(commit, Commit):
                msg = f"Revision is not a commit: {revision}"
                raise RevisionNotFoundError(msg, key=key, revision=revision)

            try:
                _, blob_sha = tree_lookup_path(
                    repo.__getitem__, commit.tree, key.encode("utf-8")
                )
            except (KeyError, NotTreeError) as e:
                msg = f"{key} does not exist at revision {revision}"
                raise RevisionNotFoundError(msg, key=key, revision=revision) from e

            blob = repo[blob_sha]
            if not isinstance(blob, Blob):
                msg = f"{key} is not a file at revision {revision}"
                raise RevisionNotFoundError(msg, key=key, revision=revision)

            return blob.data


def _open(root: Path, key: str) -> Repo:
    """Open the repository at root for a single query.

    Raises:
        HistoryQueryError: If root is not a git repository.
    """
    try:
        return Repo(str(root))
    except NotGitRepository as e:
        msg = f"Not a git repository: {root}"
        raise HistoryQueryError(msg, path=root, key=key, cause=e) from e
