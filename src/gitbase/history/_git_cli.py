# ruff: noqa: TC003  # Path needed at runtime for method bodies
"""History backend that shells out to the git command line.

`git log --follow` is the only rename-aware, path-filtered history walk
available, so this is the default backend.
"""

import os
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Final

from gitbase.exceptions import HistoryQueryError, RevisionNotFoundError
from gitbase.models import CommitInfo

_FIELD_SEP: Final = "\x1f"
_RECORD_SEP: Final = "\x1e"

# sha, parents, author name, author email, strict ISO author date, raw body
_LOG_FORMAT: Final = "%H%x1f%P%x1f%an%x1f%ae%x1f%aI%x1f%B%x1e"
_LOG_FIELDS: Final = 6

# stderr fragments git emits when a revision or a path in it does not exist
_NOT_FOUND_MARKERS: Final = (
    "does not exist in",
    "exists on disk, but not in",
    "invalid object name",
    "bad revision",
    "unknown revision",
    "not a valid object name",
    "bad object",
)

# Inherited variables that change which repository git reads or how it
# matches paths
_REPOSITORY_ENV_VARS: Final = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
    "GIT_COMMON_DIR",
    "GIT_NAMESPACE",
    "GIT_GLOB_PATHSPECS",
    "GIT_NOGLOB_PATHSPECS",
    "GIT_ICASE_PATHSPECS",
)


class GitCliHistory:
    """History backend backed by the git executable.

    Attributes:
        git_executable: Name or path of the git binary.

    Example:
        >>> backend = GitCliHistory()
        >>> commits = backend.resolve_history(Path("/srv/store"), "docs/readme.md")
        >>> root = Path("/srv/store")
        >>> backend.show_at_revision(root, "docs/readme.md", commits[-1].sha)
        b'first version'
    """

    __slots__ = ("git_executable",)

    def __init__(self, git_executable: str = "git") -> None:
        self.git_executable = git_executable

    def __repr__(self) -> str:
        return f"GitCliHistory(git_executable={self.git_executable!r})"

    def resolve_history(self, root: Path, key: str) -> list[CommitInfo]:
        """Run `git log --follow` for a key.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.

        Returns:
            CommitInfo records, newest first.

        Raises:
            HistoryQueryError: If git is missing or exits non-zero.
        """
        result = self._run(
            root,
            key,
            ["log", "--follow", f"--format={_LOG_FORMAT}", "--", key],
        )
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            msg = f"git log failed for {key}: {stderr}"
            raise HistoryQueryError(msg, path=root, key=key, stderr=stderr)

        return parse_log_output(result.stdout.decode("utf-8", errors="replace"))

    def show_at_revision(self, root: Path, key: str, revision: str) -> bytes:
        """Run `git show <revision>:<key>`.

        Args:
            root: Repository root directory.
            key: Document key relative to the root.
            revision: Commit identifier.

        Returns:
            The raw document bytes at that revision.

        Raises:
            RevisionNotFoundError: If the revision or the key in it is unknown.
            HistoryQueryError: If git is missing or fails for another reason.
        """
        if not revision or revision.startswith("-") or ":" in revision:
            msg = f"Invalid revision: {revision!r}"
            raise RevisionNotFoundError(msg, key=key, revision=revision)

        result = self._run(root, key, ["show", f"{revision}:{key}"])
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            if any(marker in stderr.lower() for marker in _NOT_FOUND_MARKERS):
                msg = f"{key} does not exist at revision {revision}"
                raise RevisionNotFoundError(msg, key=key, revision=revision)
            msg = f"git show failed for {key} at {revision}: {stderr}"
            raise HistoryQueryError(msg, path=root, key=key, stderr=stderr)

        return result.stdout

    def _run(
        self, root: Path, key: str, args: list[str]
    ) -> subprocess.CompletedProcess[bytes]:
        """Execute git in the repository root and capture raw output.

        Raises:
            HistoryQueryError: If the git executable cannot be started.
        """
        cmd = [self.git_executable, *args]
        try:
            return subprocess.run(  # noqa: S603
                cmd,
                cwd=str(root),
                env=git_environment(),
                capture_output=True,
                check=False,
            )
        except OSError as e:
            msg = f"Cannot run {self.git_executable}: {e}"
            raise HistoryQueryError(msg, path=root, key=key, cause=e) from e


def parse_log_output(output: str) -> list[CommitInfo]:
    """Parse output produced with the backend's log format.

    Args:
        output: Decoded stdout of `git log`.

    Returns:
        CommitInfo records in output order.

    Raises:
        HistoryQueryError: If a record is malformed.
    """
    commits: list[CommitInfo] = []

    for raw_record in output.split(_RECORD_SEP):
        record = raw_record.lstrip("\n")
        if not record:
            continue

        fields = record.split(_FIELD_SEP, _LOG_FIELDS - 1)
        if len(fields) != _LOG_FIELDS:
            msg = f"Malformed git log record: {record[:80]!r}"
            raise HistoryQueryError(msg)

        sha, parents, name, email, date, message = fields
        try:
            timestamp = datetime.fromisoformat(date)
        except ValueError as e:
            msg = f"Malformed commit date {date!r} in {sha}"
            raise HistoryQueryError(msg, cause=e) from e

        commits.append(
            CommitInfo(
                sha=sha,
                message=message,
                author_name=name,
                author_email=email,
                timestamp=timestamp,
                parent_shas=tuple(parents.split()),
            )
        )

    return commits


def git_environment() -> dict[str, str]:
    """Build the environment git runs with.

    Messages are forced to the C locale so not-found errors can be matched,
    keys are taken as literal paths rather than glob patterns, and variables
    that point git at another repository are dropped.
    """
    env = {
        name: value
        for name, value in os.environ.items()
        if name not in _REPOSITORY_ENV_VARS
    }
    env["LC_ALL"] = "C"
    env["LANGUAGE"] = "C"
    env["GIT_LITERAL_PATHSPECS"] = "1"
    return env
