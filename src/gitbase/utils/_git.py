"""Common git helper functions.

Shared by the working tree and the native history backend: byte/string
conversion and translation of dulwich commit objects into CommitInfo.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, cast

from gitbase.models import CommitInfo

if TYPE_CHECKING:
    from dulwich.objects import Commit


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def parse_identity(identity: bytes) -> tuple[str, str]:
    """Split a git identity into name and email.

    Args:
        identity: Identity bytes in "Name <email>" format.

    Returns:
        Tuple of (name, email). Email is empty if the identity has none.
    """
    text = identity.decode("utf-8", errors="replace")
    if "<" in text and text.endswith(">"):
        name, email = text.rsplit("<", 1)
        return name.strip(), email.rstrip(">")
    return text, ""


def commit_timestamp(seconds: int, tz_offset: int) -> datetime:
    """Convert a git timestamp and offset to an aware datetime.

    Args:
        seconds: Unix timestamp.
        tz_offset: Offset in seconds east of UTC, as dulwich reports it.

    Returns:
        Datetime in the commit's own timezone.
    """
    return datetime.fromtimestamp(seconds, tz=timezone(timedelta(seconds=tz_offset)))


def commit_to_info(commit: Commit) -> CommitInfo:
    """Convert a dulwich commit to CommitInfo.

    Args:
        commit: The dulwich Commit object.

    Returns:
        CommitInfo populated from the commit data.
    """
    author_name, author_email = parse_identity(cast("bytes", commit.author))
    return CommitInfo(
        sha=decode_bytes(commit.id),
        message=cast("bytes", commit.message).decode("utf-8", errors="replace"),
        author_name=author_name,
        author_email=author_email,
        timestamp=commit_timestamp(
            cast("int", commit.author_time), cast("int", commit.author_timezone)
        ),
        parent_shas=tuple(decode_bytes(p) for p in commit.parents),
    )
