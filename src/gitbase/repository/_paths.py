"""Mapping between document keys and working tree paths."""

from pathlib import Path, PurePosixPath
from typing import Final

from gitbase.exceptions import InvalidKeyError

_GIT_DIR: Final = ".git"


def normalize_key(key: str) -> str:
    """Validate a document key and return its normalized form.

    Keys are relative POSIX paths. Redundant "." components and repeated
    slashes are collapsed.

    Args:
        key: The document key.

    Returns:
        The normalized key.

    Raises:
        InvalidKeyError: If the key is empty, absolute, contains "..",
            or addresses the .git directory.
    """
    if not key or not key.strip():
        msg = "Document key must not be empty"
        raise InvalidKeyError(msg, key=key)

    if "\x00" in key:
        msg = f"Document key contains a NUL byte: {key!r}"
        raise InvalidKeyError(msg, key=key)

    pure = PurePosixPath(key)
    if pure.is_absolute():
        msg = f"Document key must be relative: {key}"
        raise InvalidKeyError(msg, key=key)

    parts = pure.parts
    if not parts:
        msg = f"Document key does not name a file: {key}"
        raise InvalidKeyError(msg, key=key)

    if ".." in parts:
        msg = f"Document key must not contain '..': {key}"
        raise InvalidKeyError(msg, key=key)

    if parts[0] == _GIT_DIR:
        msg = f"Document key addresses repository metadata: {key}"
        raise InvalidKeyError(msg, key=key)

    return str(pure)


def key_to_path(root: Path, key: str) -> Path:
    """Map a document key to its absolute location under the repository root.

    Args:
        root: Resolved repository root.
        key: The document key.

    Returns:
        Absolute path of the document.

    Raises:
        InvalidKeyError: If the key is invalid or resolves outside the root.
    """
    path = root.joinpath(*PurePosixPath(normalize_key(key)).parts)

    # Symlinks inside the working tree must not lead out of it
    if not path.resolve().is_relative_to(root):
        msg = f"Document key resolves outside the repository: {key}"
        raise InvalidKeyError(msg, key=key)

    return path


def path_to_key(root: Path, path: Path) -> str:
    """Map an absolute path under the repository root back to its key.

    Args:
        root: Resolved repository root.
        path: Absolute path within the root.

    Returns:
        The document key in POSIX form.

    Raises:
        InvalidKeyError: If the path is not within the root.
    """
    try:
        relative = path.relative_to(root)
    except ValueError as e:
        msg = f"Path is outside the repository: {path}"
        raise InvalidKeyError(msg, key=str(path)) from e
    return relative.as_posix()
