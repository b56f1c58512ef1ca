"""gitbase exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class GitbaseError(Exception):
    """Base exception for gitbase errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(GitbaseError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(GitbaseError):
    """Base exception for repository errors."""


class RepositoryPathNotEmptyError(RepositoryError):
    """Raised when initializing over a non-empty directory that is not a repository.

    Attributes:
        path: The directory that could not be initialized.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The directory that could not be initialized.
        """
        super().__init__(message)
        self.path: Path | None = path


class InvalidKeyError(RepositoryError, ValueError):
    """Raised when a document key or collection name escapes the repository.

    Attributes:
        key: The rejected key.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialize with error message and key context.

        Args:
            message: Human-readable error message.
            key: The rejected key.
        """
        super().__init__(message)
        self.key: str | None = key


class StorageError(RepositoryError):
    """Raised when a filesystem operation fails for reasons other than absence.

    Attributes:
        path: The filesystem path being accessed.
        cause: The underlying OSError, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and filesystem context.

        Args:
            message: Human-readable error message.
            path: The filesystem path being accessed.
            cause: The underlying OSError, if any.
        """
        super().__init__(message)
        self.path: Path | None = path
        self.cause: Exception | None = cause


class VersionControlError(RepositoryError):
    """Raised when the git engine fails to open, init, stage or commit.

    Attributes:
        path: The repository root.
        cause: The underlying engine error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and repository context.

        Args:
            message: Human-readable error message.
            path: The repository root.
            cause: The underlying engine error, if any.
        """
        super().__init__(message)
        self.path: Path | None = path
        self.cause: Exception | None = cause


class HistoryQueryError(VersionControlError):
    """Raised when the history backend cannot answer a query.

    Attributes:
        key: The document key that was queried.
        stderr: Diagnostic output from the history tool, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        key: str | None = None,
        stderr: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and query context."""
        super().__init__(message, path=path, cause=cause)
        self.key: str | None = key
        self.stderr: str | None = stderr


# =============================================================================
# Not Found Exceptions
# =============================================================================


class NotFoundError(RepositoryError, KeyError):
    """Base exception for documents, revisions and collections that do not exist."""

    def __str__(self) -> str:
        """Return the message without KeyError's repr quoting."""
        return str(self.args[0]) if self.args else ""


class DocumentNotFoundError(NotFoundError):
    """Raised when a document does not exist in the working tree.

    Attributes:
        key: The document key that was not found.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialize with error message and key context.

        Args:
            message: Human-readable error message.
            key: The document key that was not found.
        """
        super().__init__(message)
        self.key: str | None = key


class RevisionNotFoundError(NotFoundError):
    """Raised when a document does not exist at the requested revision.

    Attributes:
        key: The document key.
        revision: The revision identifier.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        revision: str | None = None,
    ) -> None:
        """Initialize with error message and revision context.

        Args:
            message: Human-readable error message.
            key: The document key.
            revision: The revision identifier.
        """
        super().__init__(message)
        self.key: str | None = key
        self.revision: str | None = revision


class CollectionNotFoundError(NotFoundError):
    """Raised when a named collection does not exist.

    Attributes:
        name: The collection name.
    """

    def __init__(self, message: str, *, name: str | None = None) -> None:
        """Initialize with error message and collection context."""
        super().__init__(message)
        self.name: str | None = name


class CollectionExistsError(RepositoryError):
    """Raised when creating a collection that already exists.

    Attributes:
        name: The collection name.
    """

    def __init__(self, message: str, *, name: str | None = None) -> None:
        """Initialize with error message and collection context."""
        super().__init__(message)
        self.name: str | None = name
