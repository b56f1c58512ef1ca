# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration models with typed access.

This module provides the section models and the Config container that is
passed to a repository at construction time.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from gitbase.config._defaults import DEFAULT_CONFIG
from gitbase.config._loader import merge_sections, parse_env_vars, read_toml_file
from gitbase.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self

T = TypeVar("T")


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class HistoryBackendName(StrEnum):
    """Available history backends."""

    GIT = "git"
    NATIVE = "native"


class AuthorConfig(BaseModel):
    """Commit identity section.

    Attributes:
        name: Author and committer name recorded on every commit.
        email: Author and committer email recorded on every commit.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(default="gitbase", min_length=1)
    email: str = Field(default="git@gitbase", min_length=1)


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class HistoryConfig(BaseModel):
    """History backend section.

    Attributes:
        backend: Which history backend answers history and revision queries.
        git_executable: The git binary used by the git backend.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    backend: HistoryBackendName = HistoryBackendName.GIT
    git_executable: str = Field(default="git", min_length=1)


def _validate_section[ModelT: BaseModel](
    model: type[ModelT],
    section: str,
    data: Any,
    source: str | None,
) -> ModelT:
    """Validate one configuration section.

    Args:
        model: The pydantic model for the section.
        section: Section name, used to build the dotted key in errors.
        data: The raw section value.
        source: Where the value came from, for error messages.

    Returns:
        The validated section model.

    Raises:
        ConfigValidationError: If the section does not validate.
    """
    if not isinstance(data, dict):
        msg = f"Configuration section '{section}' must be a table"
        raise ConfigValidationError(
            msg, key=section, value=data, expected="table", source=source
        )

    try:
        return model.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        key = f"{section}.{field}" if field else section
        msg = f"Invalid configuration value for '{key}': {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=error["msg"],
            source=source,
        ) from e


class Config(BaseModel):
    """Configuration container with typed access.

    Immutable. Use the factory methods rather than the constructor.

    Example:
        >>> config = Config.from_dict({"author": {"name": "archivist"}})
        >>> config.author.name
        'archivist'
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _source: str | None = PrivateAttr(default=None)
    _author: AuthorConfig = PrivateAttr(default_factory=AuthorConfig)
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _history: HistoryConfig = PrivateAttr(default_factory=HistoryConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _source: str | None = None,
    ) -> None:
        """Initialize configuration container.

        Args:
            _data: The complete merged configuration dictionary.
            _source: Description of where the configuration came from.

        Raises:
            ConfigValidationError: If any section fails validation.
        """
        super().__init__()
        data = _data if _data is not None else merge_sections(DEFAULT_CONFIG, {})
        self._data = data
        self._source = _source
        self._author = _validate_section(
            AuthorConfig, "author", data.get("author", {}), _source
        )
        self._logging = _validate_section(
            LoggingConfig, "logging", data.get("logging", {}), _source
        )
        self._history = _validate_section(
            HistoryConfig, "history", data.get("history", {}), _source
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Configuration object from the dictionary.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return cls(_data=merge_sections(DEFAULT_CONFIG, data))

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to the TOML config file.

        Returns:
            Configuration object from the specified file merged over defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        data = read_toml_file(path)
        return cls(_data=merge_sections(DEFAULT_CONFIG, data), _source=str(path))

    @classmethod
    def load(cls, path: Path | None = None, *, include_env: bool = True) -> Self:
        """Load merged configuration from all sources.

        Sources merge in precedence order: defaults, then the TOML file (if
        given and present), then GITBASE_* environment variables.

        Args:
            path: Optional TOML config file. A missing file is skipped.
            include_env: Include environment variables as a source.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If the config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        merged = merge_sections(DEFAULT_CONFIG, {})
        sources: list[str] = ["default"]

        if path is not None and path.exists():
            merged = merge_sections(merged, read_toml_file(path))
            sources.append(str(path))

        if include_env:
            env_values = parse_env_vars()
            if env_values:
                merged = merge_sections(merged, env_values)
                sources.append("env")

        return cls(_data=merged, _source=", ".join(sources))

    @property
    def source(self) -> str | None:
        """Return a description of the sources behind this configuration."""
        return self._source

    @property
    def author(self) -> AuthorConfig:
        """Return the commit identity section."""
        return self._author

    @property
    def logging(self) -> LoggingConfig:
        """Return the logging configuration section."""
        return self._logging

    @property
    def history(self) -> HistoryConfig:
        """Return the history backend section."""
        return self._history

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, default: T) -> T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., "author.email").
            default: Default value if key not found.

        Returns:
            The configuration value, or default if not found.

        Examples:
            >>> config.get("history.backend")
            'git'
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data

        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the merged configuration dictionary."""
        return merge_sections(self._data, {})

    def to_toml(self) -> str:
        """Serialize the merged configuration as TOML."""
        return tomli_w.dumps(self.to_dict())
