"""gitbase configuration.

This module provides the public API for gitbase configuration: loading from
TOML files and GITBASE_* environment variables, validation, and typed access.

Example:
    >>> from gitbase.config import Config
    >>> config = Config.load(Path("gitbase.toml"))
    >>> config.author.email
    'git@gitbase'
"""

from gitbase.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

from ._defaults import DEFAULT_CONFIG, ENV_PREFIX
from ._loader import merge_sections, parse_env_vars, read_toml_file
from ._models import (
    AuthorConfig,
    Config,
    HistoryBackendName,
    HistoryConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "AuthorConfig",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "HistoryBackendName",
    "HistoryConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "merge_sections",
    "parse_env_vars",
    "read_toml_file",
]
