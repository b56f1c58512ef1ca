"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "author": {
        "name": "gitbase",
        "email": "git@gitbase",
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
    "history": {
        "backend": "git",
        "git_executable": "git",
    },
}

# Environment variable prefix for configuration overrides
ENV_PREFIX = "GITBASE_"
