# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration sources: TOML files and GITBASE_* environment variables.

Configuration is a table of sections (`author`, `logging`, `history`), each a
flat table of scalar settings. Sources are layered with `merge_sections`.
"""

from __future__ import annotations

import os
import tomllib
from typing import TYPE_CHECKING, Any

from gitbase.config._defaults import ENV_PREFIX
from gitbase.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

_SECTION_SEP = "__"


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.colno) from e


def merge_sections(
    base: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    override: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Layer one configuration source over another.

    Settings of a section present in both are merged key by key, with
    `override` winning. A section that is not a table replaces the base
    section outright, so validation can report it. Neither input is modified.

    Args:
        base: Lower-precedence configuration.
        override: Higher-precedence configuration.

    Returns:
        A new configuration dictionary.
    """
    merged = {name: _copy_section(section) for name, section in base.items()}
    for name, section in override.items():
        current = merged.get(name)
        if isinstance(current, dict) and isinstance(section, dict):
            current.update(section)
        else:
            merged[name] = _copy_section(section)
    return merged


def _copy_section(section: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    return dict(section) if isinstance(section, dict) else section


def parse_env_vars(
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> dict[str, dict[str, str]]:
    """Collect `<PREFIX><SECTION>__<KEY>` variables as configuration.

    Values stay strings; the section models coerce them. Variables without
    the separator (GITBASE_DEBUG) are not configuration and are skipped.

    Args:
        environ: Variables to read. Defaults to the process environment.
        prefix: Variable prefix.

    Returns:
        Section tables built from the matching variables.

    Raises:
        ConfigLoadError: If a variable names an empty section or key.

    Example:
        >>> parse_env_vars({"GITBASE_AUTHOR__NAME": "archivist"})
        {'author': {'name': 'archivist'}}
    """
    source = os.environ if environ is None else environ
    result: dict[str, dict[str, str]] = {}

    for variable, value in source.items():
        if not variable.startswith(prefix):
            continue
        section, sep, key = variable[len(prefix) :].partition(_SECTION_SEP)
        if not sep:
            continue
        if not section or not key:
            msg = f"Malformed configuration variable: {variable}"
            raise ConfigLoadError(msg)
        result.setdefault(section.lower(), {})[key.lower()] = value

    return result
