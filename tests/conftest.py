"""Shared test fixtures for gitbase tests."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from gitbase.repository import Repository, open_repository
from gitbase.utils._logging import _create_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Path of the log file written by the test logger."""
    return tmp_path / "logs" / "gitbase.log"


@pytest.fixture
def logger(log_file: Path) -> FilteringBoundLogger:
    """A debug-level JSON logger writing to log_file."""
    return _create_logger(str(log_file), log_level=10)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location of the repository under test (not yet created)."""
    return tmp_path / "store"


@pytest.fixture
def repository(
    store_path: Path, logger: FilteringBoundLogger
) -> Iterator[Repository]:
    """A freshly initialized repository."""
    with open_repository(store_path, logger=logger) as repo:
        yield repo
