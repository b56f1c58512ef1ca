"""Unit tests for logging utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from gitbase.config import LoggingConfig
from gitbase.utils import create_logger
from gitbase.utils._logging import _create_logger, _log_level_from_string

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


class TestCreateLoggerInternal:
    def test_creates_log_directory_if_missing(self, fs: FakeFilesystem) -> None:
        log_path = Path("/logs/gitbase.log")
        assert not log_path.parent.exists()

        _ = _create_logger(str(log_path))

        assert log_path.parent.exists()

    def test_default_format_is_json(self, fs: FakeFilesystem) -> None:
        logger = _create_logger("/logs/gitbase.log")

        logger.info("commit_created", sha="abc")

        entry = json.loads(Path("/logs/gitbase.log").read_text().splitlines()[-1])
        assert entry["event"] == "commit_created"
        assert entry["sha"] == "abc"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_text_format(self, fs: FakeFilesystem) -> None:
        logger = _create_logger("/logs/gitbase.log", log_format="text")

        logger.info("commit_created", sha="abc")

        content = Path("/logs/gitbase.log").read_text()
        assert "commit_created" in content
        assert "sha=abc" in content

    def test_filters_below_level(self, fs: FakeFilesystem) -> None:
        logger = _create_logger("/logs/gitbase.log", log_level=logging.WARNING)

        logger.info("quiet")
        logger.warning("loud")

        content = Path("/logs/gitbase.log").read_text()
        assert "quiet" not in content
        assert "loud" in content

    def test_writes_to_stderr_without_file(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = _create_logger(None)

        logger.info("to_stderr")

        assert "to_stderr" in capsys.readouterr().err


class TestLogLevelFromString:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
            ("bogus", logging.INFO),
        ],
    )
    def test_maps_names(
        self, name: str, expected: int, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GITBASE_DEBUG", raising=False)

        assert _log_level_from_string(name) == expected

    def test_debug_env_forces_debug(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITBASE_DEBUG", "1")

        assert _log_level_from_string("error") == logging.DEBUG
        assert _log_level_from_string("error", respect_env=False) == logging.ERROR


class TestCreateLogger:
    def test_uses_config_file_and_binds_context(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GITBASE_DEBUG", raising=False)
        config = LoggingConfig.model_validate(
            {"level": "debug", "format": "json", "file": "/var/log/gitbase.log"}
        )

        logger = create_logger(config, root="/srv/store")
        logger.debug("repository_opened")

        entry = json.loads(Path("/var/log/gitbase.log").read_text().splitlines()[-1])
        assert entry["event"] == "repository_opened"
        assert entry["root"] == "/srv/store"

    def test_config_level_filters(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GITBASE_DEBUG", raising=False)
        config = LoggingConfig.model_validate(
            {"level": "error", "file": "/var/log/gitbase.log"}
        )

        logger = create_logger(config)
        logger.info("skipped")
        logger.error("kept")

        content = Path("/var/log/gitbase.log").read_text()
        assert "skipped" not in content
        assert "kept" in content
