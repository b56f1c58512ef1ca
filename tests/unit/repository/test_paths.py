"""Unit tests for document key mapping."""

from pathlib import Path

import pytest

from gitbase.exceptions import InvalidKeyError
from gitbase.repository import key_to_path, normalize_key, path_to_key


class TestNormalizeKey:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("notes.txt", "notes.txt"),
            ("a/b/c.json", "a/b/c.json"),
            ("a//b", "a/b"),
            ("./a/./b", "a/b"),
            ("a/b/", "a/b"),
            ("dir\\file", "dir\\file"),
            (".gitignore", ".gitignore"),
            ("docs/.git", "docs/.git"),
        ],
    )
    def test_accepts_relative_keys(self, key: str, expected: str) -> None:
        assert normalize_key(key) == expected

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "   ",
            "/etc/passwd",
            "..",
            "../escape",
            "a/../../b",
            "a/../b",
            ".",
            "./",
            ".git",
            ".git/config",
            "bad\x00key",
        ],
    )
    def test_rejects_invalid_keys(self, key: str) -> None:
        with pytest.raises(InvalidKeyError) as exc_info:
            _ = normalize_key(key)

        assert exc_info.value.key == key


class TestKeyToPath:
    def test_joins_under_root(self, tmp_path: Path) -> None:
        root = tmp_path.resolve()

        assert key_to_path(root, "a/b.txt") == root / "a" / "b.txt"

    def test_rejects_symlink_escaping_root(self, tmp_path: Path) -> None:
        root = (tmp_path / "root").resolve()
        root.mkdir()
        outside = tmp_path / "outside"
        outside.mkdir()
        (root / "link").symlink_to(outside, target_is_directory=True)

        with pytest.raises(InvalidKeyError):
            _ = key_to_path(root, "link/secret.txt")

    def test_allows_symlink_inside_root(self, tmp_path: Path) -> None:
        root = tmp_path.resolve()
        (root / "real").mkdir()
        (root / "alias").symlink_to(root / "real", target_is_directory=True)

        assert key_to_path(root, "alias/x.txt") == root / "alias" / "x.txt"


class TestPathToKey:
    def test_inverse_of_key_to_path(self, tmp_path: Path) -> None:
        root = tmp_path.resolve()

        assert path_to_key(root, key_to_path(root, "a/b/c.txt")) == "a/b/c.txt"

    def test_rejects_path_outside_root(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidKeyError):
            _ = path_to_key(tmp_path / "root", tmp_path / "elsewhere" / "x")
