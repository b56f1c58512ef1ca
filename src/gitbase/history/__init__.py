"""Document history backends.

Classes:
    HistoryBackend: Runtime-checkable protocol for history queries.
    GitCliHistory: Backend running `git log --follow` and `git show`.
    NativeHistory: In-process backend on dulwich's commit walker.
    FakeHistory: In-memory backend for tests.

Functions:
    create_history_backend: Build the backend named by configuration.
    parse_log_output: Parse the git CLI backend's log format.
"""

from gitbase.history._factory import create_history_backend
from gitbase.history._fake import FakeHistory
from gitbase.history._git_cli import GitCliHistory, parse_log_output
from gitbase.history._native import NativeHistory
from gitbase.history._protocol import HistoryBackend

__all__ = [
    "FakeHistory",
    "GitCliHistory",
    "HistoryBackend",
    "NativeHistory",
    "create_history_backend",
    "parse_log_output",
]
