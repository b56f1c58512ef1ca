"""Construction of the configured history backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from gitbase.config import HistoryBackendName
from gitbase.history._git_cli import GitCliHistory
from gitbase.history._native import NativeHistory

if TYPE_CHECKING:
    from gitbase.config import HistoryConfig
    from gitbase.history._protocol import HistoryBackend


def create_history_backend(config: HistoryConfig | None = None) -> HistoryBackend:
    """Create the history backend selected by the history section.

    Args:
        config: History section. Defaults to the git CLI backend.

    Returns:
        A HistoryBackend instance.
    """
    if config is None:
        return GitCliHistory()

    match config.backend:
        case HistoryBackendName.GIT:
            return GitCliHistory(config.git_executable)
        case HistoryBackendName.NATIVE:
            return NativeHistory()
        case _:  # pragma: no cover
            assert_never(config.backend)
