"""Opening and initializing document repositories."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from gitbase.config import Config
from gitbase.exceptions import RepositoryPathNotEmptyError, VersionControlError
from gitbase.history._factory import create_history_backend
from gitbase.models import Signature
from gitbase.repository._lock import ReadWriteLock
from gitbase.repository._repository import Repository
from gitbase.repository._worktree import WorkingTree
from gitbase.utils import create_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from gitbase.history._protocol import HistoryBackend

_DIR_MODE: Final = 0o755


def open_repository(
    base_path: Path | str,
    *,
    config: Config | None = None,
    history: HistoryBackend | None = None,
    logger: FilteringBoundLogger | None = None,
    lock: ReadWriteLock | None = None,
) -> Repository:
    """Open the document repository at a path, initializing it if needed.

    The directory is created if missing. An existing git repository is
    opened as is. An empty directory is initialized as a new repository;
    a non-empty directory that is not a repository is refused.

    Args:
        base_path: Repository root directory.
        config: Configuration. Defaults to built-in defaults.
        history: History backend. Defaults to the one named by config.
        logger: Logger. Defaults to one built from the logging section.
        lock: Read/write lock. A fresh lock by default.

    Returns:
        The opened Repository.

    Raises:
        OSError: If the directory cannot be created or listed.
        RepositoryPathNotEmptyError: If the directory has content but is not
            a git repository.
        VersionControlError: If git cannot open or initialize the repository.
    """
    if config is None:
        config = Config()

    path = Path(base_path)
    path.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
    root = path.resolve()

    if logger is None:
        logger = create_logger(config.logging, root=str(root))
    else:
        logger = logger.bind(root=str(root))

    repo = _open_or_init(root, logger)
    if repo.bare:
        repo.close()
        msg = f"Repository has no working tree: {root}"
        raise VersionControlError(msg, path=root)

    logger.debug("repository_opened", head=_head(repo))
    return Repository(
        repo=repo,
        worktree=WorkingTree(repo, root),
        signature=Signature.from_config(config.author),
        history=(
            history if history is not None else create_history_backend(config.history)
        ),
        lock=lock if lock is not None else ReadWriteLock(),
        logger=logger,
    )


def _open_or_init(root: Path, logger: FilteringBoundLogger) -> Repo:
    try:
        return Repo(str(root))
    except NotGitRepository:
        pass

    if any(root.iterdir()):
        msg = f"Directory is not empty and not a git repository: {root}"
        raise RepositoryPathNotEmptyError(msg, path=root)

    try:
        repo = Repo.init(str(root))
    except OSError as e:
        msg = f"Cannot initialize repository at {root}: {e}"
        raise VersionControlError(msg, path=root, cause=e) from e

    logger.info("repository_initialized")
    return repo


def _head(repo: Repo) -> str | None:
    try:
        return repo.head().decode("ascii")
    except KeyError:
        return None
