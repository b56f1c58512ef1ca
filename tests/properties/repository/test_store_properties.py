"""Property-based tests for document store invariants.

- Key normalization: valid keys normalize idempotently and stay under the root
- Traversal rejection: keys containing ".." never map to a path
- Round trip: the latest put is what fetch and the newest revision return
- Versioning: every put of new content adds exactly one revision, and every
  put or remove adds exactly one commit
- Ignore rules: .gitignore patterns never keep a document out of a commit
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from hypothesis import HealthCheck, given, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from gitbase.exceptions import InvalidKeyError
from gitbase.repository import Repository, key_to_path, normalize_key, open_repository
from gitbase.utils._logging import _create_logger

# =============================================================================
# Strategies
# =============================================================================

# Any character a key component may hold, including glob metacharacters,
# spaces, backslashes and non-ASCII. Uppercase is left out so keys cannot
# collide on case-insensitive filesystems; control characters are left out.
key_char = st.characters(
    exclude_categories=("Cs", "Cc", "Lu", "Lt"),
    exclude_characters="/",
)

component = st.text(alphabet=key_char, min_size=1, max_size=8)

# "d-" directories and "f-" files never collide; ".log" leaves meet the
# ignore patterns below
leaf_name = st.one_of(
    component.map(lambda c: f"f-{c}"),
    component.map(lambda c: f"f-{c}.log"),
)

valid_key = st.builds(
    lambda dirs, leaf: "/".join([*(f"d-{d}" for d in dirs), leaf]),
    st.lists(component, min_size=0, max_size=2),
    leaf_name,
)

ignore_pattern = st.sampled_from(["*.log", "f-*", "d-*/", "*", "[a-f]*"])

traversal_key = st.lists(
    st.sampled_from(["..", "a", "b", "."]), min_size=1, max_size=5
).filter(lambda parts: ".." in parts).map("/".join)

content = st.binary(min_size=0, max_size=256)

_GITIGNORE = ".gitignore"


def _open_temp_repository() -> Repository:
    root = Path(tempfile.mkdtemp(prefix="gitbase-prop-")) / "store"
    logger = _create_logger(str(root.parent / "gitbase.log"))
    return open_repository(root, logger=logger)


# =============================================================================
# Key properties
# =============================================================================


class TestKeyProperties:
    @given(key=valid_key)
    def test_normalize_is_idempotent(self, key: str) -> None:
        normalized = normalize_key(key)

        assert normalize_key(normalized) == normalized

    @given(key=valid_key, separator=st.sampled_from(["/", "//", "/./"]))
    def test_redundant_separators_normalize_away(
        self, key: str, separator: str
    ) -> None:
        noisy = "./" + key.replace("/", separator)

        assert normalize_key(noisy) == key

    @given(key=valid_key)
    def test_valid_keys_map_under_root(self, key: str) -> None:
        root = Path("/srv/store")

        path = key_to_path(root, key)

        assert path.is_relative_to(root)
        assert path.relative_to(root).as_posix() == key

    @given(key=traversal_key)
    def test_traversal_keys_rejected(self, key: str) -> None:
        root = Path("/srv/store")
        try:
            path = key_to_path(root, key)
        except InvalidKeyError:
            return
        raise AssertionError(f"{key!r} mapped to {path}")


# =============================================================================
# Store round-trip
# =============================================================================


@settings(
    max_examples=15,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
@given(key=valid_key, versions=st.lists(content, min_size=1, max_size=4))
def test_latest_put_wins(key: str, versions: list[bytes]) -> None:
    with _open_temp_repository() as repo:
        for i, version in enumerate(versions):
            _ = repo.put(key, version, f"version {i}")

        assert repo.fetch(key) == versions[-1]
        newest = repo.revisions(key)[0]
        assert repo.fetch_revision(key, newest) == versions[-1]


# =============================================================================
# Stateful model
# =============================================================================


class DocumentStoreMachine(RuleBasedStateMachine):
    """Compares the repository against an in-memory dict of documents."""

    def __init__(self) -> None:
        super().__init__()
        self.repo = _open_temp_repository()
        self.model: dict[str, bytes] = {}
        self.revision_counts: dict[str, int] = {}
        self.commits = 0

    def _write(self, key: str, data: bytes) -> None:
        changed = self.model.get(key) != data
        result = self.repo.put(key, data, f"put {key}")

        self.commits += 1
        assert result.sha is not None
        assert result.no_changes is (not changed)
        if changed:
            self.revision_counts[key] = self.revision_counts.get(key, 0) + 1
            assert result.files == frozenset({self.repo.root / key})
        self.model[key] = data

    @rule(key=valid_key, data=content)
    def put(self, key: str, data: bytes) -> None:
        self._write(key, data)

    @rule(pattern=ignore_pattern)
    def ignore(self, pattern: str) -> None:
        self._write(_GITIGNORE, f"{pattern}\n".encode())

    @rule(key=valid_key)
    def remove(self, key: str) -> None:
        if key not in self.model:
            return
        result = self.repo.remove(key, f"remove {key}")

        self.commits += 1
        assert result.files == frozenset({self.repo.root / key})
        del self.model[key]
        self.revision_counts[key] += 1

    @rule()
    def unignore(self) -> None:
        if _GITIGNORE in self.model:
            self.remove(_GITIGNORE)

    @invariant()
    def documents_match_model(self) -> None:
        assert self.repo.documents() == sorted(self.model)

    @invariant()
    def contents_match_model(self) -> None:
        for key, data in self.model.items():
            assert self.repo.fetch(key) == data

    @invariant()
    def working_tree_is_clean(self) -> None:
        assert self.repo.worktree.pending_changes() == frozenset()

    def check_history(self) -> None:
        assert len(self.repo.log(self.commits + 1)) == self.commits
        for key, count in self.revision_counts.items():
            revisions = self.repo.revisions(key)
            assert len(revisions) == count
            if key in self.model:
                assert self.repo.fetch_revision(key, revisions[0]) == self.model[key]

    def teardown(self) -> None:
        try:
            self.check_history()
        finally:
            self.repo.close()


DocumentStoreMachine.TestCase.settings = settings(
    max_examples=10,
    stateful_step_count=8,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
TestDocumentStore = DocumentStoreMachine.TestCase
