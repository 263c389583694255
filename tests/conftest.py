"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from release_note.core.commits import RawCommit

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
GENERATED_AT = datetime(2024, 2, 1, 9, 30, tzinfo=UTC)


def make_raw(
    id: str,
    message: str,
    minutes: int = 0,
    author: str = "Test",
) -> RawCommit:
    """Build a RawCommit whose timestamp is ``minutes`` after BASE_TIME."""
    return RawCommit.from_message(
        id=id,
        message=message,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        author=author,
    )


@pytest.fixture
def raw_commit() -> Callable[..., RawCommit]:
    return make_raw


@pytest.fixture
def feat_commit() -> RawCommit:
    return make_raw("feat1234567890", "feat: add user authentication", minutes=3)


@pytest.fixture
def fix_commit() -> RawCommit:
    return make_raw("fix12345678900", "fix(core): handle null response", minutes=2)


@pytest.fixture
def breaking_commit() -> RawCommit:
    return make_raw(
        "break123456789",
        "feat!: redesign configuration\n\nBREAKING CHANGE: config format changed",
        minutes=1,
    )


@pytest.fixture
def sample_commits() -> list[RawCommit]:
    """A mixed range, newest first."""
    return [
        make_raw("a1", "feat(api): add search endpoint\n\nCloses #42", minutes=10),
        make_raw("a2", "fix: null pointer on empty query", minutes=9),
        make_raw("a3", "docs: update readme", minutes=8),
        make_raw("a4", "chore: bump tooling", minutes=7),
        make_raw("a5", "refactor!: drop legacy settings", minutes=6),
        make_raw("a6", "Merge branch 'main' into topic", minutes=5),
        make_raw("a7", "perf: cache parsed templates", minutes=4),
        make_raw("a8", "fix(deps): update jinja2", minutes=3),
    ]


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git() -> Callable[..., str]:
    return _git


@pytest.fixture
def temp_git_repo_with_pyproject(tmp_path: Path) -> Path:
    """A git repository with a pyproject.toml, a v1.2.3 tag and two commits after it."""
    repo = tmp_path / "repo"
    repo.mkdir()

    _git(repo, "init", "-q", "-b", "main")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "commit.gpgsign", "false")

    (repo / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.2.3"

[tool.release-note]
workers = 2

[tool.release-note.render]
show_title = false
"""
    )
    _git(repo, "add", "pyproject.toml")
    _git(repo, "commit", "-q", "-m", "chore: initial commit")
    _git(repo, "tag", "v1.2.3")

    (repo / "search.py").write_text("def search(): ...\n")
    _git(repo, "add", "search.py")
    _git(repo, "commit", "-q", "-m", "feat(api): add search endpoint", "-m", "Closes #7")

    (repo / "search.py").write_text("def search(query=None): ...\n")
    _git(repo, "commit", "-q", "-am", "fix: null pointer on empty query")

    return repo


@pytest.fixture
def generated_at() -> datetime:
    return GENERATED_AT
