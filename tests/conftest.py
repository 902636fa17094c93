"""Shared helpers: real git repositories in temp directories."""

import os
import subprocess
from datetime import datetime, timedelta, timezone

import pytest

COMMIT_DATE = "2019-09-25T15:30:25+0200"
ORIGIN = "git@example.com:team/project.git"


def _git(path: str, *args: str) -> None:
    env = {
        **os.environ,
        "GIT_AUTHOR_DATE": COMMIT_DATE,
        "GIT_COMMITTER_DATE": COMMIT_DATE,
    }
    subprocess.run(["git", "-C", path, *args], capture_output=True, env=env, check=True)


def create_test_repo(path: str, origin: str | None = ORIGIN, branch: str = "main") -> str:
    """Create a clean git repo with one commit, optionally with an origin remote."""
    os.makedirs(path, exist_ok=True)
    subprocess.run(["git", "init", path], capture_output=True, check=True)
    _git(path, "config", "user.email", "test@test.com")
    _git(path, "config", "user.name", "Test User")
    _git(path, "config", "commit.gpgsign", "false")

    with open(os.path.join(path, "README.md"), "w") as f:
        f.write("# Test\n")
    _git(path, "add", ".")
    _git(path, "commit", "-m", "Initial commit")
    _git(path, "checkout", "-B", branch)

    if origin:
        _git(path, "remote", "add", "origin", origin)
    return path


def make_dirty(path: str) -> None:
    with open(os.path.join(path, "dirty.txt"), "w") as f:
        f.write("uncommitted\n")


def remove_origin(path: str) -> None:
    _git(path, "remote", "remove", "origin")


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
