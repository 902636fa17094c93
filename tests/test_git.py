"""Tests for repository metadata extraction."""

import os
import subprocess
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from conftest import ORIGIN, create_test_repo, make_dirty
from repomgr.errors import CommitDateError, GitCommandError, GitFault, NoOriginError
from repomgr.git import GitRepo, parse_commit_date
from repomgr.runner import GitRunner


class StubRunner:
    """Returns canned output (or raises) instead of running git."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def run(self, cwd, first_arg, *args):
        self.calls.append((cwd, [first_arg, *args]))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


# --- parse_commit_date ---

def test_parse_commit_date():
    ts = parse_commit_date("Wed Sep 25 15:30:25 2019 +0200")
    assert ts == datetime(2019, 9, 25, 15, 30, 25, tzinfo=timezone(timedelta(hours=2)))
    assert ts.utcoffset() == timedelta(hours=2)


def test_parse_commit_date_single_digit_day():
    ts = parse_commit_date("Thu Sep 5 09:01:02 2019 -0700")
    assert ts.day == 5
    assert ts.utcoffset() == timedelta(hours=-7)


def test_parse_commit_date_space_padded_day():
    ts = parse_commit_date("Thu Sep  5 09:01:02 2019 -0700")
    assert ts.day == 5


@pytest.mark.parametrize("text", ["", "yesterday", "2019-09-25T15:30:25+02:00", "Wed Sep 25 15:30:25 2019"])
def test_parse_commit_date_invalid(text):
    with pytest.raises(CommitDateError):
        parse_commit_date(text)


# --- GitRepo against real repositories ---

def test_is_clean():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"))
        assert GitRepo(GitRunner(), repo).is_clean() is True


def test_is_clean_dirty():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"))
        make_dirty(repo)
        assert GitRepo(GitRunner(), repo).is_clean() is False


def test_is_clean_nonexistent():
    assert GitRepo(GitRunner(), "/nonexistent/path").is_clean() is False


def test_is_clean_fails_closed_on_fault():
    runner = StubRunner(GitFault("/x", ["status"], RuntimeError("boom")))
    assert GitRepo(runner, "/x").is_clean() is False


def test_branch():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"), branch="trunk")
        assert GitRepo(GitRunner(), repo).branch() == "trunk"


def test_origin():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"))
        assert GitRepo(GitRunner(), repo).origin() == ORIGIN


def test_origin_missing():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"), origin=None)
        with pytest.raises(NoOriginError) as exc:
            GitRepo(GitRunner(), repo).origin()
        assert isinstance(exc.value.__cause__, GitCommandError)


def test_origin_empty_output():
    with pytest.raises(NoOriginError):
        GitRepo(StubRunner(""), "/x").origin()


def test_last_commit_time():
    with tempfile.TemporaryDirectory() as tmp:
        repo = create_test_repo(os.path.join(tmp, "test-repo"))
        ts = GitRepo(GitRunner(), repo).last_commit_time()
        assert ts == datetime(2019, 9, 25, 13, 30, 25, tzinfo=timezone.utc)


def test_last_commit_time_empty_repo():
    with tempfile.TemporaryDirectory() as tmp:
        empty = os.path.join(tmp, "empty")
        subprocess.run(["git", "init", empty], capture_output=True)
        with pytest.raises(GitCommandError):
            GitRepo(GitRunner(), empty).last_commit_time()


def test_commands_use_repo_as_cwd():
    runner = StubRunner("Wed Sep 25 15:30:25 2019 +0200")
    GitRepo(runner, "code/proj").last_commit_time()
    assert runner.calls == [("code/proj", ["log", "-1", "--format=%cd"])]
