"""Repository metadata — one git subcommand per question, parsed here only.

The parsing below depends on git's porcelain-for-humans output:

* ``git status`` prints ``nothing to commit, working tree clean`` on a
  clean tree (git >= 2.9; older versions said ``working directory clean``).
* ``git log --format=%cd`` uses git's default date format,
  ``Wed Sep 25 15:30:25 2019 +0200``.
"""

from __future__ import annotations

from datetime import datetime

from repomgr.errors import CommitDateError, GitError, NoOriginError
from repomgr.runner import GitRunner

CLEAN_MARKER = "working tree clean"

# Day of month is not zero padded by git ("Thu Sep 5 ..."); %d accepts both.
COMMIT_DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def parse_commit_date(text: str) -> datetime:
    """Parse git's default commit date into an aware datetime."""
    # collapse "Sep  5" style double spaces
    normalized = " ".join(text.split())
    try:
        return datetime.strptime(normalized, COMMIT_DATE_FORMAT)
    except ValueError as e:
        raise CommitDateError(f"unparseable commit date {text!r}: {e}") from e


class GitRepo:
    """Read-only view of one working directory through ``GitRunner``."""

    def __init__(self, runner: GitRunner, path: str) -> None:
        self.runner = runner
        self.path = path

    def is_clean(self) -> bool:
        # Any failure counts as dirty so an unreadable repo is never refreshed.
        try:
            out = self.runner.run(self.path, "status")
        except GitError:
            return False
        return CLEAN_MARKER in out

    def branch(self) -> str:
        return self.runner.run(self.path, "rev-parse", "--abbrev-ref", "HEAD")

    def origin(self) -> str:
        """URL of the ``origin`` remote.

        Raises ``NoOriginError`` when git cannot resolve it (exit 1 for an
        unset key) or resolves it to nothing.
        """
        try:
            url = self.runner.run(self.path, "config", "--get", "remote.origin.url")
        except GitError as e:
            raise NoOriginError(self.path) from e
        if not url:
            raise NoOriginError(self.path)
        return url

    def last_commit_time(self) -> datetime:
        out = self.runner.run(self.path, "log", "-1", "--format=%cd")
        return parse_commit_date(out)
