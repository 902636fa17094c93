"""git-repo-mgr exception hierarchy.

Skip conditions (dirty tree, not a repo, ...) are not exceptions; the
only one that travels as an exception is ``NoOriginError`` because it is
discovered deep inside a state refresh.
"""

from __future__ import annotations

from typing import Any


class RepoMgrError(Exception):
    """Base exception for all git-repo-mgr errors."""


class ConfigError(RepoMgrError):
    """The config file exists but cannot be used."""


class ScanRootError(RepoMgrError):
    """The root directory cannot be listed."""


class StateWriteError(RepoMgrError):
    """A sidecar state file could not be written."""


class GitError(RepoMgrError):
    """Base for everything that goes wrong talking to git."""


class GitCommandError(GitError):
    """git exited non-zero or could not be executed at all."""

    def __init__(
        self,
        cwd: str,
        args: list[str],
        detail: str,
        returncode: int | None = None,
    ) -> None:
        self.cwd = cwd
        self.command = list(args)
        self.detail = detail
        self.returncode = returncode
        cmd = " ".join(self.command)
        if returncode is None:
            msg = f"git {cmd} in {cwd}: {detail}"
        else:
            msg = f"git {cmd} in {cwd} exited {returncode}: {detail}"
        super().__init__(msg)


class GitFault(GitError):
    """Unexpected exception raised while a git permit was held."""

    def __init__(self, cwd: str, args: list[str], cause: BaseException) -> None:
        self.cwd = cwd
        self.command = list(args)
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class NoOriginError(GitError):
    """The repository has no ``origin`` remote configured."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"no origin for {path}")


class CommitDateError(GitError):
    """``git log`` printed a commit date we could not parse."""


class ScanError(RepoMgrError):
    """One or more repositories failed during a scan.

    ``errors`` maps the child directory name to the exception it raised.
    """

    def __init__(self, errors: dict[str, Exception], report: Any = None) -> None:
        self.errors = dict(sorted(errors.items()))
        self.report = report
        lines = [f"{name} error: {err}" for name, err in self.errors.items()]
        super().__init__("; ".join(lines))
