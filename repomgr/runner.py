"""Run git as a subprocess, at most N at a time across the whole scan."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from contextlib import contextmanager
from typing import Iterator

from repomgr.config import DEFAULT_CONCURRENCY
from repomgr.errors import GitCommandError, GitError, GitFault

logger = logging.getLogger(__name__)


class Throttle:
    """Fixed-size permit pool, full on creation."""

    def __init__(self, capacity: int = DEFAULT_CONCURRENCY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._sem = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def available(self) -> int:
        return self.capacity - self.in_flight

    @contextmanager
    def permit(self) -> Iterator[None]:
        """Hold one permit for the duration of the block.

        Blocks while the pool is exhausted. The permit goes back even if
        the block raises.
        """
        self._sem.acquire()
        with self._lock:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
            self._sem.release()


class GitRunner:
    """Executes git commands through a shared ``Throttle``."""

    def __init__(self, throttle: Throttle | None = None, binary: str = "git") -> None:
        self.throttle = throttle or Throttle()
        self.binary = binary

    def run(self, cwd: str, first_arg: str, *args: str) -> str:
        """Run ``git first_arg *args`` inside ``cwd`` and return trimmed output.

        stdout and stderr are combined. Anything that goes wrong comes
        back as a ``GitError``: ``GitCommandError`` for a non-zero exit or
        a git that cannot be started, ``GitFault`` for anything else.
        """
        # first_arg is separate so git is never run without a subcommand
        argv = [first_arg, *args]

        with self.throttle.permit():
            try:
                return self._exec(cwd, argv)
            except GitError:
                raise
            except Exception as e:
                logger.error(
                    "recovered fault running git cwd=%s args=%s",
                    cwd, argv, exc_info=True,
                )
                raise GitFault(cwd, argv, e) from e

    def _exec(self, cwd: str, argv: list[str]) -> str:
        logger.debug("git %s (cwd=%s)", " ".join(argv), cwd)
        # output is parsed, keep git from translating it
        try:
            result = subprocess.run(
                [self.binary] + argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                env={**os.environ, "LC_ALL": "C"},
            )
        except OSError as e:
            # missing binary, missing cwd, permission denied
            raise GitCommandError(cwd, argv, str(e)) from e

        output = result.stdout.strip()
        if result.returncode != 0:
            raise GitCommandError(cwd, argv, output, result.returncode)
        return output
