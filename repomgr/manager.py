"""Scan orchestration: check every child of the root in parallel."""

from __future__ import annotations

import enum
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from repomgr.config import Config, manager_cwd
from repomgr.errors import NoOriginError, ScanError
from repomgr.git import GitRepo
from repomgr.runner import GitRunner, Throttle
from repomgr.scanner import child_path, has_git, is_self, list_children
from repomgr.state import Clock, RepoState, StateStore, utcnow

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    SKIPPED_NOT_DIR = "skipped-not-dir"
    SKIPPED_SELF = "skipped-self"
    SKIPPED_NOT_REPO = "skipped-not-repo"
    SKIPPED_DIRTY = "skipped-dirty"
    SKIPPED_NO_ORIGIN = "skipped-no-origin"
    CREATED = "created"
    REFRESHED = "refreshed"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class ScanReport:
    root: str
    outcomes: dict[str, Outcome] = field(default_factory=dict)
    states: dict[str, RepoState] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for o in self.outcomes.values() if o is outcome)


class Manager:
    """Runs one scan of ``config.path``.

    Every child directory gets its own thread; the git processes those
    threads start share a single ``Throttle`` of ``config.concurrency``
    permits.
    """

    def __init__(
        self,
        config: Config,
        *,
        runner: Optional[GitRunner] = None,
        clock: Clock = utcnow,
        cwd: Optional[str] = None,
    ) -> None:
        self.config = config
        self.runner = runner or GitRunner(Throttle(config.concurrency), config.git_binary)
        self.clock = clock
        self.store = StateStore(self.runner, cwd or manager_cwd(), clock)

    def handle(self, entry: os.DirEntry) -> tuple[Outcome, Optional[RepoState]]:
        """Decide what to do with one child of the root and do it.

        Skips return an ``Outcome``; real failures raise.
        """
        if not entry.is_dir(follow_symlinks=False):
            return Outcome.SKIPPED_NOT_DIR, None

        path = child_path(self.config.path, entry.name)
        if is_self(path):
            return Outcome.SKIPPED_SELF, None
        if not has_git(path):
            return Outcome.SKIPPED_NOT_REPO, None

        if not GitRepo(self.runner, path).is_clean():
            logger.debug("%s: working tree not clean, skipping", path)
            return Outcome.SKIPPED_DIRTY, None

        try:
            state, created = self.store.get_or_create(path)
        except NoOriginError:
            logger.debug("%s: no origin remote, skipping", path)
            return Outcome.SKIPPED_NO_ORIGIN, None
        if created:
            logger.info("%s: tracking %s (%s)", path, state.remote_origin, state.branch)
            return Outcome.CREATED, state

        if not state.is_stale(self.clock()):
            return Outcome.UNCHANGED, state

        try:
            self.store.refresh(state)
        except NoOriginError:
            # keep the old sidecar as it is; it will be retried next run
            logger.warning("%s: origin remote is gone, leaving cached state stale", path)
            return Outcome.SKIPPED_NO_ORIGIN, state
        self.store.put(state)
        logger.info("%s: refreshed (%s)", path, state.branch)
        return Outcome.REFRESHED, state

    def run(self) -> ScanReport:
        """Scan the root once.

        Raises ``ScanRootError`` if the root cannot be listed and
        ``ScanError`` (carrying the partial report) if any child failed.
        """
        root = self.config.path
        entries = list_children(root)
        report = ScanReport(root=root)
        if not entries:
            return report

        lock = threading.Lock()

        def _check(entry: os.DirEntry) -> None:
            try:
                outcome, state = self.handle(entry)
            except Exception as e:
                logger.debug("%s failed: %s", entry.name, e)
                with lock:
                    report.errors[entry.name] = e
                    report.outcomes[entry.name] = Outcome.FAILED
                return
            with lock:
                report.outcomes[entry.name] = outcome
                if state is not None:
                    report.states[entry.name] = state

        with ThreadPoolExecutor(max_workers=len(entries)) as executor:
            list(executor.map(_check, entries))

        if report.errors:
            raise ScanError(report.errors, report)
        return report
