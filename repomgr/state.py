"""Per-repository state, kept in a JSON sidecar next to the repository."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from repomgr import PROGRAM_NAME
from repomgr.errors import StateWriteError
from repomgr.git import GitRepo
from repomgr.runner import GitRunner

logger = logging.getLogger(__name__)

STATE_SUFFIX = f".{PROGRAM_NAME}.state.json"
REFRESH_INTERVAL = timedelta(hours=24)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def state_path(repo_path: str) -> str:
    """Sidecar path for ``repo_path``: ``<parent>/.<name>.git-repo-mgr.state.json``.

    Pure string manipulation, the filesystem is not touched.
    """
    trimmed = repo_path.rstrip("/") or repo_path
    parent, name = os.path.split(trimmed)
    return os.path.join(parent, f".{name}{STATE_SUFFIX}")


def _dump_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _load_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected ISO timestamp string, got {type(value).__name__}")
    if value.endswith("Z"):
        # fromisoformat only learned "Z" in 3.11
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _load_flag(value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"expected boolean, got {type(value).__name__}")
    return value


@dataclass
class RepoState:
    repo_path: str                                # relative to manager_path; identity
    manager_path: str = ""                        # where the manager was run from
    remote_origin: str = ""
    branch: str = ""
    last_commit_time: Optional[datetime] = None
    created_at: Optional[datetime] = None         # set once
    updated_at: Optional[datetime] = None         # set on every write
    is_compressed: bool = False                   # reserved for archival
    is_purged: bool = False                       # reserved for archival

    def to_dict(self) -> dict[str, Any]:
        return {
            "managerPath": self.manager_path,
            "repoPath": self.repo_path,
            "remoteOrigin": self.remote_origin,
            "branch": self.branch,
            "lastCommitTime": _dump_time(self.last_commit_time),
            "createdAt": _dump_time(self.created_at),
            "updatedAt": _dump_time(self.updated_at),
            "isCompressed": self.is_compressed,
            "isPurged": self.is_purged,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], repo_path: str = "") -> "RepoState":
        """Build a state from decoded JSON.

        Missing keys keep their defaults and unknown keys are ignored, so
        older and newer sidecars both load. ``repo_path`` is used when the
        document does not record one.
        """
        return cls(
            repo_path=str(data.get("repoPath") or repo_path),
            manager_path=str(data.get("managerPath") or ""),
            remote_origin=str(data.get("remoteOrigin") or ""),
            branch=str(data.get("branch") or ""),
            last_commit_time=_load_time(data.get("lastCommitTime")),
            created_at=_load_time(data.get("createdAt")),
            updated_at=_load_time(data.get("updatedAt")),
            is_compressed=_load_flag(data.get("isCompressed")),
            is_purged=_load_flag(data.get("isPurged")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str | bytes, repo_path: str = "") -> "RepoState":
        # bytes are decoded by json; bad UTF-8 surfaces as ValueError
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("state document is not a JSON object")
        return cls.from_dict(data, repo_path=repo_path)

    @property
    def sidecar(self) -> str:
        return state_path(self.repo_path)

    def is_stale(self, now: datetime, interval: timedelta = REFRESH_INTERVAL) -> bool:
        if self.updated_at is None:
            return True
        return now - self.updated_at > interval


class StateStore:
    """Loads, refreshes and writes ``RepoState`` sidecars."""

    def __init__(
        self,
        runner: GitRunner,
        manager_path: str,
        clock: Clock = utcnow,
    ) -> None:
        self.runner = runner
        self.manager_path = manager_path
        self.clock = clock

    def get(self, repo_path: str) -> Optional[RepoState]:
        """Existing state for ``repo_path``, or None if missing or unreadable."""
        path = state_path(repo_path)
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("cannot read %s: %s", path, e)
            return None

        try:
            state = RepoState.from_json(raw, repo_path=repo_path)
        except (ValueError, TypeError) as e:
            logger.debug("ignoring malformed state %s: %s", path, e)
            return None

        # written from another working directory; git must run where we found it
        state.repo_path = repo_path
        return state

    def refresh(self, state: RepoState) -> None:
        """Re-read branch, origin and last commit time from git.

        Fields are only assigned once all three calls succeed.
        """
        repo = GitRepo(self.runner, state.repo_path)
        branch = repo.branch()
        origin = repo.origin()
        last_commit = repo.last_commit_time()

        state.branch = branch
        state.remote_origin = origin
        state.last_commit_time = last_commit

    def put(self, state: RepoState) -> None:
        now = self.clock()
        if state.updated_at is not None and state.updated_at > now:
            # clock went backwards; updated_at never does
            now = state.updated_at
        state.updated_at = now

        path = state.sidecar
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(state.to_json())
                f.write("\n")
        except OSError as e:
            raise StateWriteError(f"cannot write {path}: {e}") from e
        logger.debug("wrote %s", path)

    def get_or_create(self, repo_path: str) -> tuple[RepoState, bool]:
        """Return ``(state, created)``.

        An existing sidecar is returned as is. Otherwise a new state is
        filled from git and written; ``NoOriginError`` propagates and
        nothing is written.
        """
        existing = self.get(repo_path)
        if existing is not None:
            return existing, False

        state = RepoState(
            repo_path=repo_path,
            manager_path=self.manager_path,
            created_at=self.clock(),
        )
        self.refresh(state)
        self.put(state)
        return state, True
