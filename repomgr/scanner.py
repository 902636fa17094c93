"""Repo discovery — one directory level under the configured root."""

from __future__ import annotations

import os

from repomgr import PROGRAM_NAME
from repomgr.errors import ScanRootError


def list_children(root: str) -> list[os.DirEntry]:
    """Immediate entries of ``root``, sorted by name. Not recursive."""
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as e:
        raise ScanRootError(f"cannot list {root}: {e}") from e
    entries.sort(key=lambda e: e.name)
    return entries


def child_path(root: str, name: str) -> str:
    """Path of a child as the manager addresses it (relative to its cwd)."""
    return os.path.join(root, name)


def is_self(path: str) -> bool:
    """True for the manager's own checkout (or a fork named after it)."""
    return PROGRAM_NAME in os.path.basename(path.rstrip("/"))


def has_git(path: str) -> bool:
    """A ``.git`` entry of any kind: directory, or file for worktrees and submodules."""
    return os.path.lexists(os.path.join(path, ".git"))
