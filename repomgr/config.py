"""Optional JSON config file, read once at startup."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

from repomgr.errors import ConfigError

CONFIG_FILE = ".git-repo-mgr"
DEFAULT_PATH = "./"
DEFAULT_CONCURRENCY = 10


@dataclass
class Config:
    path: str = DEFAULT_PATH
    concurrency: int = DEFAULT_CONCURRENCY
    git_binary: str = "git"

    def validate(self) -> None:
        if not self.path:
            self.path = DEFAULT_PATH
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be at least 1, got {self.concurrency}")


def load_config(config_file: str = CONFIG_FILE) -> Config:
    """Load ``config_file`` if it exists.

    The file is optional, but if present it must be a JSON object. Only
    ``path`` is read from it; unknown keys are ignored.
    """
    conf = Config()
    try:
        with open(config_file, encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        raw = ""
    except OSError as e:
        raise ConfigError(f"cannot read {config_file}: {e}") from e

    if raw.strip():
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_file} must contain a JSON object")
        path = data.get("path")
        if path is not None and not isinstance(path, str):
            raise ConfigError(f"'path' in {config_file} must be a string")
        conf.path = path or DEFAULT_PATH

    conf.validate()
    return conf


def manager_cwd() -> str:
    """Absolute directory the manager was started from."""
    return os.path.abspath(os.getcwd())
