"""git-repo-mgr keeps a metadata sidecar beside every git repo under a directory."""

__version__ = "0.1.0"

PROGRAM_NAME = "git-repo-mgr"
