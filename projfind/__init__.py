"""projfind package initialization."""

from __future__ import annotations

from .api import (
    ProjectFinder,
    ProjectFinderError,
    config_context,
    default_finder,
    find_project_root,
    project_files,
)
from .cache import CacheRecord, CacheStore
from .fingerprint import NO_FINGERPRINT, fingerprint
from .naming import FileEntry, dedupe

__all__ = [
    "__version__",
    "CacheRecord",
    "CacheStore",
    "FileEntry",
    "NO_FINGERPRINT",
    "ProjectFinder",
    "ProjectFinderError",
    "config_context",
    "dedupe",
    "default_finder",
    "find_project_root",
    "fingerprint",
    "get_version",
    "project_files",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
