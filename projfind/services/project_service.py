"""Logic helpers for listing the files of a project."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from ..cache import CacheStore
from ..config import DEFAULT_BACKEND, Config
from ..fingerprint import NoFingerprint, fingerprint, is_fingerprint
from ..naming import dedupe
from ..text import Messages
from ..utils import find_project_root
from .enumerate_service import enumerate_files

logger = logging.getLogger(__name__)

Enumerator = Callable[..., Sequence[Path]]
Fingerprinter = Callable[[Path], "str | NoFingerprint"]


class ProjectRootNotFoundError(RuntimeError):
    """Raised when no project root can be determined."""

    def __init__(self, start: Path, markers: Sequence[str]) -> None:
        self.start = start
        self.markers = tuple(markers)
        super().__init__(
            Messages.ERROR_NO_ROOT.format(
                path=start, markers=", ".join(self.markers) or "none"
            )
        )


@dataclass(slots=True)
class ProjectFilesResult:
    root: Path
    files: dict[str, Path]
    fingerprint: str | NoFingerprint
    cache_hit: bool


def resolve_root(config: Config, start: Path | str | None = None) -> Path:
    """Return the project root for *start* honouring the configured override."""

    origin = Path(start).expanduser().resolve() if start is not None else Path.cwd()
    override = config.root
    candidate: Path | str | None = None
    if override.kind == "path":
        candidate = override.path
    elif override.kind == "resolver" and override.resolver is not None:
        candidate = override.resolver(origin)
    else:
        candidate = find_project_root(origin, config.project_markers)

    if candidate is None:
        raise ProjectRootNotFoundError(origin, config.project_markers)
    root = Path(candidate).expanduser().resolve()
    if not root.is_dir():
        raise ProjectRootNotFoundError(origin, config.project_markers)
    return root


class ProjectFiles:
    """Lists project files, reusing the last listing while HEAD is unchanged.

    Create one per process and share it; the store holds one record per root.
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        *,
        enumerator: Enumerator = enumerate_files,
        fingerprinter: Fingerprinter = fingerprint,
    ) -> None:
        self.store = store if store is not None else CacheStore()
        self._enumerate = enumerator
        self._fingerprint = fingerprinter

    def project_files(
        self,
        root: Path | str,
        patterns: Sequence[str],
        extra_options: str | None,
        limit: int,
        *,
        backend: str = DEFAULT_BACKEND,
        respect_gitignore: bool = True,
        refresh: bool = False,
    ) -> ProjectFilesResult:
        root_path = Path(root).expanduser().resolve()
        recorded = self.store.lookup_fingerprint(root_path)
        current = self._fingerprint(root_path)

        if not refresh and recorded is not None and recorded == current:
            record = self.store.lookup_enumeration(root_path, current)
            if record is not None:
                logger.debug("Cache hit for %s at %s", root_path, current)
                return ProjectFilesResult(
                    root=root_path,
                    files=dict(record.files),
                    fingerprint=current,
                    cache_hit=True,
                )

        logger.debug(
            "Cache miss for %s (recorded=%s, current=%r)", root_path, recorded, current
        )
        paths = self._enumerate(
            root_path,
            patterns,
            extra_options,
            limit,
            backend=backend,
            respect_gitignore=respect_gitignore,
        )
        files = dedupe(paths)

        if is_fingerprint(current):
            self.store.store(root_path, current, files)
        elif recorded is not None:
            self.store.invalidate(root_path)
            logger.debug("Dropped cached listing for unfingerprinted %s", root_path)
        return ProjectFilesResult(
            root=root_path,
            files=dict(files),
            fingerprint=current,
            cache_hit=False,
        )

    def files_for_config(
        self,
        config: Config,
        start: Path | str | None = None,
        *,
        patterns: Sequence[str] | None = None,
        extra_options: str | None = None,
        limit: int | None = None,
        backend: str | None = None,
        refresh: bool = False,
    ) -> ProjectFilesResult:
        """Resolve the root for *start* and list its files with *config* defaults."""

        root = resolve_root(config, start)
        return self.project_files(
            root,
            tuple(patterns) if patterns else config.patterns,
            config.find_options if extra_options is None else extra_options,
            config.limit if limit is None else limit,
            backend=backend or config.backend,
            respect_gitignore=config.respect_gitignore,
            refresh=refresh,
        )

    def invalidate(self, root: Path | str) -> bool:
        return self.store.invalidate(Path(root).expanduser().resolve())


def lookup_path(files: Mapping[str, Path], name: str) -> Path | None:
    """Map a display name chosen by the user back to its absolute path."""

    return files.get(name)
