"""Public Python API for projfind."""

from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Mapping
from pathlib import Path
from typing import Sequence

from .cache import CacheStore
from .config import (
    Config,
    RootOverride,
    RootResolver,
    SUPPORTED_BACKENDS,
    config_dir_context,
    config_from_json,
    load_config,
)
from .naming import FileEntry, display_entries
from .services.project_service import (
    ProjectFiles,
    ProjectFilesResult,
    ProjectRootNotFoundError,
    lookup_path,
    resolve_root,
)
from .text import Messages
from .utils import ensure_positive


class ProjectFinderError(ValueError):
    """Raised when the projfind public API input is invalid."""


class ProjectFinder:
    """Finds files of the current project, caching listings per project root."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        store: CacheStore | None = None,
        project_files: ProjectFiles | None = None,
    ) -> None:
        self._config = config
        self._project_files = project_files or ProjectFiles(store)

    @property
    def config(self) -> Config:
        return self._config if self._config is not None else load_config()

    @property
    def store(self) -> CacheStore:
        return self._project_files.store

    def root(self, start: Path | str | None = None) -> Path:
        try:
            return resolve_root(self.config, start)
        except ProjectRootNotFoundError as exc:
            raise ProjectFinderError(str(exc)) from exc

    def result(
        self,
        start: Path | str | None = None,
        *,
        patterns: Sequence[str] | None = None,
        extra_options: str | None = None,
        limit: int | None = None,
        backend: str | None = None,
        refresh: bool = False,
    ) -> ProjectFilesResult:
        return self._result(
            self.config,
            start,
            patterns=patterns,
            extra_options=extra_options,
            limit=limit,
            backend=backend,
            refresh=refresh,
        )

    def _result(
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
        if limit is not None:
            try:
                ensure_positive(limit, "limit")
            except ValueError as exc:
                raise ProjectFinderError(str(exc)) from exc
        if backend is not None and backend not in SUPPORTED_BACKENDS:
            raise ProjectFinderError(
                Messages.ERROR_BACKEND_INVALID.format(
                    value=backend, allowed=", ".join(SUPPORTED_BACKENDS)
                )
            )
        try:
            return self._project_files.files_for_config(
                config,
                start,
                patterns=patterns,
                extra_options=extra_options,
                limit=limit,
                backend=backend,
                refresh=refresh,
            )
        except ProjectRootNotFoundError as exc:
            raise ProjectFinderError(str(exc)) from exc

    def files(self, start: Path | str | None = None, **kwargs) -> dict[str, Path]:
        """Return the display name to absolute path mapping for the project."""
        return self.result(start, **kwargs).files

    def entries(self, start: Path | str | None = None, **kwargs) -> list[FileEntry]:
        config = self.config
        result = self._result(config, start, **kwargs)
        return display_entries(
            result.files,
            full_paths=config.full_paths,
            root=result.root,
        )

    def resolve_name(self, name: str, start: Path | str | None = None) -> Path:
        """Return the absolute path of the file displayed as *name*."""

        config = self.config
        result = self._result(config, start)
        path = lookup_path(result.files, name)
        if path is None and config.full_paths:
            for entry in display_entries(result.files, full_paths=True, root=result.root):
                if entry.display_name == name:
                    return entry.path
        if path is None:
            raise ProjectFinderError(Messages.ERROR_NAME_UNKNOWN.format(name=name))
        return path

    def invalidate(self, start: Path | str | None = None) -> bool:
        return self._project_files.invalidate(self.root(start))


_DEFAULT_FINDER: ProjectFinder | None = None


def default_finder() -> ProjectFinder:
    """Return the process-wide finder used by the module level helpers."""

    global _DEFAULT_FINDER
    if _DEFAULT_FINDER is None:
        _DEFAULT_FINDER = ProjectFinder()
    return _DEFAULT_FINDER


def project_files(
    path: Path | str | None = None,
    *,
    patterns: Sequence[str] | None = None,
    extra_options: str | None = None,
    limit: int | None = None,
    backend: str | None = None,
    refresh: bool = False,
) -> dict[str, Path]:
    """List files of the project containing *path* (defaults to the cwd)."""

    return default_finder().files(
        path,
        patterns=patterns,
        extra_options=extra_options,
        limit=limit,
        backend=backend,
        refresh=refresh,
    )


def find_project_root(path: Path | str | None = None) -> Path:
    return default_finder().root(path)


@contextmanager
def config_context(
    *,
    payload: str | Mapping[str, object] | None = None,
    root: Path | str | RootResolver | None = None,
    config_dir: Path | str | None = None,
):
    """Yield a :class:`ProjectFinder` bound to a temporary configuration.

    *root* may be a directory or a callable receiving the start directory.
    """

    with config_dir_context(config_dir):
        base = load_config()
        config = config_from_json(payload, base=base) if payload is not None else base
        if root is not None:
            config.root = (
                RootOverride.from_resolver(root)
                if callable(root)
                else RootOverride.from_path(root)
            )
        yield ProjectFinder(config)
