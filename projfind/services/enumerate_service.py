"""Run the recursive file search that backs a project listing."""

from __future__ import annotations

import fnmatch
import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Iterator, Sequence

from ..config import DEFAULT_BACKEND, SUPPORTED_BACKENDS
from ..text import Messages
from ..utils import (
    gitignore_spec_from_lines,
    is_ignored,
    read_gitignore_lines,
    relative_posix,
)

logger = logging.getLogger(__name__)

FIND_COMMAND = "find"


def find_command_path() -> str | None:
    """Return the resolved path of the `find` binary if present on PATH."""

    return shutil.which(FIND_COMMAND)


def build_find_command(
    root: Path,
    patterns: Sequence[str],
    extra_options: str | None = None,
) -> list[str]:
    """Return the ``find`` argv listing regular files matching any pattern."""

    command = [FIND_COMMAND, str(root), "-type", "f"]
    if patterns:
        command.append("(")
        for idx, pattern in enumerate(patterns):
            if idx:
                command.append("-o")
            command.extend(["-name", pattern])
        command.append(")")
    if extra_options:
        command.extend(shlex.split(extra_options))
    return command


def _run_find(
    root: Path,
    patterns: Sequence[str],
    extra_options: str | None,
    limit: int,
) -> list[Path]:
    try:
        command = build_find_command(root, patterns, extra_options)
    except ValueError as exc:
        logger.warning("Ignoring malformed find options %r: %s", extra_options, exc)
        return []
    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.warning("Could not run %s: %s", shlex.join(command), exc)
        return []

    paths: list[Path] = []
    truncated = False
    finished = False
    try:
        with process.stdout:
            for line in process.stdout:
                # Raw bytes keep names that are not valid UTF-8 openable.
                value = os.fsdecode(line.rstrip(b"\r\n"))
                if not value.strip():
                    continue
                paths.append(Path(value))
                if len(paths) >= limit:
                    truncated = True
                    break
        finished = True
    finally:
        if truncated or not finished:
            process.terminate()
        returncode = process.wait()
    if returncode != 0 and not truncated:
        logger.warning(
            "%s exited with status %d; using %d collected paths",
            shlex.join(command),
            returncode,
            len(paths),
        )
    return paths


def _walk_matching(
    root: Path,
    patterns: Sequence[str],
    *,
    respect_gitignore: bool,
) -> Iterator[Path]:
    spec_by_dir: dict[Path, object] = {}
    base_spec = None
    if respect_gitignore:
        base_spec = gitignore_spec_from_lines([], "")
        spec_by_dir[root] = base_spec

    for dirpath, dirnames, filenames in os.walk(root, topdown=True):
        current_dir = Path(dirpath)
        dirnames[:] = [d for d in dirnames if d != ".git"]
        dirnames.sort()
        spec = spec_by_dir.get(current_dir, base_spec)
        if respect_gitignore and spec is not None:
            gitignore_file = current_dir / ".gitignore"
            if gitignore_file.is_file():
                spec = spec + gitignore_spec_from_lines(
                    read_gitignore_lines(gitignore_file),
                    relative_posix(current_dir, root),
                )
            kept: list[str] = []
            for dirname in dirnames:
                child = current_dir / dirname
                if is_ignored(spec, relative_posix(child, root), is_dir=True):
                    continue
                kept.append(dirname)
                spec_by_dir[child] = spec
            dirnames[:] = kept

        for filename in sorted(filenames):
            if not any(fnmatch.fnmatchcase(filename, pattern) for pattern in patterns):
                continue
            candidate = current_dir / filename
            if not candidate.is_file():
                continue
            if respect_gitignore and spec is not None:
                if is_ignored(spec, relative_posix(candidate, root), is_dir=False):
                    continue
            yield candidate


def _run_walk(
    root: Path,
    patterns: Sequence[str],
    limit: int,
    *,
    respect_gitignore: bool,
) -> list[Path]:
    paths: list[Path] = []
    try:
        for path in _walk_matching(root, patterns, respect_gitignore=respect_gitignore):
            paths.append(path)
            if len(paths) >= limit:
                break
    except OSError as exc:
        logger.warning("Walking %s failed: %s", root, exc)
    return paths


def enumerate_files(
    root: Path,
    patterns: Sequence[str],
    extra_options: str | None,
    limit: int,
    *,
    backend: str = DEFAULT_BACKEND,
    respect_gitignore: bool = True,
) -> list[Path]:
    """Return up to *limit* absolute paths of files under *root* matching *patterns*.

    Search failures are logged and yield whatever was collected so far.
    """

    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            Messages.ERROR_BACKEND_INVALID.format(
                value=backend, allowed=", ".join(SUPPORTED_BACKENDS)
            )
        )
    if limit <= 0 or not patterns:
        return []
    root = Path(root)
    if backend == "walk":
        return _run_walk(root, patterns, limit, respect_gitignore=respect_gitignore)
    return _run_find(root, patterns, extra_options, limit)
