"""Display names for project files."""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path
from typing import Iterable, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class FileEntry:
    display_name: str
    path: Path


def _composite_name(path: Path) -> str:
    return f"{path.parent.name}/{path.name}"


def dedupe(paths: Iterable[Path | str]) -> dict[str, Path]:
    """Map base file names to paths, prefixing the parent directory on clashes.

    When a base name is seen twice, both the earlier and the new entry are
    renamed to ``parent/name``. Two files that also share the parent
    directory name keep only the later path.
    """

    files: dict[str, Path] = {}
    for raw in paths:
        path = Path(raw)
        base = path.name
        if base not in files:
            files[base] = path
            continue
        existing = files.pop(base)
        files[_composite_name(existing)] = existing
        files[_composite_name(path)] = path
    return files


def display_entries(
    files: Mapping[str, Path],
    *,
    full_paths: bool = False,
    root: Path | None = None,
) -> list[FileEntry]:
    """Return entries for presentation, optionally named by their relative path."""

    if not full_paths:
        return [FileEntry(display_name=name, path=path) for name, path in files.items()]
    entries: list[FileEntry] = []
    for path in files.values():
        name = str(path)
        if root is not None:
            try:
                name = path.relative_to(root).as_posix()
            except ValueError:
                pass
        entries.append(FileEntry(display_name=name, path=path))
    return entries


def match_names(names: Sequence[str], query: str, *, limit: int = 20) -> list[str]:
    """Return names containing *query* (case-insensitive), else close matches."""

    needle = query.strip().lower()
    if not needle:
        return list(names)
    matches = [name for name in names if needle in name.lower()]
    if matches:
        return matches
    lowered = {name.lower(): name for name in names}
    close = get_close_matches(needle, list(lowered), n=limit, cutoff=0.6)
    return [lowered[name] for name in close]
