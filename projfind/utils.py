"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence


def find_project_root(start: Path | str, markers: Sequence[str]) -> Path | None:
    """Return the nearest directory at or above *start* containing any marker."""

    path = Path(start).expanduser().resolve()
    if path.is_file():
        path = path.parent
    for candidate in (path,) + tuple(path.parents):
        for marker in markers:
            if marker and (candidate / marker).exists():
                return candidate
    return None


def resolve_git_dir(git_root: Path) -> Path | None:
    git_entry = git_root / ".git"
    if git_entry.is_dir():
        return git_entry
    if not git_entry.is_file():
        return None
    try:
        content = git_entry.read_text(encoding="utf-8", errors="replace").strip()
    except OSError:
        return None
    prefix = "gitdir:"
    if not content.lower().startswith(prefix):
        return None
    target = content[len(prefix) :].strip()
    if not target:
        return None
    git_dir = Path(target)
    if not git_dir.is_absolute():
        git_dir = (git_root / git_dir).resolve()
    return git_dir


def normalize_patterns(values: Iterable[str] | None) -> tuple[str, ...]:
    """Return deduplicated glob patterns, splitting comma separated tokens."""

    if not values:
        return ()
    normalized: list[str] = []
    seen: set[str] = set()
    for raw in values:
        if raw is None:
            continue
        for token in raw.replace(",", " ").split():
            if token not in seen:
                seen.add(token)
                normalized.append(token)
    return tuple(normalized)


def relative_posix(path: Path, root: Path) -> str:
    rel = path.relative_to(root)
    if rel == Path("."):
        return ""
    return rel.as_posix()


def read_gitignore_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []


def _scope_gitignore_line(line: str, base_dir: str) -> str | None:
    if line == "":
        return None
    if line.startswith("#") and not line.startswith(r"\#"):
        return None
    if not base_dir:
        return line

    negated = line.startswith("!") and not line.startswith(r"\!")
    prefix = "!" if negated else ""
    body = line[1:] if negated else line

    anchored = body.startswith("/") and not body.startswith(r"\/")
    if anchored:
        body = body[1:]
        scoped = f"{base_dir}/{body}" if body else f"{base_dir}/"
        return f"{prefix}{scoped}"

    directory_only = body.endswith("/") and not body.endswith(r"\/")
    body_check = body[:-1] if directory_only else body
    if "/" in body_check:
        scoped = f"{base_dir}/{body}"
    else:
        scoped = f"{base_dir}/**/{body}"
    return f"{prefix}{scoped}"


def gitignore_spec_from_lines(lines: Iterable[str], base_dir: str):
    from pathspec.gitignore import GitIgnoreSpec

    scoped: list[str] = []
    for line in lines:
        scoped_line = _scope_gitignore_line(line, base_dir)
        if scoped_line is not None:
            scoped.append(scoped_line)
    return GitIgnoreSpec.from_lines(scoped)


def is_ignored(spec, rel_path: str, *, is_dir: bool) -> bool:
    if not rel_path:
        return False
    candidate = f"{rel_path}/" if is_dir and not rel_path.endswith("/") else rel_path
    return spec.check_file(candidate).include is True


def format_path(path: Path, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    if base:
        try:
            relative = path.relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)


def ensure_positive(value: int, name: str) -> int:
    """Validate that *value* is positive."""
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return value
