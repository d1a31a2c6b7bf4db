"""Cheap fingerprints of the committed state of a project.

A fingerprint is the revision that the version-control HEAD points at. It
costs two small file reads no matter how large the tree is (one more for a
linked worktree, whose branch refs live in the shared repository), which is
what makes it usable as a staleness check for a full file listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .utils import resolve_git_dir

HEAD_FILENAME = "HEAD"
COMMONDIR_FILENAME = "commondir"
_SYMBOLIC_RE = re.compile(r"^[^:\s]+:(.*)$")


class NoFingerprint:
    """Marker for a root whose freshness cannot be established.

    It is falsy and never equal to anything, itself included, so a lookup
    keyed on it can never count as a cache hit.
    """

    _instance: "NoFingerprint | None" = None

    def __new__(cls) -> "NoFingerprint":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return False

    def __ne__(self, other: object) -> bool:
        return True

    __hash__ = object.__hash__

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_FINGERPRINT"


NO_FINGERPRINT = NoFingerprint()


@dataclass(frozen=True, slots=True)
class DirectRevision:
    revision: str


@dataclass(frozen=True, slots=True)
class SymbolicRef:
    ref_path: str


HeadRef = DirectRevision | SymbolicRef


def parse_head(content: str) -> HeadRef | None:
    """Parse HEAD file *content* into a direct revision or a symbolic ref."""

    text = content.strip()
    if not text:
        return None
    first_line = text.splitlines()[0].strip()
    match = _SYMBOLIC_RE.match(first_line)
    if match:
        ref_path = match.group(1).strip()
        return SymbolicRef(ref_path=ref_path) if ref_path else None
    return DirectRevision(revision=first_line)


def is_fingerprint(value: object) -> bool:
    return isinstance(value, str) and bool(value)


def _read_stripped(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None


def _resolve_ref_file(git_dir: Path, ref_path: str) -> Path | None:
    candidate = (git_dir / ref_path).resolve()
    try:
        candidate.relative_to(git_dir.resolve())
    except ValueError:
        return None
    return candidate


def _common_dir(git_dir: Path) -> Path | None:
    """Return the shared repository dir named by a worktree's ``commondir``."""

    value = _read_stripped(git_dir / COMMONDIR_FILENAME)
    if not value:
        return None
    common = Path(value)
    if not common.is_absolute():
        common = git_dir / common
    return common.resolve()


def _read_ref(git_dir: Path, ref_path: str) -> str | None:
    ref_file = _resolve_ref_file(git_dir, ref_path)
    if ref_file is None:
        return None
    if ref_file.is_file():
        return _read_stripped(ref_file)
    # Branch refs of a linked worktree live in the shared repository.
    common = _common_dir(git_dir)
    if common is None:
        return None
    shared_ref = _resolve_ref_file(common, ref_path)
    if shared_ref is None:
        return None
    return _read_stripped(shared_ref)


def fingerprint(root: Path | str) -> str | NoFingerprint:
    """Return the revision HEAD of *root* points at, or ``NO_FINGERPRINT``."""

    try:
        git_dir = resolve_git_dir(Path(root))
    except OSError:
        return NO_FINGERPRINT
    if git_dir is None:
        return NO_FINGERPRINT
    content = _read_stripped(git_dir / HEAD_FILENAME)
    if not content:
        return NO_FINGERPRINT

    head = parse_head(content)
    if isinstance(head, DirectRevision):
        return head.revision
    if isinstance(head, SymbolicRef):
        revision = _read_ref(git_dir, head.ref_path)
        return revision or NO_FINGERPRINT
    return NO_FINGERPRINT
