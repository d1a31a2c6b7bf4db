"""In-memory cache of project file listings keyed by project root."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .fingerprint import NoFingerprint, is_fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheRecord:
    root: Path
    fingerprint: str
    files: Mapping[str, Path]


def _cache_key(root: Path | str) -> Path:
    return Path(root).expanduser().resolve()


class CacheStore:
    """Holds at most one :class:`CacheRecord` per project root.

    The store lives as long as the process; nothing is written to disk.
    It is not thread safe.
    """

    def __init__(self) -> None:
        self._records: dict[Path, CacheRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, root: object) -> bool:
        if not isinstance(root, (str, Path)):
            return False
        return _cache_key(root) in self._records

    def lookup_fingerprint(self, root: Path | str) -> str | None:
        record = self._records.get(_cache_key(root))
        return record.fingerprint if record is not None else None

    def lookup_enumeration(
        self,
        root: Path | str,
        current: str | NoFingerprint,
    ) -> CacheRecord | None:
        """Return the record for *root* if it was stored under *current*.

        A record stored under any other fingerprint is evicted.
        """

        key = _cache_key(root)
        record = self._records.get(key)
        if record is None:
            return None
        if record.fingerprint == current:
            return record
        del self._records[key]
        logger.debug("Evicted stale listing for %s (was %s)", key, record.fingerprint)
        return None

    def store(
        self,
        root: Path | str,
        fingerprint: str | NoFingerprint,
        files: Mapping[str, Path],
    ) -> CacheRecord:
        if not is_fingerprint(fingerprint):
            raise ValueError("Cannot cache a listing without a fingerprint")
        key = _cache_key(root)
        record = CacheRecord(root=key, fingerprint=fingerprint, files=dict(files))
        self._records[key] = record
        logger.debug("Cached %d files for %s at %s", len(record.files), key, fingerprint)
        return record

    def invalidate(self, root: Path | str) -> bool:
        return self._records.pop(_cache_key(root), None) is not None

    def clear(self) -> int:
        count = len(self._records)
        self._records.clear()
        return count

    def records(self) -> list[CacheRecord]:
        return list(self._records.values())
