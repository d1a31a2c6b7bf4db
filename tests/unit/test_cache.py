from __future__ import annotations

from pathlib import Path

import pytest

from projfind.cache import CacheStore
from projfind.fingerprint import NO_FINGERPRINT


def test_store_then_lookup_returns_same_listing(tmp_path):
    store = CacheStore()
    files = {"a.py": tmp_path / "a.py"}

    store.store(tmp_path, "rev1", files)
    record = store.lookup_enumeration(tmp_path, "rev1")

    assert record is not None
    assert record.files == files
    assert record.fingerprint == "rev1"
    assert store.lookup_fingerprint(tmp_path) == "rev1"


def test_store_copies_the_mapping(tmp_path):
    store = CacheStore()
    files = {"a.py": tmp_path / "a.py"}
    store.store(tmp_path, "rev1", files)
    files["b.py"] = tmp_path / "b.py"

    record = store.lookup_enumeration(tmp_path, "rev1")
    assert record is not None
    assert list(record.files) == ["a.py"]


def test_lookup_with_other_fingerprint_evicts(tmp_path):
    store = CacheStore()
    store.store(tmp_path, "rev1", {"a.py": tmp_path / "a.py"})

    assert store.lookup_enumeration(tmp_path, "rev2") is None
    assert store.lookup_fingerprint(tmp_path) is None
    assert tmp_path not in store


def test_lookup_with_sentinel_evicts(tmp_path):
    store = CacheStore()
    store.store(tmp_path, "rev1", {})

    assert store.lookup_enumeration(tmp_path, NO_FINGERPRINT) is None
    assert len(store) == 0


def test_replacement_leaves_no_trace_of_old_listing(tmp_path):
    store = CacheStore()
    store.store(tmp_path, "F1", {"old.py": tmp_path / "old.py"})
    store.store(tmp_path, "F2", {"new.py": tmp_path / "new.py"})

    record = store.lookup_enumeration(tmp_path, "F2")
    assert record is not None
    assert list(record.files) == ["new.py"]
    assert len(store) == 1

    assert store.lookup_enumeration(tmp_path, "F1") is None
    assert store.lookup_enumeration(tmp_path, "F2") is None


def test_store_refuses_missing_fingerprint(tmp_path):
    store = CacheStore()
    with pytest.raises(ValueError):
        store.store(tmp_path, NO_FINGERPRINT, {})
    with pytest.raises(ValueError):
        store.store(tmp_path, "", {})
    assert len(store) == 0


def test_keys_are_normalized(tmp_path):
    store = CacheStore()
    nested = tmp_path / "proj"
    nested.mkdir()
    store.store(nested, "rev", {})

    assert store.lookup_fingerprint(str(nested)) == "rev"
    assert store.lookup_fingerprint(nested / ".." / "proj") == "rev"
    assert str(nested) in store
    assert 42 not in store


def test_invalidate_and_clear(tmp_path):
    store = CacheStore()
    first = tmp_path / "one"
    second = tmp_path / "two"
    store.store(first, "a", {})
    store.store(second, "b", {})

    assert store.invalidate(first) is True
    assert store.invalidate(first) is False
    assert [record.root for record in store.records()] == [second.resolve()]
    assert store.clear() == 1
    assert store.records() == []


def test_unknown_root_is_absent():
    store = CacheStore()
    assert store.lookup_fingerprint(Path("/nowhere")) is None
    assert store.lookup_enumeration(Path("/nowhere"), "rev") is None
