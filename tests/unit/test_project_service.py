from __future__ import annotations

from pathlib import Path

import pytest

from projfind.cache import CacheStore
from projfind.config import Config, RootOverride
from projfind.fingerprint import NO_FINGERPRINT
from projfind.services import project_service
from projfind.services.project_service import (
    ProjectFiles,
    ProjectRootNotFoundError,
    resolve_root,
)


class FakeEnumerator:
    def __init__(self, paths: list[Path]) -> None:
        self.paths = paths
        self.calls: list[dict[str, object]] = []

    def __call__(self, root, patterns, extra_options, limit, **kwargs):
        self.calls.append(
            {
                "root": root,
                "patterns": tuple(patterns),
                "extra_options": extra_options,
                "limit": limit,
                **kwargs,
            }
        )
        return list(self.paths)[:limit]


class FakeFingerprinter:
    def __init__(self, value) -> None:
        self.value = value
        self.calls = 0

    def __call__(self, root):
        self.calls += 1
        return self.value


def _controller(tmp_path: Path, fingerprint_value, paths=None):
    enumerator = FakeEnumerator(paths or [tmp_path / "a" / "x.rb", tmp_path / "b" / "x.rb"])
    fingerprinter = FakeFingerprinter(fingerprint_value)
    controller = ProjectFiles(
        CacheStore(), enumerator=enumerator, fingerprinter=fingerprinter
    )
    return controller, enumerator, fingerprinter


def test_unchanged_fingerprint_serves_cache(tmp_path):
    controller, enumerator, _ = _controller(tmp_path, "rev1")

    first = controller.project_files(tmp_path, ["*.rb"], "", 512)
    second = controller.project_files(tmp_path, ["*.rb"], "", 512)

    assert first.files == second.files
    assert first.cache_hit is False
    assert second.cache_hit is True
    assert len(enumerator.calls) == 1
    assert first.files == {
        "a/x.rb": tmp_path / "a" / "x.rb",
        "b/x.rb": tmp_path / "b" / "x.rb",
    }


def test_changed_fingerprint_rescans(tmp_path):
    controller, enumerator, fingerprinter = _controller(tmp_path, "rev1")

    controller.project_files(tmp_path, ["*.rb"], "", 512)
    fingerprinter.value = "rev2"
    result = controller.project_files(tmp_path, ["*.rb"], "", 512)

    assert result.cache_hit is False
    assert len(enumerator.calls) == 2
    assert controller.store.lookup_fingerprint(tmp_path) == "rev2"


def test_unversioned_root_always_rescans(tmp_path):
    controller, enumerator, _ = _controller(tmp_path, NO_FINGERPRINT)

    for _ in range(3):
        result = controller.project_files(tmp_path, ["*.rb"], "", 512)
        assert result.cache_hit is False

    assert len(enumerator.calls) == 3
    assert len(controller.store) == 0


def test_losing_fingerprint_drops_previous_record(tmp_path):
    controller, enumerator, fingerprinter = _controller(tmp_path, "rev1")
    controller.project_files(tmp_path, ["*.rb"], "", 512)

    fingerprinter.value = NO_FINGERPRINT
    controller.project_files(tmp_path, ["*.rb"], "", 512)
    assert tmp_path not in controller.store

    fingerprinter.value = "rev1"
    result = controller.project_files(tmp_path, ["*.rb"], "", 512)
    assert result.cache_hit is False
    assert len(enumerator.calls) == 3


def test_reverting_fingerprint_is_not_a_stale_hit(tmp_path):
    controller, enumerator, fingerprinter = _controller(tmp_path, "F1")
    controller.project_files(tmp_path, ["*.rb"], "", 512)
    fingerprinter.value = "F2"
    controller.project_files(tmp_path, ["*.rb"], "", 512)
    fingerprinter.value = "F1"
    result = controller.project_files(tmp_path, ["*.rb"], "", 512)

    assert result.cache_hit is False
    assert len(enumerator.calls) == 3


def test_limit_caps_listing(tmp_path):
    paths = [tmp_path / f"f{idx}.py" for idx in range(20)]
    controller, enumerator, _ = _controller(tmp_path, "rev", paths=paths)

    result = controller.project_files(tmp_path, ["*.py"], "", 5)

    assert len(result.files) == 5
    assert enumerator.calls[0]["limit"] == 5


def test_refresh_forces_scan(tmp_path):
    controller, enumerator, _ = _controller(tmp_path, "rev")
    controller.project_files(tmp_path, ["*.rb"], "", 512)
    result = controller.project_files(tmp_path, ["*.rb"], "", 512, refresh=True)

    assert result.cache_hit is False
    assert len(enumerator.calls) == 2


def test_returned_mapping_does_not_alias_cache(tmp_path):
    controller, _, _ = _controller(tmp_path, "rev")
    first = controller.project_files(tmp_path, ["*.rb"], "", 512)
    first.files.clear()

    second = controller.project_files(tmp_path, ["*.rb"], "", 512)
    assert second.cache_hit is True
    assert len(second.files) == 2


def test_enumerator_receives_arguments(tmp_path):
    controller, enumerator, _ = _controller(tmp_path, "rev")
    controller.project_files(
        tmp_path,
        ["*.py", "*.rb"],
        "-not -path '*/vendor/*'",
        64,
        backend="walk",
        respect_gitignore=False,
    )
    call = enumerator.calls[0]
    assert call["root"] == tmp_path.resolve()
    assert call["patterns"] == ("*.py", "*.rb")
    assert call["extra_options"] == "-not -path '*/vendor/*'"
    assert call["limit"] == 64
    assert call["backend"] == "walk"
    assert call["respect_gitignore"] is False


def test_files_for_config_uses_defaults(tmp_path):
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "src" / "deep"
    nested.mkdir(parents=True)
    controller, enumerator, _ = _controller(tmp_path, "rev")
    config = Config(patterns=("*.rb",), find_options="-size -1M", limit=9)

    result = controller.files_for_config(config, nested)

    assert result.root == tmp_path.resolve()
    call = enumerator.calls[0]
    assert call["patterns"] == ("*.rb",)
    assert call["extra_options"] == "-size -1M"
    assert call["limit"] == 9
    assert call["backend"] == "find"


def test_resolve_root_default_walks_upwards(tmp_path):
    (tmp_path / "marker.txt").write_text("x", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    config = Config(project_markers=("marker.txt",))

    assert resolve_root(config, nested) == tmp_path.resolve()


def test_resolve_root_literal_override(tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    config = Config(root=RootOverride.from_path(other))
    assert resolve_root(config, tmp_path) == other.resolve()


def test_resolve_root_callable_override(tmp_path):
    seen: list[Path] = []

    def resolver(start: Path):
        seen.append(start)
        return start / "sub"

    (tmp_path / "sub").mkdir()
    config = Config(root=RootOverride.from_resolver(resolver))

    assert resolve_root(config, tmp_path) == (tmp_path / "sub").resolve()
    assert seen == [tmp_path.resolve()]


def test_resolve_root_not_found(tmp_path, monkeypatch):
    monkeypatch.setattr(project_service, "find_project_root", lambda *_a, **_k: None)
    with pytest.raises(ProjectRootNotFoundError) as exc:
        resolve_root(Config(), tmp_path)
    assert ".git" in str(exc.value)

    config = Config(root=RootOverride.from_resolver(lambda _start: None))
    with pytest.raises(ProjectRootNotFoundError):
        resolve_root(config, tmp_path)

    missing = Config(root=RootOverride.from_path(tmp_path / "missing"))
    with pytest.raises(ProjectRootNotFoundError):
        resolve_root(missing, tmp_path)
