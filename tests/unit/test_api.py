from __future__ import annotations

from pathlib import Path

import pytest

from projfind import api as api_module
from projfind.config import Config
from projfind.services.project_service import ProjectFiles


def _repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    git_dir = root / ".git"
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (git_dir / "refs" / "heads" / "main").write_text("abc123\n", encoding="utf-8")
    (root / "app").mkdir()
    (root / "lib").mkdir()
    return root


def _finder(config: Config, paths: list[Path]):
    calls: list[int] = []

    def fake_enumerate(root, patterns, extra_options, limit, **_kwargs):
        calls.append(limit)
        return paths[:limit]

    finder = api_module.ProjectFinder(
        config, project_files=ProjectFiles(enumerator=fake_enumerate)
    )
    return finder, calls


def test_files_are_cached_per_revision(tmp_path):
    root = _repo(tmp_path)
    paths = [root / "app" / "user.rb", root / "lib" / "user.rb", root / "app" / "main.rb"]
    finder, calls = _finder(Config(), paths)

    first = finder.files(root / "app")
    second = finder.files(root)

    assert first == second
    assert set(first) == {"app/user.rb", "lib/user.rb", "main.rb"}
    assert calls == [512]

    (root / ".git" / "refs" / "heads" / "main").write_text("def456\n", encoding="utf-8")
    finder.files(root)
    assert len(calls) == 2


def test_entries_honour_full_paths(tmp_path):
    root = _repo(tmp_path)
    paths = [root / "app" / "main.rb"]
    finder, _ = _finder(Config(full_paths=True), paths)

    entries = finder.entries(root)
    assert [entry.display_name for entry in entries] == ["app/main.rb"]


def test_resolve_name_maps_back_to_path(tmp_path):
    root = _repo(tmp_path)
    paths = [root / "app" / "user.rb", root / "lib" / "user.rb"]
    finder, _ = _finder(Config(), paths)

    assert finder.resolve_name("lib/user.rb", root) == root / "lib" / "user.rb"
    with pytest.raises(api_module.ProjectFinderError):
        finder.resolve_name("user.rb", root)


def test_invalid_input_raises_finder_error(tmp_path):
    root = _repo(tmp_path)
    finder, _ = _finder(Config(), [])

    with pytest.raises(api_module.ProjectFinderError):
        finder.files(root, limit=0)
    with pytest.raises(api_module.ProjectFinderError):
        finder.files(root, backend="locate")


def test_missing_root_raises_finder_error(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "projfind.services.project_service.find_project_root", lambda *_a, **_k: None
    )
    finder, _ = _finder(Config(), [])

    with pytest.raises(api_module.ProjectFinderError):
        finder.root(tmp_path)
    with pytest.raises(api_module.ProjectFinderError):
        finder.files(tmp_path)


def test_invalidate_forces_rescan(tmp_path):
    root = _repo(tmp_path)
    finder, calls = _finder(Config(), [root / "app" / "main.rb"])

    finder.files(root)
    assert finder.invalidate(root) is True
    finder.files(root)
    assert len(calls) == 2


def test_module_helpers_use_default_finder(tmp_path, monkeypatch):
    root = _repo(tmp_path)
    finder, calls = _finder(Config(), [root / "app" / "main.rb"])
    monkeypatch.setattr(api_module, "_DEFAULT_FINDER", finder)

    assert api_module.default_finder() is finder
    assert api_module.project_files(root, limit=3) == {"main.rb": root / "app" / "main.rb"}
    assert api_module.find_project_root(root / "app") == root.resolve()
    assert calls == [3]


def test_config_context_applies_payload_and_callable_root(tmp_path):
    target = tmp_path / "chosen"
    target.mkdir()

    with api_module.config_context(
        payload={"limit": 5, "patterns": ["*.go"]},
        root=lambda _start: target,
        config_dir=tmp_path / "cfg",
    ) as finder:
        assert finder.config.limit == 5
        assert finder.config.patterns == ("*.go",)
        assert finder.root(tmp_path) == target.resolve()

    with api_module.config_context(root=target, config_dir=tmp_path / "cfg") as finder:
        assert finder.config.root.kind == "path"
        assert finder.root() == target.resolve()


def test_entries_and_resolve_name_load_config_once(tmp_path, monkeypatch):
    root = _repo(tmp_path)
    loads: list[int] = []

    def counting_load_config() -> Config:
        loads.append(1)
        return Config(full_paths=True)

    monkeypatch.setattr(api_module, "load_config", counting_load_config)
    finder = api_module.ProjectFinder(
        project_files=ProjectFiles(
            enumerator=lambda *_a, **_k: [root / "app" / "main.rb"]
        )
    )

    entries = finder.entries(root)
    assert [entry.display_name for entry in entries] == ["app/main.rb"]
    assert len(loads) == 1

    assert finder.resolve_name("app/main.rb", root) == root / "app" / "main.rb"
    assert len(loads) == 2
