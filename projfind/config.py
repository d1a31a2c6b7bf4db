"""Global configuration management for projfind."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".projfind"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "projfind_config_dir_override",
    default=None,
)
DEFAULT_PROJECT_MARKERS: tuple[str, ...] = (".git",)
DEFAULT_PATTERNS: tuple[str, ...] = (
    "*.py",
    "*.rb",
    "*.js",
    "*.ts",
    "*.go",
    "*.rs",
    "*.java",
    "*.c",
    "*.h",
    "*.cpp",
    "*.sh",
    "*.md",
    "*.txt",
    "*.yml",
    "*.yaml",
    "*.toml",
    "*.json",
    "*.html",
    "*.css",
)
DEFAULT_FIND_OPTIONS = ""
DEFAULT_LIMIT = 512
DEFAULT_BACKEND = "find"
SUPPORTED_BACKENDS: tuple[str, ...] = (DEFAULT_BACKEND, "walk")
ENV_ROOT = "PROJFIND_ROOT"

RootResolver = Callable[[Path], "Path | str | None"]


@dataclass(frozen=True)
class RootOverride:
    """How the project root is chosen: marker lookup, a fixed path, or a callable."""

    kind: str = "default"
    path: Path | None = None
    resolver: RootResolver | None = None

    @classmethod
    def default(cls) -> "RootOverride":
        return cls()

    @classmethod
    def from_path(cls, path: Path | str) -> "RootOverride":
        return cls(kind="path", path=Path(path).expanduser())

    @classmethod
    def from_resolver(cls, resolver: RootResolver) -> "RootOverride":
        if not callable(resolver):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="root"))
        return cls(kind="resolver", resolver=resolver)

    @property
    def is_default(self) -> bool:
        return self.kind == "default"


@dataclass
class Config:
    project_markers: tuple[str, ...] = DEFAULT_PROJECT_MARKERS
    root: RootOverride = field(default_factory=RootOverride.default)
    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    find_options: str = DEFAULT_FIND_OPTIONS
    limit: int = DEFAULT_LIMIT
    full_paths: bool = False
    backend: str = DEFAULT_BACKEND
    respect_gitignore: bool = True


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def config_file_path() -> Path:
    return _resolve_config_file()


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return _apply_env(Config())
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    config = Config()
    _apply_config_payload(config, raw)
    return _apply_env(config)


def _apply_env(config: Config) -> Config:
    if not config.root.is_default:
        return config
    env_root = (os.getenv(ENV_ROOT) or "").strip()
    if env_root:
        config.root = RootOverride.from_path(env_root)
    return config


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    data["project_markers"] = list(config.project_markers)
    if config.root.kind == "path" and config.root.path is not None:
        data["root"] = str(config.root.path)
    data["patterns"] = list(config.patterns)
    if config.find_options:
        data["find_options"] = config.find_options
    data["limit"] = config.limit
    data["full_paths"] = bool(config.full_paths)
    data["backend"] = config.backend
    data["respect_gitignore"] = bool(config.respect_gitignore)
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else _clone_config(base)
    _apply_config_payload(config, data)
    return config


def set_patterns(values: tuple[str, ...] | list[str]) -> None:
    config = load_config()
    config.patterns = _coerce_str_tuple(list(values), "patterns", DEFAULT_PATTERNS)
    save_config(config)


def set_find_options(value: str | None) -> None:
    config = load_config()
    config.find_options = (value or "").strip()
    save_config(config)


def set_limit(value: int) -> None:
    config = load_config()
    config.limit = _coerce_limit(value)
    save_config(config)


def set_full_paths(value: bool) -> None:
    config = load_config()
    config.full_paths = bool(value)
    save_config(config)


def set_backend(value: str) -> None:
    config = load_config()
    config.backend = normalize_backend(value)
    save_config(config)


def set_respect_gitignore(value: bool) -> None:
    config = load_config()
    config.respect_gitignore = bool(value)
    save_config(config)


def set_root(value: Path | str | None) -> None:
    config = load_config()
    config.root = RootOverride.default() if value is None else RootOverride.from_path(value)
    save_config(config)


def add_project_markers(values: list[str]) -> None:
    config = load_config()
    markers = list(config.project_markers)
    for value in values:
        clean = (value or "").strip()
        if clean and clean not in markers:
            markers.append(clean)
    config.project_markers = tuple(markers)
    save_config(config)


def normalize_backend(value: object) -> str:
    if value is None:
        return DEFAULT_BACKEND
    if isinstance(value, str):
        normalized = value.strip().lower() or DEFAULT_BACKEND
        if normalized in SUPPORTED_BACKENDS:
            return normalized
        raise ValueError(
            Messages.ERROR_BACKEND_INVALID.format(
                value=value, allowed=", ".join(SUPPORTED_BACKENDS)
            )
        )
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="backend"))


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _clone_config(config: Config) -> Config:
    return Config(
        project_markers=tuple(config.project_markers),
        root=config.root,
        patterns=tuple(config.patterns),
        find_options=config.find_options,
        limit=config.limit,
        full_paths=config.full_paths,
        backend=config.backend,
        respect_gitignore=config.respect_gitignore,
    )


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "project_markers" in payload:
        config.project_markers = _coerce_str_tuple(
            payload["project_markers"], "project_markers", DEFAULT_PROJECT_MARKERS
        )
    if "root" in payload:
        config.root = _coerce_root(payload["root"])
    if "patterns" in payload:
        config.patterns = _coerce_str_tuple(payload["patterns"], "patterns", DEFAULT_PATTERNS)
    if "find_options" in payload:
        config.find_options = _coerce_optional_str(payload["find_options"], "find_options") or ""
    if "limit" in payload:
        config.limit = _coerce_limit(payload["limit"])
    if "full_paths" in payload:
        config.full_paths = _coerce_bool(payload["full_paths"], "full_paths")
    if "backend" in payload:
        config.backend = normalize_backend(payload["backend"])
    if "respect_gitignore" in payload:
        config.respect_gitignore = _coerce_bool(
            payload["respect_gitignore"], "respect_gitignore"
        )


def _coerce_root(value: object) -> RootOverride:
    if value is None:
        return RootOverride.default()
    if isinstance(value, RootOverride):
        return value
    if isinstance(value, (str, Path)):
        cleaned = str(value).strip()
        if not cleaned:
            return RootOverride.default()
        return RootOverride.from_path(cleaned)
    if callable(value):
        return RootOverride.from_resolver(value)
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="root"))


def _coerce_str_tuple(value: object, field: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
        cleaned = item.strip()
        if cleaned and cleaned not in items:
            items.append(cleaned)
    return tuple(items) if items else default


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_int(value: object, field: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return default
        try:
            return int(cleaned)
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_limit(value: object) -> int:
    limit = _coerce_int(value, "limit", DEFAULT_LIMIT)
    if limit <= 0:
        raise ValueError(Messages.ERROR_LIMIT_INVALID)
    return limit


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
