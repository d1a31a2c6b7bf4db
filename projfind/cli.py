"""Command line interface for projfind."""

from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config as config_module
from .config import Config, load_config, normalize_backend
from .fingerprint import fingerprint, is_fingerprint
from .naming import FileEntry, display_entries, match_names
from .output import format_status_icon, render_porcelain
from .services.enumerate_service import build_find_command, find_command_path
from .services.project_service import (
    ProjectFiles,
    ProjectFilesResult,
    ProjectRootNotFoundError,
    resolve_root,
)
from .text import Messages, Styles
from .utils import ensure_positive, format_path, normalize_patterns

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# One controller per process so repeated lookups share the cache.
project_files = ProjectFiles()


class ListOutputFormat(str, Enum):
    rich = "rich"
    porcelain = "porcelain"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"projfind v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except (ValueError, OSError) as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)


def _collect(
    path: Path | None,
    patterns: list[str] | None,
    options: str | None,
    limit: int | None,
    backend: str | None,
) -> tuple[Config, ProjectFilesResult]:
    config = _load_config_or_exit()
    if limit is not None:
        try:
            ensure_positive(limit, "limit")
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    if backend is not None:
        try:
            backend = normalize_backend(backend)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    try:
        result = project_files.files_for_config(
            config,
            path,
            patterns=normalize_patterns(patterns),
            extra_options=options,
            limit=limit,
            backend=backend,
        )
    except ProjectRootNotFoundError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    return config, result


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Global Typer callback for shared options."""
    _configure_logging(verbose)


@app.command(help=Messages.HELP_ROOT)
def root(
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    config = _load_config_or_exit()
    try:
        project_root = resolve_root(config, path)
    except ProjectRootNotFoundError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    typer.echo(str(project_root))


@app.command("list", help=Messages.HELP_LIST)
def list_files(
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
    patterns: list[str] | None = typer.Option(
        None, "--pattern", "-g", help=Messages.HELP_PATTERN
    ),
    options: str | None = typer.Option(None, "--options", help=Messages.HELP_OPTIONS),
    limit: int | None = typer.Option(None, "--limit", "-l", help=Messages.HELP_LIMIT),
    full_paths: bool | None = typer.Option(
        None, "--full-paths/--short-names", help=Messages.HELP_FULL_PATHS
    ),
    backend: str | None = typer.Option(None, "--backend", "-b", help=Messages.HELP_BACKEND),
    output_format: ListOutputFormat = typer.Option(
        ListOutputFormat.rich, "--format", help=Messages.HELP_FORMAT
    ),
) -> None:
    config, result = _collect(path, patterns, options, limit, backend)
    show_full = config.full_paths if full_paths is None else full_paths
    entries = display_entries(result.files, full_paths=show_full, root=result.root)
    if not entries:
        message = Messages.INFO_NO_FILES.format(path=result.root)
        if output_format == ListOutputFormat.rich:
            console.print(_styled(message, Styles.WARNING))
        else:
            typer.echo(message, err=True)
        raise typer.Exit(code=0)

    if output_format == ListOutputFormat.porcelain:
        render_porcelain((entry.display_name, str(entry.path)) for entry in entries)
        return
    _render_entries(entries, result)


@app.command(help=Messages.HELP_PICK)
def pick(
    query: str | None = typer.Argument(None, help=Messages.HELP_QUERY),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
    patterns: list[str] | None = typer.Option(
        None, "--pattern", "-g", help=Messages.HELP_PATTERN
    ),
    options: str | None = typer.Option(None, "--options", help=Messages.HELP_OPTIONS),
    limit: int | None = typer.Option(None, "--limit", "-l", help=Messages.HELP_LIMIT),
    full_paths: bool | None = typer.Option(
        None, "--full-paths/--short-names", help=Messages.HELP_FULL_PATHS
    ),
    backend: str | None = typer.Option(None, "--backend", "-b", help=Messages.HELP_BACKEND),
) -> None:
    config, result = _collect(path, patterns, options, limit, backend)
    show_full = config.full_paths if full_paths is None else full_paths
    entries = display_entries(result.files, full_paths=show_full, root=result.root)
    if not entries:
        console.print(_styled(Messages.INFO_NO_FILES.format(path=result.root), Styles.WARNING))
        raise typer.Exit(code=1)

    by_name = {entry.display_name: entry for entry in entries}
    names = match_names(list(by_name), query or "")
    if not names:
        console.print(_styled(Messages.INFO_NO_MATCHES.format(query=query), Styles.WARNING))
        raise typer.Exit(code=1)
    if len(names) == 1:
        typer.echo(str(by_name[names[0]].path))
        return

    candidates = [by_name[name] for name in names]
    _render_entries(candidates, result, stderr=True)
    choice = typer.prompt(Messages.INFO_PICK_PROMPT, err=True).strip()
    selected = _select_entry(candidates, by_name, choice)
    if selected is None:
        console.print(_styled(Messages.ERROR_PICK_INVALID.format(value=choice), Styles.ERROR))
        raise typer.Exit(code=1)
    typer.echo(str(selected.path))


def _select_entry(
    candidates: Sequence[FileEntry],
    by_name: dict[str, FileEntry],
    choice: str,
) -> FileEntry | None:
    if choice.isdigit():
        idx = int(choice)
        if 1 <= idx <= len(candidates):
            return candidates[idx - 1]
        return None
    return by_name.get(choice)


@app.command(help=Messages.HELP_CONFIG)
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    set_patterns_option: list[str] | None = typer.Option(
        None, "--set-pattern", help=Messages.HELP_SET_PATTERNS
    ),
    set_options_option: str | None = typer.Option(
        None, "--set-options", help=Messages.HELP_SET_OPTIONS
    ),
    set_limit_option: int | None = typer.Option(
        None, "--set-limit", help=Messages.HELP_SET_LIMIT
    ),
    set_full_paths_option: str | None = typer.Option(
        None, "--set-full-paths", help=Messages.HELP_SET_FULL_PATHS
    ),
    set_backend_option: str | None = typer.Option(
        None, "--set-backend", help=Messages.HELP_SET_BACKEND
    ),
    set_gitignore_option: str | None = typer.Option(
        None, "--set-respect-gitignore", help=Messages.HELP_SET_GITIGNORE
    ),
    set_root_option: Path | None = typer.Option(
        None, "--set-root", help=Messages.HELP_SET_ROOT
    ),
    clear_root: bool = typer.Option(False, "--clear-root", help=Messages.HELP_CLEAR_ROOT),
    add_marker_option: list[str] | None = typer.Option(
        None, "--add-marker", help=Messages.HELP_ADD_MARKER
    ),
) -> None:
    """Show or update the stored configuration."""
    changed = False
    try:
        if set_patterns_option:
            patterns = normalize_patterns(set_patterns_option)
            if patterns:
                config_module.set_patterns(patterns)
                changed = True
        if set_options_option is not None:
            config_module.set_find_options(set_options_option)
            changed = True
        if set_limit_option is not None:
            config_module.set_limit(set_limit_option)
            changed = True
        if set_full_paths_option is not None:
            config_module.set_full_paths(_parse_boolean(set_full_paths_option))
            changed = True
        if set_backend_option is not None:
            config_module.set_backend(set_backend_option)
            changed = True
        if set_gitignore_option is not None:
            config_module.set_respect_gitignore(_parse_boolean(set_gitignore_option))
            changed = True
        if set_root_option is not None:
            root_path = set_root_option.expanduser().resolve()
            if not root_path.is_dir():
                raise ValueError(Messages.ERROR_ROOT_NOT_DIRECTORY.format(path=root_path))
            config_module.set_root(root_path)
            changed = True
        if clear_root:
            config_module.set_root(None)
            changed = True
        if add_marker_option:
            config_module.add_project_markers(add_marker_option)
            changed = True
    except json.JSONDecodeError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if changed:
        console.print(
            _styled(
                Messages.INFO_CONFIG_UPDATED.format(path=config_module.config_file_path()),
                Styles.SUCCESS,
            )
        )
    if show or not changed:
        _render_config_summary(_load_config_or_exit())


@app.command(help=Messages.HELP_DOCTOR)
def doctor(
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    config = _load_config_or_exit()
    find_path = find_command_path()
    find_ok = find_path is not None or config.backend == "walk"
    message = (
        Messages.DOCTOR_FIND_FOUND.format(path=find_path)
        if find_path
        else Messages.DOCTOR_FIND_MISSING
    )
    console.print(f"  {format_status_icon(find_ok, console=console)} {message}")

    start = path if path is not None else Path.cwd()
    try:
        project_root = resolve_root(config, start)
    except ProjectRootNotFoundError:
        console.print(
            f"  {format_status_icon(False, console=console)} "
            f"{Messages.DOCTOR_ROOT_MISSING.format(path=start)}"
        )
        raise typer.Exit(code=1)
    console.print(
        f"  {format_status_icon(True, console=console)} "
        f"{Messages.DOCTOR_ROOT_FOUND.format(path=project_root)}"
    )

    current = fingerprint(project_root)
    if is_fingerprint(current):
        console.print(
            f"  {format_status_icon(True, console=console)} "
            f"{Messages.DOCTOR_FINGERPRINT.format(value=current)}"
        )
    else:
        console.print(
            f"  {format_status_icon(False, console=console)} "
            f"{_styled(Messages.DOCTOR_FINGERPRINT_NONE, Styles.WARNING)}"
        )
    if config.backend == "find":
        try:
            command = build_find_command(project_root, config.patterns, config.find_options)
        except ValueError as exc:
            console.print(_styled(str(exc), Styles.ERROR))
            raise typer.Exit(code=1)
        console.print(
            _styled(Messages.DOCTOR_COMMAND.format(command=" ".join(command)), Styles.INFO),
            markup=True,
            highlight=False,
        )
    if not find_ok:
        raise typer.Exit(code=1)


def _render_config_summary(config: Config) -> None:
    if config.root.kind == "path":
        root_label = str(config.root.path)
    elif config.root.kind == "resolver":
        root_label = "callable"
    else:
        root_label = "none"
    console.print(
        Messages.INFO_CONFIG_SUMMARY.format(
            markers=", ".join(config.project_markers),
            root=root_label,
            patterns=", ".join(config.patterns),
            options=config.find_options or "none",
            limit=config.limit,
            full_paths="yes" if config.full_paths else "no",
            backend=config.backend,
            gitignore="yes" if config.respect_gitignore else "no",
        ),
        markup=False,
        highlight=False,
    )


def _render_entries(
    entries: Sequence[FileEntry],
    result: ProjectFilesResult,
    *,
    stderr: bool = False,
) -> None:
    target = err_console if stderr else console
    source = Messages.INFO_SOURCE_CACHE if result.cache_hit else Messages.INFO_SOURCE_SCAN
    count = len(entries)
    target.print(_styled(Messages.TABLE_TITLE, Styles.TITLE))
    target.print(
        _styled(
            Messages.INFO_FILES_SUMMARY.format(
                count=count,
                plural="" if count == 1 else "s",
                path=result.root,
                source=source,
            ),
            Styles.INFO,
        )
    )
    table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_NAME, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    for idx, entry in enumerate(entries, start=1):
        table.add_row(str(idx), entry.display_name, format_path(entry.path, result.root))
    target.print(table)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    app(args=list(argv) if argv is not None else sys.argv[1:])
