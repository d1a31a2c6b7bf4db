"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

import sys
from typing import Iterable, Sequence

import typer
from rich.console import Console

_STATUS_SAMPLE = "✓✗"


def _encoding_supports(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    if console is not None and _encoding_supports(_STATUS_SAMPLE, console.encoding):
        return True
    return _encoding_supports(_STATUS_SAMPLE, sys.stdout.encoding)


def format_status_icon(passed: bool, console: Console | None = None) -> str:
    if supports_unicode_output(console):
        return "[green]✓[/green]" if passed else "[red]✗[/red]"
    return "[green]OK[/green]" if passed else "[red]X[/red]"


def escape_porcelain_field(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\t", "\\t")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def render_porcelain(rows: Iterable[Sequence[str]]) -> None:
    """Write one tab separated line per row for scripts and editor glue."""

    for row in rows:
        typer.echo("\t".join(escape_porcelain_field(field) for field in row))
