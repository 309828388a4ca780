"""
CLI utility helpers: consoles, flag parsing and error output.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NoReturn

import typer
from rich.console import Console

from pagequery.core.errors import PagequeryError
from pagequery.query.options import SnippetOptions

console = Console()
err_console = Console(stderr=True)


# ── Flag parsing ─────────────────────────────────────────────────────────


def parse_pairs(values: Iterable[str], *, split_commas: bool = True) -> dict[str, str]:
    """
    Turn ``KEY:VALUE`` flags into an ordered mapping.

    A key without ``:`` maps to ``""``. Only the first ``:`` separates key
    from value, so values may contain colons (``filter ns:wiki:.*``).

    >>> parse_pairs(["name:asc,cdate", "title"])
    {'name': 'asc', 'cdate': '', 'title': ''}
    >>> parse_pairs(["ns:^wiki:a,b"], split_commas=False)
    {'ns': '^wiki:a,b'}
    """
    pairs: dict[str, str] = {}
    for value in values:
        items = value.split(",") if split_commas else [value]
        for item in items:
            key, _, expr = item.partition(":")
            key = key.strip()
            if key:
                pairs[key] = expr.strip()
    return pairs


def parse_snippet(value: str | None) -> SnippetOptions:
    """``TYPE[,COUNT[,EXTENT]]`` → SnippetOptions.

    >>> parse_snippet("inline,3,w5")
    SnippetOptions(type=<SnippetType.INLINE: 'inline'>, count=3, extent='w5')
    """
    if not value:
        return SnippetOptions()
    parts = [part.strip() for part in value.split(",")]
    snippet_type = parts[0]
    try:
        count = abs(int(parts[1])) if len(parts) > 1 and parts[1] else 0
    except ValueError:
        raise typer.BadParameter(f"snippet count must be an integer: {parts[1]!r}") from None
    extent = parts[2] if len(parts) > 2 else ""
    return SnippetOptions(type=snippet_type, count=count, extent=extent)


# ── Output helpers ───────────────────────────────────────────────────────


def fail(error: PagequeryError | Exception, code: int = 1) -> NoReturn:
    """Print an error to stderr and exit."""
    if isinstance(error, PagequeryError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")
    raise typer.Exit(code=code)
