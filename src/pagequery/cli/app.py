"""
Root Typer application for the pagequery CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from pagequery.cli.query import run, show_settings

app = Typer(
    name="pagequery",
    help="pagequery: select, filter, sort and group records from a corpus.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from pagequery import __version__

        typer.echo(f"pagequery {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override PAGEQUERY_LOG_LEVEL"),
) -> None:
    """pagequery CLI: run record queries against YAML or JSON corpora."""
    from pydantic import ValidationError

    from pagequery.cli.utils import fail
    from pagequery.core.errors import ConfigError
    from pagequery.core.logging import configure_logging
    from pagequery.core.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        fail(ConfigError(f"Invalid PAGEQUERY_* settings: {e.error_count()} error(s)", cause=e))
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


# ── Command registration ─────────────────────────────────────────────────

app.command("run")(run)
app.command("settings")(show_settings)


if __name__ == "__main__":
    app()
