"""
CLI: ``pagequery run`` and ``pagequery settings``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from pagequery.cli.utils import console, fail, parse_pairs, parse_snippet


def run(
    corpus: Path = typer.Argument(..., help="Corpus file (YAML or JSON)"),
    query: str = typer.Option("*", "--query", "-q", help="Name regex with optional ns:/@/^/-ns: tokens"),
    context: str = typer.Option("", "--context", "-c", help="Id of the page the query runs from"),
    fulltext: bool = typer.Option(False, "--fulltext", help="Full-text search instead of name regex"),
    fullregex: bool = typer.Option(False, "--fullregex", help="Match the regex against the full id"),
    sort: list[str] = typer.Option([], "--sort", "-s", help="KEY[:asc|desc], comma separated, repeatable"),
    filter: list[str] = typer.Option([], "--filter", "-f", help="[^]KEY:EXPR, repeatable"),
    group: bool = typer.Option(False, "--group", "-g", help="Group by the sort keys"),
    limit: int = typer.Option(0, "--limit", "-n", help="Keep the first N sorted results"),
    maxns: int = typer.Option(0, "--maxns", help="Maximum namespace depth"),
    hidestart: bool = typer.Option(False, "--hidestart", help="Hide namespace start pages"),
    casesort: bool = typer.Option(False, "--casesort", help="Case-sensitive sorting"),
    natsort: bool = typer.Option(False, "--natsort", help="Natural (numeric-aware) sorting"),
    spelldate: bool = typer.Option(False, "--spelldate", help="Spell dates in words in headings"),
    display: str = typer.Option("name", "--display", "-d", help="Column name or {template}"),
    dformat: str | None = typer.Option(None, "--dformat", help="strftime format for dates in --display"),
    snippet: str | None = typer.Option(None, "--snippet", help="TYPE[,COUNT[,EXTENT]]"),
    proper: str = typer.Option("none", "--proper", help="none, header, name or both"),
    layout: str = typer.Option("outline", "--layout", "-l", help="outline or json"),
    showcount: bool = typer.Option(False, "--showcount", help="Show the number of results"),
    label: str = typer.Option("", "--label", help="Label printed above the results"),
    hidemsg: bool = typer.Option(False, "--hidemsg", help="Print nothing when there are no results"),
    nstitle: bool = typer.Option(False, "--nstitle", help="Use start page titles for namespace headings"),
) -> None:
    """Run a query over a corpus file and print the report."""
    from pagequery.adapters.memory import InMemoryCorpus
    from pagequery.core.errors import PagequeryError
    from pagequery.core.models import QueryContext
    from pagequery.core.settings import get_settings
    from pagequery.query.options import QueryOptions
    from pagequery.query.pipeline import Collaborators, Pipeline, QueryStatus
    from pagequery.render.base import renderer_for

    try:
        source = InMemoryCorpus.from_file(corpus)
    except PagequeryError as e:
        fail(e)

    options = QueryOptions(
        query=query,
        fulltext=fulltext,
        fullregex=fullregex,
        sort=parse_pairs(sort),
        filter=parse_pairs(filter, split_commas=False),
        group=group,
        limit=limit,
        maxns=maxns,
        hidestart=hidestart,
        casesort=casesort,
        natsort=natsort,
        spelldate=spelldate,
        display=display,
        dformat=dformat,
        snippet=parse_snippet(snippet),
        proper=proper,
        layout=layout,
        showcount=showcount,
        label=label,
        hidemsg=hidemsg,
        nstitle=nstitle,
    )
    settings = get_settings()
    report = Pipeline(
        Collaborators.from_corpus(source),
        context=QueryContext(page_id=context, settings=settings),
    ).run(options)

    output = renderer_for(options.layout)(options, sep=settings.separator).render(report)
    if output:
        console.print(output, markup=False, emoji=False, highlight=False, soft_wrap=True)

    if report.status in (QueryStatus.INVALID_PATTERN, QueryStatus.FAILED):
        raise typer.Exit(code=1)


def show_settings(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective settings."""
    from pagequery.core.settings import get_settings

    settings = get_settings()

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in settings.model_dump().items():
            console.print(f"PAGEQUERY_{key.upper()}={value}", markup=False, highlight=False)
        return

    from rich.table import Table

    table = Table(title="Settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)
