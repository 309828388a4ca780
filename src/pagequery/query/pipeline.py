"""
Query pipeline orchestrator.

Manifesto:
    One call, one report. The pipeline runs every stage to completion and
    never raises: expected failures (bad pattern, nothing found, everything
    filtered out) become a :class:`QueryStatus`, and an unexpected collaborator
    failure becomes ``FAILED`` with the error attached.

    - **Explicit context:** settings and the context page come in through
      :class:`~pagequery.core.models.QueryContext`, never from globals
    - **Limit after sort:** the limit keeps the first N *sorted* rows
    - **Count before group:** ``count`` is the number of leaf rows

Architecture:
    ::

        QueryOptions
            │
            ▼
        resolve   NamespaceQueryParser → lookup_records | fulltext_records
            │                         Err ──► INVALID_PATTERN
            ▼
        validate  start pages, depth, ACL        [] ──► NO_RESULTS
            ▼
        project   RecordProjector
            ▼
        filter    MetadataFilter                 [] ──► EMPTY_AFTER_FILTER
            ▼
        sort      sort_rows (stable, multi-key)
            ▼
        limit     rows[:limit]
            ▼
        group     HierarchicalGrouper
            ▼
        QueryReport(status=OK, results, count)

Examples:
    >>> from pagequery.adapters.memory import InMemoryCorpus
    >>> corpus = InMemoryCorpus({"a:start": {}, "a:b:page1": {}, "a:b:page2": {}})
    >>> report = Pipeline(Collaborators.from_corpus(corpus)).run(
    ...     QueryOptions(query="ns:a", sort={"ns": "", "name": "asc"}, group=True, hidestart=True)
    ... )
    >>> [(r.level, r.label) for r in report.results]
    [(1, 'a'), (2, 'b'), (0, 'page1'), (0, 'page2')]

Tags:
    pipeline, orchestrator, query, status, pagequery
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pagequery.core.errors import PagequeryError
from pagequery.core.logging import LogContext, get_logger, log_step
from pagequery.core.models import DEFAULT_RESULT_COLUMNS, QueryContext, ResultRow
from pagequery.core.paths import PathResolver
from pagequery.core.protocols import AccessControl, MetadataStore, NamespaceResolver, PageIndex, PageRegistry
from pagequery.core.result import Result
from pagequery.query.filters import MetadataFilter
from pagequery.query.grouping import HierarchicalGrouper
from pagequery.query.lookup import MATCH_ALL, fulltext_records, lookup_records, validate_records
from pagequery.query.namespace import NamespaceQueryParser, is_namespace_token
from pagequery.query.options import QueryOptions
from pagequery.query.projector import RecordProjector
from pagequery.query.sorting import sort_rows

log = get_logger(__name__)


class QueryStatus(str, Enum):
    """Outcome of one pipeline run."""

    OK = "ok"
    NO_RESULTS = "no_results"
    INVALID_PATTERN = "invalid_pattern"
    EMPTY_AFTER_FILTER = "empty_after_filter"
    FAILED = "failed"


STATUS_MESSAGES = {
    QueryStatus.NO_RESULTS: "Nothing found",
    QueryStatus.INVALID_PATTERN: "Invalid search pattern",
    QueryStatus.EMPTY_AFTER_FILTER: "Nothing left after filtering",
    QueryStatus.FAILED: "Query failed",
}


@dataclass
class QueryReport:
    """Result of one pipeline run."""

    status: QueryStatus
    query: str = ""
    results: list[ResultRow] = field(default_factory=list)
    count: int = 0
    sorted: bool = False
    message: str = ""
    error: PagequeryError | Exception | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status is QueryStatus.OK

    @property
    def duration_seconds(self) -> float | None:
        """Duration in seconds if completed."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status.value,
            "query": self.query,
            "count": self.count,
            "sorted": self.sorted,
            "message": self.message,
            "results": [row.to_dict() for row in self.results],
        }
        if self.error is not None:
            data["error"] = (
                self.error.to_dict() if isinstance(self.error, PagequeryError) else {"message": str(self.error)}
            )
        return data


@dataclass(frozen=True)
class Collaborators:
    """The host services one pipeline run reads from."""

    index: PageIndex
    metadata: MetadataStore
    acl: AccessControl
    registry: PageRegistry

    @classmethod
    def from_corpus(cls, corpus: Any) -> Collaborators:
        """Use one object that implements every contract."""
        return cls(index=corpus, metadata=corpus, acl=corpus, registry=corpus)


def expand_lone_namespace(query: str) -> str:
    """A query made of a single namespace token selects everything in it.

    >>> expand_lone_namespace("ns:wiki")
    '* ns:wiki'
    >>> expand_lone_namespace("report")
    'report'
    """
    tokens = query.split()
    if len(tokens) == 1 and is_namespace_token(tokens[0]):
        return f"* {tokens[0]}"
    return query


class Pipeline:
    """
    Run a query against a set of collaborators.

    Args:
        collaborators: Index, metadata store, ACL and registry.
        resolver: Namespace token resolver; defaults to a ``PathResolver``
            using the context's separator.
        context: Context page and settings for this run.
    """

    def __init__(
        self,
        collaborators: Collaborators,
        resolver: NamespaceResolver | None = None,
        context: QueryContext | None = None,
    ) -> None:
        self.collaborators = collaborators
        self.context = context or QueryContext()
        self.resolver = resolver or PathResolver(self.context.sep)

    def run(self, options: QueryOptions) -> QueryReport:
        """Execute every stage and return the report. Never raises."""
        report = QueryReport(status=QueryStatus.OK, query=options.query)
        with LogContext(query=options.query, context_page=self.context.page_id):
            log.debug("pipeline.start", fulltext=options.fulltext, group=options.group, limit=options.limit)
            try:
                self._execute(options, report)
            except Exception as e:
                log.error("pipeline.error", error=str(e), error_type=type(e).__name__)
                report.status = QueryStatus.FAILED
                report.error = e
                report.results = []
                report.count = 0
            report.completed_at = datetime.now(UTC)
            if report.status is not QueryStatus.OK:
                report.message = STATUS_MESSAGES[report.status]
            log.info(
                "pipeline.completed",
                status=report.status.value,
                count=report.count,
                duration_ms=round(report.duration_seconds * 1000, 2) if report.duration_seconds else None,
            )
        return report

    # ── Stages ─────────────────────────────────────────────────────────

    def _execute(self, options: QueryOptions, report: QueryReport) -> None:
        settings = self.context.settings
        services = self.collaborators

        with log_step("pipeline.resolve", fulltext=options.fulltext) as step:
            found = self._resolve(options)
            step.add_metric("matched", len(found.unwrap_or([])))
        if found.is_err():
            report.status = QueryStatus.INVALID_PATTERN
            report.error = found.error
            log.warning("pipeline.invalid_pattern", error=str(found.error))
            return

        with log_step("pipeline.validate") as step:
            ids = validate_records(
                found.unwrap(),
                services.acl,
                start_page=settings.start_page,
                hidestart=options.hidestart,
                maxns=options.maxns,
                sep=settings.separator,
            )
            step.add_metric("valid", len(ids))
        if not ids:
            report.status = QueryStatus.NO_RESULTS
            return

        projector = RecordProjector(services.metadata, options, self.context)
        with log_step("pipeline.project", records=len(ids)):
            rows = projector.project(ids)

        metadata_filter = MetadataFilter(options.filter, settings.tzinfo)
        if metadata_filter:
            with log_step("pipeline.filter", rows_in=len(rows)) as step:
                rows = metadata_filter.apply(rows)
                step.add_metric("rows_out", len(rows))
            if not rows:
                report.status = QueryStatus.EMPTY_AFTER_FILTER
                return

        if options.sort:
            with log_step("pipeline.sort", rows=len(rows), keys=list(options.sort)):
                report.sorted = sort_rows(rows, projector.build_sort_keys())
            if not report.sorted:
                log.warning("pipeline.sort_failed", keys=list(options.sort))

        if options.limit > 0:
            rows = rows[: options.limit]
        report.count = len(rows)

        specs = projector.build_group_specs() if options.group else []
        grouper = HierarchicalGrouper(specs, services.registry, services.metadata, self.context)
        keys = list(DEFAULT_RESULT_COLUMNS) + [k for k in projector.column_keys if k not in DEFAULT_RESULT_COLUMNS]
        with log_step("pipeline.group", rows=len(rows), levels=len(specs)) as step:
            report.results = grouper.group(rows, keys)
            step.add_metric("results", len(report.results))

    def _resolve(self, options: QueryOptions) -> Result[list[str]]:
        services = self.collaborators
        if options.fulltext:
            return fulltext_records(services.index, options.query)
        if options.fullregex:
            # raw pattern over the full id; no namespace tokens, no lone-token expansion
            return lookup_records(
                services.index,
                services.registry,
                options.query or MATCH_ALL,
                fullregex=True,
                sep=self.context.sep,
            )

        parser = NamespaceQueryParser(self.resolver, self.context)
        parsed = parser.parse(expand_lone_namespace(options.query))
        return lookup_records(
            services.index,
            services.registry,
            parsed.query or MATCH_ALL,
            include_ns=parsed.include,
            exclude_ns=parsed.exclude,
            sep=self.context.sep,
        )


__all__ = [
    "QueryStatus",
    "STATUS_MESSAGES",
    "QueryReport",
    "Collaborators",
    "Pipeline",
    "expand_lone_namespace",
]
