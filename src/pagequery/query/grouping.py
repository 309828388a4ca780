"""
Hierarchical grouping of sorted rows into headings and leaves.

Manifesto:
    Grouping is run-length, not global: a heading marks where a level's
    value changes from the row immediately before it. Equal values that are
    not adjacent get separate headings, so the output always mirrors the
    order the sorter produced.

    - **Outermost first:** a row's headings are emitted from level 1 inwards
      before its own leaf
    - **Explicit state:** the last value seen per level is an immutable tuple
      threaded through :meth:`HierarchicalGrouper.advance`
    - **Namespaces by segment:** only the segments that changed get headings,
      plus every deeper segment once the paths diverge

Architecture:
    ::

        rows (sorted) ─┬─► no group specs ──► [leaf, leaf, ...]
                       │
                       └─► for each row:
                             state, headings = advance(state, row)
                             emit headings   (level ≥ 1)
                             emit leaf       (level 0)

        GroupKind.HEADING    value changed      → 1 heading at level+1
        GroupKind.NAMESPACE  segments [d:] new  → 1 heading per segment at
                                                  level+i+1, linked to the
                                                  segment's start page

Examples:
    >>> from pagequery.core.models import GroupSpec, Row
    >>> rows = [Row(id=v + str(i), name=v, title=v, columns={"cat": v}) for i, v in enumerate("AABBBA")]
    >>> results = HierarchicalGrouper([GroupSpec("cat")]).group(rows, ["name"])
    >>> [(r.level, r.label) for r in results if r.is_heading]
    [(1, 'A'), (1, 'B'), (1, 'A')]

Tags:
    grouping, headings, namespaces, run-length, pagequery
"""

from __future__ import annotations

from collections.abc import Sequence

from pagequery.core.enums import GroupKind
from pagequery.core.models import DEFAULT_RESULT_COLUMNS, GroupSpec, QueryContext, ResultRow, Row
from pagequery.core.paths import start_page_of
from pagequery.core.protocols import MetadataStore, PageRegistry
from pagequery.query.dates import format_timestamp

GroupState = tuple[str, ...]


class HierarchicalGrouper:
    """
    Turn sorted rows into an ordered list of headings and leaf results.

    Args:
        specs: Group levels, outermost first.
        registry: Used to check whether a namespace start page exists.
        metadata: Used to read the title of an existing namespace start page.
        context: Per-run context (separator, start page name, timezone).

    Without a registry, namespace headings carry no target.
    """

    def __init__(
        self,
        specs: Sequence[GroupSpec],
        registry: PageRegistry | None = None,
        metadata: MetadataStore | None = None,
        context: QueryContext | None = None,
    ) -> None:
        self.specs = list(specs)
        self.registry = registry
        self.metadata = metadata
        self.context = context or QueryContext()

    def initial_state(self) -> GroupState:
        return ("",) * len(self.specs)

    def group(self, rows: Sequence[Row], keys: Sequence[str] = DEFAULT_RESULT_COLUMNS) -> list[ResultRow]:
        """Headings and leaves for ``rows``, leaves carrying ``keys`` in order."""
        if not self.specs:
            return [ResultRow.leaf(row, keys) for row in rows]

        results: list[ResultRow] = []
        state = self.initial_state()
        for row in rows:
            state, headings = self.advance(state, row)
            results.extend(headings)
            results.append(ResultRow.leaf(row, keys))
        return results

    def advance(self, state: GroupState, row: Row) -> tuple[GroupState, list[ResultRow]]:
        """
        Compare ``row`` against the last value seen at every level.

        Returns the new state and the headings to emit before the row's leaf,
        outermost level first.
        """
        updated = list(state)
        headings: list[ResultRow] = []
        for level, spec in enumerate(self.specs):
            current = str(row.get(spec.column, ""))
            previous = state[level]
            if current == previous:
                continue
            updated[level] = current
            if spec.kind is GroupKind.HEADING:
                headings.append(ResultRow.heading(level + 1, self._heading_label(spec, row, current)))
            elif spec.kind is GroupKind.NAMESPACE:
                headings.extend(self._namespace_headings(level, current, previous))
        return tuple(updated), headings

    def _heading_label(self, spec: GroupSpec, row: Row, value: str) -> str:
        if spec.word_format and row.realdate is not None:
            return format_timestamp(spec.word_format, row.realdate, self.context.settings.tzinfo)
        return value

    def _namespace_headings(self, level: int, current: str, previous: str) -> list[ResultRow]:
        sep = self.context.sep
        current_segments = current.split(sep)
        previous_segments = previous.split(sep) if previous else []

        diverged = 0
        while (
            diverged < len(current_segments)
            and diverged < len(previous_segments)
            and current_segments[diverged] == previous_segments[diverged]
        ):
            diverged += 1

        headings = []
        for index in range(diverged, len(current_segments)):
            namespace = sep.join(current_segments[: index + 1])
            target, title = self._start_page(namespace)
            headings.append(ResultRow.heading(level + index + 1, current_segments[index], target, title))
        return headings

    def _start_page(self, namespace: str) -> tuple[str, str]:
        if self.registry is None:
            return "", ""
        settings = self.context.settings
        page_id = start_page_of(namespace, settings.start_page, settings.separator)
        if not self.registry.exists(page_id):
            return "", ""
        title = ""
        if self.metadata is not None:
            title = str((self.metadata.get_metadata(page_id) or {}).get("title") or "")
        return page_id, title


__all__ = ["GroupState", "HierarchicalGrouper"]
