"""Indented plain-text outline of a query report."""

from __future__ import annotations

from pagequery.core.enums import Layout, SnippetType
from pagequery.core.models import ResultRow
from pagequery.query.pipeline import QueryReport
from pagequery.render.base import Renderer, SnippetBudget, render_empty

INDENT = "  "


class OutlineRenderer(Renderer):
    """
    One line per heading or leaf.

    Headings are indented by ``level - 1`` and prefixed with ``#`` per
    level; leaves are bulleted one step below the innermost open heading.

    Example output::

        Reports
        # wiki
          ## plugins
            - Pagequery (a query plugin)
    """

    layout = Layout.OUTLINE

    def render(self, report: QueryReport) -> str:
        if not report.ok:
            if self.options.hidemsg:
                return ""
            return render_empty(report.query, report.message)

        lines: list[str] = []
        if self.options.label:
            lines.append(self.options.label)
        if self.options.showcount:
            lines.append(f"{report.count} results")

        budget = self.new_budget()
        depth = 0
        for row in report.results:
            if row.is_heading:
                depth = row.level
                lines.append(f"{INDENT * (row.level - 1)}{'#' * row.level} {self.heading_text(row)}")
                continue
            lines.extend(self._leaf_lines(row, depth, budget))
        return "\n".join(lines)

    def _leaf_lines(self, row: ResultRow, depth: int, budget: SnippetBudget) -> list[str]:
        indent = INDENT * depth
        text = self.leaf_text(row)
        snippet = self.snippet_text(row, budget)
        snippet_type = self.options.snippet.type

        if not snippet:
            return [f"{indent}- {text}"]
        if snippet_type is SnippetType.TOOLTIP:
            return [f"{indent}- {text} ({' '.join(snippet.split())})"]
        if snippet_type is SnippetType.INLINE:
            return [f"{indent}- {text}: {' '.join(snippet.split())}"]

        marker = "> " if snippet_type is SnippetType.QUOTED else ""
        body = [f"{indent}{INDENT}{marker}{line}" for line in snippet.replace("\n\n", "\n").split("\n")]
        return [f"{indent}- {text}", *body]


__all__ = ["OutlineRenderer"]
