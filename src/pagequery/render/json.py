"""JSON rendering of a query report."""

from __future__ import annotations

import json
from typing import Any

from pagequery.core.enums import Layout
from pagequery.query.pipeline import QueryReport
from pagequery.render.base import Renderer


class JsonRenderer(Renderer):
    """
    Serialize the report as a JSON document.

    Headings keep their label and namespace target; leaves keep every
    projected column plus a ``text`` (the rendered display) and, when
    snippets are on, a ``snippet``.
    """

    layout = Layout.JSON

    def render(self, report: QueryReport) -> str:
        document: dict[str, Any] = {
            "status": report.status.value,
            "query": report.query,
            "count": report.count,
            "sorted": report.sorted,
        }
        if self.options.label:
            document["label"] = self.options.label
        if not report.ok:
            document["message"] = report.message
            if report.error is not None:
                document["error"] = str(report.error)
            return json.dumps(document, indent=2, default=str)

        budget = self.new_budget()
        results = []
        for row in report.results:
            item = row.to_dict()
            if row.is_heading:
                item["text"] = self.heading_text(row)
            else:
                item["text"] = self.leaf_text(row)
                snippet = self.snippet_text(row, budget)
                if snippet:
                    item["snippet"] = snippet
            results.append(item)
        document["results"] = results
        return json.dumps(document, indent=2, default=str)


__all__ = ["JsonRenderer"]
