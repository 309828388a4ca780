"""
Renderer interface and shared text helpers.

Renderers are downstream consumers of a :class:`QueryReport`. The layout is
a closed enum; :func:`renderer_for` maps each value to its class, so adding
a layout means adding an enum member and one ``Renderer`` subclass.

Architecture:
    ::

        QueryReport ──► renderer_for(options.layout)(options).render(report)
                               │
                               ├── Layout.OUTLINE → OutlineRenderer
                               └── Layout.JSON    → JsonRenderer

Snippets:
    ``tooltip`` abstracts are always shown. ``inline``, ``plain`` and
    ``quoted`` snippets are shortened to the configured extent and only the
    first ``snippet.count`` leaves of one render call get one.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pagequery.core.enums import Layout, ProperCase, SnippetType
from pagequery.core.models import ResultRow
from pagequery.query.options import QueryOptions
from pagequery.query.pipeline import QueryReport

MORE = "... "

_WORD_START = re.compile(r"(^|\s)(\S)")


def proper_case(text: str, sep: str = ":") -> str:
    """Turn an id or name into Proper Case.

    Underscores become spaces and every word gets an upper-case first letter;
    path separators stay tight.

    >>> proper_case("wiki:my_page")
    'Wiki:My Page'
    """
    text = text.replace(sep, sep + " ").replace("_", " ")
    text = _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)
    return text.replace(sep + " ", sep)


def shorten(text: str, extent: str, more: str = MORE) -> str:
    """
    Shorten text to an extent: ``cN`` characters, ``wN`` words, ``lN``
    non-blank lines, or ``~X`` everything before the first ``X``.

    ``more`` is appended when something was cut (not for ``~X``). An unknown
    or empty extent returns the text unchanged.

    >>> shorten("one two three", "w2")
    'one two... '
    >>> shorten("abcdef", "c3")
    'abc... '
    >>> shorten("intro\\n\\nbody\\nend", "l2")
    'intro\\nbody... '
    >>> shorten("summary. details", "~.")
    'summary'
    """
    if not extent:
        return text
    kind, arg = extent[0], extent[1:]
    if kind == "~":
        head, found, _ = text.partition(arg)
        return head if found and arg else text

    try:
        count = int(arg)
    except ValueError:
        return text

    if kind == "c":
        result = text[:count]
        return result + more if 0 < count < len(text) else result
    if kind == "w":
        words = text.split()
        result = " ".join(words[:count])
        return result + more if 0 < count < len(words) else result
    if kind == "l":
        lines = [line for line in text.split("\n") if line]
        result = "\n".join(lines[:count])
        return result + more if 0 < count < len(lines) else result
    return text


def render_empty(query: str, message: str = "") -> str:
    """Text shown instead of results."""
    lines = [f'pagequery: nothing found for "{query}"']
    if message:
        lines.append(message)
    return "\n".join(lines)


@dataclass
class SnippetBudget:
    """How many more leaves may show a shortened snippet in this render call."""

    remaining: int

    def take(self) -> bool:
        allowed = self.remaining > 0
        self.remaining -= 1
        return allowed


class Renderer(ABC):
    """Base class for report renderers."""

    layout: Layout

    def __init__(self, options: QueryOptions, sep: str = ":") -> None:
        self.options = options
        self.sep = sep

    @abstractmethod
    def render(self, report: QueryReport) -> str:
        """Render a report to text."""
        ...

    # ── Labels ─────────────────────────────────────────────────────────

    def heading_text(self, row: ResultRow) -> str:
        text = row.label
        if self.options.nstitle and row.display_title:
            text = row.display_title
        if self.options.proper in (ProperCase.HEADER, ProperCase.BOTH):
            text = proper_case(text, self.sep)
        return text

    def leaf_text(self, row: ResultRow) -> str:
        text = str(row.get("display", "") or row.get("name", ""))
        if self.options.proper in (ProperCase.NAME, ProperCase.BOTH):
            text = proper_case(text, self.sep)
        return text

    def snippet_text(self, row: ResultRow, budget: SnippetBudget) -> str:
        """Abstract to show for a leaf, or ``""``. Consumes budget for every leaf."""
        snippet = self.options.snippet
        abstract = str(row.get("abstract", "") or "")
        allowed = budget.take()
        if snippet.type is SnippetType.NONE:
            return ""
        if snippet.type is SnippetType.TOOLTIP:
            return abstract.replace("\n\n", "\n").strip()
        if not allowed:
            return ""
        return shorten(abstract, snippet.extent).strip()

    def new_budget(self) -> SnippetBudget:
        return SnippetBudget(self.options.snippet.count)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(layout={self.layout.value})"


def renderer_for(layout: Layout) -> type[Renderer]:
    """Renderer class for a layout."""
    from pagequery.render.json import JsonRenderer
    from pagequery.render.outline import OutlineRenderer

    renderers: dict[Layout, type[Renderer]] = {
        Layout.OUTLINE: OutlineRenderer,
        Layout.JSON: JsonRenderer,
    }
    return renderers[layout]


__all__ = [
    "MORE",
    "Renderer",
    "SnippetBudget",
    "proper_case",
    "render_empty",
    "renderer_for",
    "shorten",
]
