"""
Namespace query parsing.

Splits a raw query such as ``"^wiki:private ns:wiki report"`` into the bare
name query (``"report"``) and include/exclude namespace lists, each token
resolved to an absolute namespace against the context record.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from pagequery.core.models import QueryContext
from pagequery.core.protocols import NamespaceResolver

_EXCLUDE_TOKEN = re.compile(r"^(?:\^|-ns:)(.+)$")
_INCLUDE_TOKEN = re.compile(r"^(?:@|ns:)(.+)$")


def is_namespace_token(token: str) -> bool:
    """True for ``ns:x``, ``@x``, ``-ns:x`` and ``^x`` tokens."""
    return bool(_EXCLUDE_TOKEN.match(token) or _INCLUDE_TOKEN.match(token))


@dataclass(frozen=True)
class NamespaceQuery:
    """A bare name query plus namespace filters, in token order."""

    query: str
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


class NamespaceQueryParser:
    """
    Parse namespace tokens out of a raw query.

    A query without whitespace is returned unchanged (only trimmed), with no
    namespace filters. Otherwise every ``^x``/``-ns:x`` token adds an excluded
    namespace, every ``@x``/``ns:x`` token an included one, and the remaining
    tokens are re-joined with single spaces.

    Examples:
        >>> from pagequery.core.paths import PathResolver
        >>> parser = NamespaceQueryParser(PathResolver(), QueryContext(page_id="wiki:start"))
        >>> parsed = parser.parse("ns:wiki -ns:.:private  report  draft")
        >>> parsed.query, parsed.include, parsed.exclude
        ('report draft', ['wiki'], ['wiki:private'])
        >>> parser.parse("ns:wiki").include
        []
    """

    def __init__(self, resolver: NamespaceResolver, context: QueryContext) -> None:
        self.resolver = resolver
        self.context = context

    def parse(self, raw_query: str) -> NamespaceQuery:
        tokens = raw_query.split()
        if len(tokens) <= 1:
            return NamespaceQuery(query=raw_query.strip())

        include: list[str] = []
        exclude: list[str] = []
        words: list[str] = []
        for token in tokens:
            if match := _EXCLUDE_TOKEN.match(token):
                exclude.append(self._resolve(match.group(1)))
            elif match := _INCLUDE_TOKEN.match(token):
                include.append(self._resolve(match.group(1)))
            else:
                words.append(token)
        return NamespaceQuery(query=" ".join(words), include=include, exclude=exclude)

    def _resolve(self, token: str) -> str:
        return self.resolver.resolve_namespace(token, self.context.page_id)


__all__ = ["NamespaceQuery", "NamespaceQueryParser", "is_namespace_token"]
