"""
Record identifier helpers.

A record identifier is a hierarchical path whose segments are joined by a
separator (``":"`` by default): ``"foo:bar:baz"`` has name ``baz`` and
namespace ``foo:bar``. Root-level records have an empty namespace.
"""

from __future__ import annotations

DEFAULT_SEPARATOR = ":"

_PLACEHOLDER_PAGE = "dummypagename"


def no_ns(record_id: str, sep: str = DEFAULT_SEPARATOR) -> str:
    """Last path segment (the record's name).

    >>> no_ns("foo:bar:baz")
    'baz'
    """
    return record_id.rsplit(sep, 1)[-1]


def get_ns(record_id: str, sep: str = DEFAULT_SEPARATOR) -> str:
    """All but the last path segment; empty for root-level records.

    >>> get_ns("foo:bar:baz")
    'foo:bar'
    >>> get_ns("baz")
    ''
    """
    if sep not in record_id:
        return ""
    return record_id.rsplit(sep, 1)[0]


def depth(record_id: str, sep: str = DEFAULT_SEPARATOR) -> int:
    """Number of separators in the identifier (0 for root-level records)."""
    return record_id.count(sep)


def start_page_of(namespace: str, start_page: str, sep: str = DEFAULT_SEPARATOR) -> str:
    """Identifier of a namespace's start page.

    >>> start_page_of("wiki:plugins", "start")
    'wiki:plugins:start'
    """
    return f"{namespace}{sep}{start_page}" if namespace else start_page


class PathResolver:
    """
    Resolves relative identifiers and namespace tokens against a context record.

    Rules:
        - a leading separator makes the id absolute (``:wiki:start``)
        - ``.`` segments stay in, ``..`` segments climb out of the context
          record's namespace (``.:sub``, ``..:other``)
        - an id with no separator is relative to the context namespace
        - any other id is already absolute

    Examples:
        >>> resolver = PathResolver()
        >>> resolver.resolve_id("page", "wiki:start")
        'wiki:page'
        >>> resolver.resolve_id("..:other:page", "wiki:sub:start")
        'wiki:other:page'
        >>> resolver.resolve_namespace(".:sub", "wiki:start")
        'wiki:sub'
        >>> resolver.resolve_namespace("a", "wiki:start")
        'a'
    """

    def __init__(self, sep: str = DEFAULT_SEPARATOR) -> None:
        self.sep = sep

    def resolve_id(self, record_id: str, context_id: str) -> str:
        sep = self.sep
        if record_id.startswith(sep):
            return record_id.lstrip(sep)

        context_ns = get_ns(context_id, sep)
        if record_id.startswith("."):
            segments = context_ns.split(sep) if context_ns else []
            for segment in record_id.split(sep):
                if segment == "..":
                    if segments:
                        segments.pop()
                elif segment in (".", ""):
                    continue
                else:
                    segments.append(segment.lstrip("."))
            return sep.join(segments)

        if sep not in record_id:
            return f"{context_ns}{sep}{record_id}" if context_ns else record_id
        return record_id

    def resolve_namespace(self, token: str, context_id: str) -> str:
        resolved = self.resolve_id(f"{token}{self.sep}{_PLACEHOLDER_PAGE}", context_id)
        return get_ns(resolved, self.sep)


__all__ = [
    "DEFAULT_SEPARATOR",
    "no_ns",
    "get_ns",
    "depth",
    "start_page_of",
    "PathResolver",
]
