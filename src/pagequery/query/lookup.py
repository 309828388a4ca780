"""
Record selection: identifier-pattern lookup and record validation.

Architecture:
    ::

        PageIndex.all_ids()
              │
              ├─ filter_namespaces(exclude, invert)   (skipped under fullregex)
              ├─ filter_namespaces(include)
              ├─ drop missing / hidden records
              └─ regex search on name (or full id under fullregex)
              ▼
        Ok([ids]) | Err(InvalidPatternError)
              ▼
        validate_records(): start pages, namespace depth, read access

Order of survivors always follows index order; nothing here sorts.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from pagequery.core.errors import InvalidPatternError
from pagequery.core.paths import DEFAULT_SEPARATOR, depth, no_ns
from pagequery.core.protocols import AccessControl, PageIndex, PageRegistry
from pagequery.core.result import Ok, Result, try_result_with

MATCH_ALL = ".*"


def compile_query(query: str) -> Result[re.Pattern[str]]:
    """Compile a lookup query as a case-insensitive regex.

    A lone ``*`` is shorthand for "everything".

    >>> compile_query("*").unwrap().pattern
    '.*'
    >>> compile_query("foo(").is_err()
    True
    """
    query = query.strip()
    if query == "*":
        query = MATCH_ALL
    return try_result_with(
        lambda: re.compile(query, re.IGNORECASE),
        lambda e: InvalidPatternError(f"Invalid search pattern: {e}", cause=e).with_context(query=query),
    )


def filter_namespaces(
    ids: Sequence[str],
    namespaces: Sequence[str],
    *,
    exclude: bool = False,
    sep: str = DEFAULT_SEPARATOR,
) -> list[str]:
    """Keep (or, with ``exclude``, drop) ids that live under any of ``namespaces``.

    Matching is on the leading path only: ``wiki`` matches ``wiki:start`` and
    ``wiki:sub:page`` but not ``mywiki:page``.

    >>> filter_namespaces(["a:x", "b:y", "a:b:z"], ["a"])
    ['a:x', 'a:b:z']
    >>> filter_namespaces(["a:x", "b:y"], ["a"], exclude=True)
    ['b:y']
    """
    if not namespaces:
        return list(ids)
    prefixes = tuple(f"{ns}{sep}" for ns in namespaces)
    return [record_id for record_id in ids if record_id.startswith(prefixes) != exclude]


def lookup_records(
    index: PageIndex,
    registry: PageRegistry,
    query: str,
    *,
    fullregex: bool = False,
    include_ns: Sequence[str] = (),
    exclude_ns: Sequence[str] = (),
    sep: str = DEFAULT_SEPARATOR,
) -> Result[list[str]]:
    """
    Select record ids by regex over their name (or full id under ``fullregex``).

    Without ``fullregex`` excluded namespaces are removed first, then only
    included namespaces are kept. Missing and hidden records never match.

    Returns:
        ``Ok(ids)`` (possibly empty) or ``Err(InvalidPatternError)``.
    """
    compiled = compile_query(query)
    if compiled.is_err():
        return compiled
    pattern = compiled.unwrap()

    ids = [record_id.strip() for record_id in index.all_ids()]
    if not fullregex:
        ids = filter_namespaces(ids, exclude_ns, exclude=True, sep=sep)
        ids = filter_namespaces(ids, include_ns, sep=sep)

    matched = []
    for record_id in ids:
        if not registry.exists(record_id) or registry.is_hidden(record_id):
            continue
        subject = record_id if fullregex else no_ns(record_id, sep)
        if pattern.search(subject):
            matched.append(record_id)
    return Ok(matched)


def fulltext_records(index: PageIndex, query: str) -> Result[list[str]]:
    """Delegate to the host's full-text search."""
    return Ok(list(index.fulltext_search(query)))


def validate_records(
    ids: Sequence[str],
    acl: AccessControl,
    *,
    start_page: str,
    hidestart: bool = False,
    maxns: int = 0,
    sep: str = DEFAULT_SEPARATOR,
) -> list[str]:
    """
    Drop start pages (with ``hidestart``), records nested deeper than
    ``maxns`` separators (when ``maxns > 0``) and records the actor may not read.
    """
    valid = []
    for record_id in (record_id.strip() for record_id in ids):
        if hidestart and no_ns(record_id, sep) == start_page:
            continue
        if maxns > 0 and depth(record_id, sep) > maxns:
            continue
        if not acl.can_read(record_id):
            continue
        valid.append(record_id)
    return valid


__all__ = [
    "MATCH_ALL",
    "compile_query",
    "filter_namespaces",
    "lookup_records",
    "fulltext_records",
    "validate_records",
]
