"""
Canonical protocol definitions for pagequery collaborators.

The host owns the text index, the metadata store, access control and page
existence. The pipeline only ever talks to them through the narrow,
read-only contracts below, so any host (a wiki, a docs site, a test double)
can plug in without inheritance.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── NamespaceResolver   : relative namespace token → absolute namespace
        ├── PageIndex           : all identifiers + full-text search
        ├── MetadataStore       : per-record metadata + bulk backlinks
        ├── AccessControl       : may the current actor read a record?
        └── PageRegistry        : does a record exist / is it hidden?

    Implementations:
        pagequery.core.paths.PathResolver       (NamespaceResolver)
        pagequery.adapters.memory.InMemoryCorpus (everything else)

Performance:
    - ``MetadataStore.get_metadata`` is assumed expensive: the projector calls
      it exactly once per record.
    - ``MetadataStore.backlinks`` is a bulk lookup: called once per batch.

Tags:
    protocol, collaborator, contracts, pagequery
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class NamespaceResolver(Protocol):
    """Resolve a (possibly relative) namespace token against a context record."""

    def resolve_namespace(self, token: str, context_id: str) -> str: ...


@runtime_checkable
class PageIndex(Protocol):
    """
    The host's record index.

    ``all_ids`` lists every indexed identifier (existing or not, hidden or
    not); ``fulltext_search`` returns identifiers whose content matches a
    full-text query.
    """

    def all_ids(self) -> Sequence[str]: ...

    def fulltext_search(self, query: str) -> Sequence[str]: ...


@runtime_checkable
class MetadataStore(Protocol):
    """
    Read-only access to per-record metadata.

    ``get_metadata`` returns a nested mapping with (at least) these keys when
    known: ``title``, ``creator``, ``contributor`` (mapping or sequence),
    ``date`` (``{"created": ts, "modified": ts}``), ``description``
    (``{"abstract": text}``), ``relation`` (``{"references": {id: bool}}``).
    Missing keys are fine; the projector degrades to defaults.

    ``backlinks`` returns one collection of referring identifiers per
    requested identifier, in the same order.
    """

    def get_metadata(self, record_id: str) -> Mapping[str, Any]: ...

    def backlinks(self, record_ids: Sequence[str]) -> Sequence[Iterable[str]]: ...


@runtime_checkable
class AccessControl(Protocol):
    """Whether the current actor may read a record."""

    def can_read(self, record_id: str) -> bool: ...


@runtime_checkable
class PageRegistry(Protocol):
    """Existence and visibility of records."""

    def exists(self, record_id: str) -> bool: ...

    def is_hidden(self, record_id: str) -> bool: ...


__all__ = [
    "NamespaceResolver",
    "PageIndex",
    "MetadataStore",
    "AccessControl",
    "PageRegistry",
]
