"""
In-memory corpus adapter.

Implements every collaborator contract (index, metadata store, access
control, registry) over a plain mapping of record id to record, so the
pipeline can run from a YAML or JSON file, in tests, or in any host that
already has its records in memory.

Corpus shape:
    ::

        pages:
          wiki:start:
            title: Welcome
            creator: Alice
            contributor: {alice: Alice, bob: Bob}
            date: {created: 1577836800, modified: 1580515200}
            description: {abstract: "First page"}
            relation: {references: {"wiki:other": true}}
            text: "full text used by full-text search"
            hidden: false        # excluded from lookups
            readable: true       # false = access denied
            exists: true         # false = indexed but missing

    A top-level mapping without ``pages`` is read as the page mapping itself.
    Control keys (``text``, ``hidden``, ``readable``, ``exists``) are not
    part of the metadata.

Usage:
    from pagequery.adapters.memory import InMemoryCorpus

    corpus = InMemoryCorpus.from_file("corpus.yaml")
    corpus.get_metadata("wiki:start")["title"]
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from pagequery.core.errors import ErrorCategory, SourceError
from pagequery.core.logging import get_logger

log = get_logger(__name__)

CONTROL_KEYS = frozenset({"text", "hidden", "readable", "exists"})


class CorpusFormat(str, Enum):
    """Supported corpus file formats."""

    YAML = "yaml"
    JSON = "json"


# Extension to format mapping
EXTENSION_MAP = {
    ".yaml": CorpusFormat.YAML,
    ".yml": CorpusFormat.YAML,
    ".json": CorpusFormat.JSON,
}


class InMemoryCorpus:
    """
    A corpus of records held in a dict, in insertion order.

    Examples:
        >>> corpus = InMemoryCorpus({"a:start": {"title": "A"}, "a:b": {"hidden": True}})
        >>> list(corpus.all_ids())
        ['a:start', 'a:b']
        >>> corpus.is_hidden("a:b"), corpus.get_metadata("a:start")["title"]
        (True, 'A')
    """

    def __init__(self, records: Mapping[str, Mapping[str, Any] | None] | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {
            str(record_id): dict(record or {}) for record_id, record in (records or {}).items()
        }

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # ── Loading ─────────────────────────────────────────────────────────

    @classmethod
    def from_file(cls, path: str | Path, *, format: CorpusFormat | str | None = None) -> InMemoryCorpus:
        """
        Load a corpus file.

        Raises:
            SourceError: The file is missing, unreadable, malformed or not a
                mapping of records.
        """
        path = Path(path)
        corpus_format = cls._detect_format(path) if format is None else CorpusFormat(format)

        if not path.exists():
            raise SourceError(f"Corpus file not found: {path}").with_context(source_path=str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SourceError(f"Cannot read corpus file: {e}", cause=e).with_context(source_path=str(path))

        try:
            match corpus_format:
                case CorpusFormat.JSON:
                    data = json.loads(text)
                case _:
                    data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SourceError(
                f"Cannot parse corpus file: {e}", category=ErrorCategory.PARSE, cause=e
            ).with_context(source_path=str(path))

        corpus = cls.from_dict(data, source=str(path))
        log.debug("corpus.loaded", path=str(path), format=corpus_format.value, records=len(corpus))
        return corpus

    @classmethod
    def from_dict(cls, data: Any, *, source: str | None = None) -> InMemoryCorpus:
        """Build a corpus from parsed file content."""
        if data is None:
            data = {}
        if isinstance(data, Mapping) and isinstance(data.get("pages"), Mapping):
            data = data["pages"]
        if not isinstance(data, Mapping):
            raise SourceError(
                "Corpus must be a mapping of record id to record", category=ErrorCategory.PARSE
            ).with_context(source_path=source)
        for record_id, record in data.items():
            if record is not None and not isinstance(record, Mapping):
                raise SourceError(
                    f"Record {record_id!r} must be a mapping", category=ErrorCategory.PARSE
                ).with_context(source_path=source, record_id=str(record_id))
        return cls(data)

    @staticmethod
    def _detect_format(path: Path) -> CorpusFormat:
        ext = path.suffix.lower()
        if ext in EXTENSION_MAP:
            return EXTENSION_MAP[ext]
        raise SourceError(f"Cannot detect corpus format for extension: {ext}").with_context(
            source_path=str(path)
        )

    # ── PageIndex ───────────────────────────────────────────────────────

    def all_ids(self) -> Sequence[str]:
        return list(self._records)

    def fulltext_search(self, query: str) -> Sequence[str]:
        """Ids whose text contains every query term, case-insensitively."""
        terms = [term.casefold() for term in query.split()]
        if not terms:
            return []
        matches = []
        for record_id, record in self._records.items():
            if not self.exists(record_id):
                continue
            text = str(record.get("text", "")).casefold()
            if all(term in text for term in terms):
                matches.append(record_id)
        return matches

    # ── MetadataStore ───────────────────────────────────────────────────

    def get_metadata(self, record_id: str) -> Mapping[str, Any]:
        record = self._records.get(record_id, {})
        return {key: value for key, value in record.items() if key not in CONTROL_KEYS}

    def backlinks(self, record_ids: Sequence[str]) -> Sequence[Iterable[str]]:
        """Referrers of each id, in corpus order."""
        referrers: dict[str, list[str]] = {}
        for source_id, record in self._records.items():
            relation = record.get("relation")
            references = relation.get("references") if isinstance(relation, Mapping) else None
            if not isinstance(references, Mapping):
                continue
            for target, flag in references.items():
                if flag is True:
                    referrers.setdefault(target, []).append(source_id)
        return [referrers.get(record_id, []) for record_id in record_ids]

    # ── AccessControl ───────────────────────────────────────────────────

    def can_read(self, record_id: str) -> bool:
        return bool(self._records.get(record_id, {}).get("readable", True))

    # ── PageRegistry ────────────────────────────────────────────────────

    def exists(self, record_id: str) -> bool:
        record = self._records.get(record_id)
        return record is not None and bool(record.get("exists", True))

    def is_hidden(self, record_id: str) -> bool:
        return bool(self._records.get(record_id, {}).get("hidden", False))


__all__ = ["CONTROL_KEYS", "CorpusFormat", "EXTENSION_MAP", "InMemoryCorpus"]
