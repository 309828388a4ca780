"""
Data model of the query pipeline.

Architecture:
    ::

        record ids ──► Row (one per record, built once by the projector)
                         │  id, name, title, abstract, display   (required)
                         │  columns{key: value}                   (requested)
                         │  realdate                              (shared instant)
                         ▼
        SortKey[] ──► sorted rows ──► GroupSpec[] ──► ResultRow[]
                                                        level 0  = leaf record
                                                        level ≥1 = heading

Rows are plain mutable dataclasses while the projector fills them; after the
filter stage nothing writes to them again. ``ResultRow`` is frozen.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pagequery.core.enums import Collation, Direction, GroupKind
from pagequery.core.settings import PagequerySettings, get_settings

REALDATE = "__realdate__"

REQUIRED_COLUMNS = ("id", "name", "title", "abstract", "display")

DEFAULT_RESULT_COLUMNS = ("name", "id", "title", "abstract", "display")


@dataclass
class Row:
    """
    Working representation of one record.

    Required columns are attributes; every optional or custom column lives in
    ``columns``. ``realdate`` is the raw timestamp shared by all date-part
    columns of the row and is set at most once.

    Examples:
        >>> row = Row(id="wiki:start", name="start", title="Welcome")
        >>> row.columns["ns"] = "wiki"
        >>> row.get("ns"), row.get("title")
        ('wiki', 'Welcome')
        >>> row.has("cyear")
        False
    """

    id: str
    name: str
    title: str
    abstract: str = ""
    display: str = ""
    columns: dict[str, Any] = field(default_factory=dict)
    realdate: int | None = None

    def has(self, key: str) -> bool:
        if key in REQUIRED_COLUMNS:
            return True
        if key == REALDATE:
            return self.realdate is not None
        return key in self.columns

    def get(self, key: str, default: Any = None) -> Any:
        if key in REQUIRED_COLUMNS:
            return getattr(self, key)
        if key == REALDATE:
            return self.realdate if self.realdate is not None else default
        return self.columns.get(key, default)

    def set_realdate(self, timestamp: int) -> bool:
        """Store the shared date instant; later calls are ignored."""
        if self.realdate is not None:
            return False
        self.realdate = timestamp
        return True


@dataclass(frozen=True, slots=True)
class SortKey:
    """One (column, collation, direction) triple of a sort specification."""

    column: str
    collation: Collation = Collation.STRING_CASE
    direction: Direction = Direction.ASC


@dataclass(frozen=True, slots=True)
class GroupSpec:
    """
    One grouping level, outermost first.

    ``word_format`` is a strftime format that spells the heading in words
    (e.g. ``"%B %Y"``); when set, the heading label is built from the row's
    shared date instant instead of the column value.
    """

    column: str
    kind: GroupKind = GroupKind.HEADING
    word_format: str = ""


@dataclass(frozen=True, slots=True)
class ResultRow:
    """
    One rendered unit: a leaf record (level 0) or a heading (level ≥ 1).

    Leaves carry the requested columns in caller order in ``fields``.
    Headings carry a ``label``; namespace headings may also carry the
    namespace start page as ``target_id`` and its title as ``display_title``.
    """

    level: int
    label: str = ""
    target_id: str = ""
    display_title: str = ""
    fields: tuple[tuple[str, Any], ...] = ()

    @property
    def is_heading(self) -> bool:
        return self.level > 0

    @property
    def columns(self) -> dict[str, Any]:
        return dict(self.fields)

    def get(self, key: str, default: Any = None) -> Any:
        for name, value in self.fields:
            if name == key:
                return value
        return default

    @classmethod
    def leaf(cls, row: Row, keys: Iterable[str]) -> ResultRow:
        return cls(level=0, label=row.name, fields=tuple((key, row.get(key, "")) for key in keys))

    @classmethod
    def heading(cls, level: int, label: str, target_id: str = "", display_title: str = "") -> ResultRow:
        return cls(level=level, label=label, target_id=target_id, display_title=display_title)

    def to_dict(self) -> dict[str, Any]:
        if self.is_heading:
            return {
                "level": self.level,
                "label": self.label,
                "target_id": self.target_id,
                "display_title": self.display_title,
            }
        return {"level": 0, **self.columns}


@dataclass(frozen=True)
class QueryContext:
    """
    Explicit per-invocation context.

    Attributes:
        page_id: Identifier of the record the query is embedded in; relative
            namespace tokens resolve against it.
        settings: Host configuration for this run.
    """

    page_id: str = ""
    settings: PagequerySettings = field(default_factory=get_settings)

    @property
    def sep(self) -> str:
        return self.settings.separator


__all__ = [
    "REALDATE",
    "REQUIRED_COLUMNS",
    "DEFAULT_RESULT_COLUMNS",
    "Row",
    "SortKey",
    "GroupSpec",
    "ResultRow",
    "QueryContext",
]
