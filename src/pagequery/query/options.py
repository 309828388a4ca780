"""
Validated option set for one query run.

``QueryOptions`` is what the pipeline consumes. It normalises the handful of
column-name aliases users type (``pagename``, ``heading``, ``contrib`` ...),
makes numeric limits non-negative, and derives the column set the projector
has to build.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pagequery.core.enums import Layout, ProperCase, SnippetType
from pagequery.core.settings import PagequerySettings

COLUMN_ALIASES = {
    "pagename": "name",
    "heading": "title",
    "firstheading": "title",
    "pageid": "id",
    "contrib": "contributor",
}

EXCLUDE_PREFIXES = ("^", "!")

_TITLE_TEMPLATE_KEYS = ("{title}", "{heading}", "{firstheading}")


def normalize_column(key: str) -> str:
    """Map a user-facing column alias to its canonical key.

    >>> normalize_column("pagename")
    'name'
    >>> normalize_column("cyear")
    'cyear'
    """
    key = key.strip()
    return COLUMN_ALIASES.get(key, key)


def split_polarity(key: str) -> tuple[str, bool]:
    """Strip a leading ``^``/``!`` exclusion marker from a filter key.

    >>> split_polarity("^creator")
    ('creator', True)
    >>> split_polarity("title")
    ('title', False)
    """
    if key[:1] in EXCLUDE_PREFIXES:
        return key[1:], True
    return key, False


class SnippetOptions(BaseModel):
    """Abstract display: type, how many records get one, and how long they are."""

    model_config = ConfigDict(frozen=True)

    type: SnippetType = SnippetType.NONE
    count: int = Field(default=0, ge=0)
    extent: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _fallback_to_tooltip(cls, value: Any) -> Any:
        if isinstance(value, SnippetType):
            return value
        if value is None or value not in {t.value for t in SnippetType}:
            return SnippetType.TOOLTIP
        return value


class QueryOptions(BaseModel):
    """
    Everything a query run needs to know besides its collaborators.

    ``sort`` and ``filter`` are insertion-ordered: the order of ``sort`` is the
    sort precedence (and the grouping order); filters apply in order.

    Examples:
        >>> opts = QueryOptions(sort={"pagename": "", "cdate": "asc"}, filter={"^contrib": "bob"})
        >>> list(opts.sort)
        ['name', 'cdate']
        >>> opts.column_keys
        ['name', 'cdate', 'contributor']
    """

    model_config = ConfigDict(extra="ignore")

    query: str = ""

    # selection
    fulltext: bool = False
    fullregex: bool = False
    hidestart: bool = False
    maxns: int = 0

    # columns, filtering and ordering
    sort: dict[str, str] = Field(default_factory=dict)
    filter: dict[str, str] = Field(default_factory=dict)
    casesort: bool = False
    natsort: bool = False
    limit: int = 0

    # grouping
    group: bool = False
    spelldate: bool = False

    # display
    display: str = "name"
    dformat: str | None = None
    snippet: SnippetOptions = Field(default_factory=SnippetOptions)
    proper: ProperCase = ProperCase.NONE
    layout: Layout = Layout.OUTLINE
    showcount: bool = False
    label: str = ""
    hidemsg: bool = False
    nstitle: bool = False

    @field_validator("limit", "maxns", mode="before")
    @classmethod
    def _absolute(cls, value: Any) -> int:
        return abs(int(value or 0))

    @field_validator("sort", mode="before")
    @classmethod
    def _normalize_sort(cls, value: Any) -> dict[str, str]:
        return {normalize_column(k): (v or "").strip() for k, v in dict(value or {}).items() if k.strip()}

    @field_validator("filter", mode="before")
    @classmethod
    def _normalize_filter(cls, value: Any) -> dict[str, str]:
        normalized = {}
        for key, expr in dict(value or {}).items():
            column, exclude = split_polarity(key.strip())
            if not column:
                continue
            prefix = "^" if exclude else ""
            normalized[prefix + normalize_column(column)] = expr or ""
        return normalized

    @field_validator("display", mode="before")
    @classmethod
    def _normalize_display(cls, value: Any) -> str:
        value = (value or "name").strip()
        if value in ("heading", "firstheading"):
            return "title"
        if value == "pageid":
            return "id"
        return value

    @field_validator("proper", mode="before")
    @classmethod
    def _normalize_proper(cls, value: Any) -> Any:
        if isinstance(value, ProperCase):
            return value
        if value in ("hdr", "header", "group"):
            return ProperCase.HEADER
        if value in ("name", "page"):
            return ProperCase.NAME
        if value in (None, "none"):
            return ProperCase.NONE
        return ProperCase.BOTH

    @field_validator("layout", mode="before")
    @classmethod
    def _normalize_layout(cls, value: Any) -> Any:
        if isinstance(value, Layout):
            return value
        if value not in {layout.value for layout in Layout}:
            return Layout.OUTLINE
        return value

    @model_validator(mode="after")
    def _title_display_sets_nstitle(self) -> QueryOptions:
        if self.display == "title" or any(key in self.display for key in _TITLE_TEMPLATE_KEYS):
            self.nstitle = True
        return self

    @property
    def filter_columns(self) -> list[str]:
        """Filter keys without their exclusion marker, in filter order."""
        return [split_polarity(key)[0] for key in self.filter]

    @property
    def column_keys(self) -> list[str]:
        """Sort keys followed by any filter-only columns, without duplicates."""
        keys = list(self.sort)
        for column in self.filter_columns:
            if column not in keys:
                keys.append(column)
        return keys

    @property
    def needs_abstract(self) -> bool:
        return self.snippet.type is not SnippetType.NONE or "abstract" in self.column_keys

    @property
    def prefix_from_title(self) -> bool:
        """``a``/``ab``/``abc`` columns use the title when title is sorted or filtered on."""
        return "title" in self.column_keys

    def display_date_format(self, settings: PagequerySettings) -> str:
        return self.dformat or settings.date_format


__all__ = [
    "COLUMN_ALIASES",
    "normalize_column",
    "split_polarity",
    "SnippetOptions",
    "QueryOptions",
]
