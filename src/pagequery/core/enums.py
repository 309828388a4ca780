"""
Shared enums for the query pipeline.

STDLIB ONLY - NO PYDANTIC.
"""

from enum import Enum


class Direction(str, Enum):
    """Sort direction of one sort key."""

    ASC = "asc"
    DESC = "desc"

    @property
    def sign(self) -> int:
        return -1 if self is Direction.DESC else 1


class Collation(str, Enum):
    """
    Comparison semantics applied to one column's values.

    NUMERIC casts both sides to integers; STRING compares codepoints;
    STRING_CASE compares case-folded strings; NATURAL compares embedded
    digit runs by value (``page2`` < ``page10``); NATURAL_CASE does the same
    on case-folded strings.
    """

    NUMERIC = "numeric"
    STRING = "string"
    STRING_CASE = "string_case"
    NATURAL = "natural"
    NATURAL_CASE = "natural_case"


class GroupKind(str, Enum):
    """How a sorted column participates in grouping."""

    NONE = "none"            # identifiers, titles, exact dates
    HEADING = "heading"      # one heading per run of equal values
    NAMESPACE = "namespace"  # one heading per differing path segment


class ColumnKind(str, Enum):
    """
    Closed classification of row column keys.

    Every key the caller can request maps to exactly one kind; anything not
    recognised is CUSTOM and is looked up in the record's metadata.
    """

    ID = "id"
    NAME = "name"
    TITLE = "title"
    ABSTRACT = "abstract"
    DISPLAY = "display"
    PREFIX = "prefix"            # a, ab, abc
    NAMESPACE = "ns"
    CREATOR = "creator"
    CONTRIBUTOR = "contributor"
    MDATE = "mdate"
    CDATE = "cdate"
    LINKS = "links"
    BACKLINKS = "backlinks"
    DATE_PART = "date_part"      # cyear, mmonth-day, ...
    CUSTOM = "custom"

    @classmethod
    def of(cls, key: str) -> "ColumnKind":
        """Classify a column key.

        >>> ColumnKind.of("abc")
        <ColumnKind.PREFIX: 'prefix'>
        >>> ColumnKind.of("cyear-month")
        <ColumnKind.DATE_PART: 'date_part'>
        >>> ColumnKind.of("color")
        <ColumnKind.CUSTOM: 'custom'>
        """
        if key in ("a", "ab", "abc"):
            return cls.PREFIX
        if key == "ns":
            return cls.NAMESPACE
        for kind in (cls.ID, cls.NAME, cls.TITLE, cls.ABSTRACT, cls.DISPLAY, cls.CREATOR,
                     cls.CONTRIBUTOR, cls.MDATE, cls.CDATE, cls.LINKS, cls.BACKLINKS):
            if key == kind.value:
                return kind
        if key[:1] in ("c", "m") and any(part in key for part in ("year", "month", "day")):
            return cls.DATE_PART
        return cls.CUSTOM


class SnippetType(str, Enum):
    """How a record's abstract is shown next to its link."""

    NONE = "none"
    TOOLTIP = "tooltip"
    INLINE = "inline"
    PLAIN = "plain"
    QUOTED = "quoted"


class ProperCase(str, Enum):
    """Which rendered labels are converted to Proper Case."""

    NONE = "none"
    HEADER = "header"
    NAME = "name"
    BOTH = "both"


class Layout(str, Enum):
    """Renderer selection."""

    OUTLINE = "outline"
    JSON = "json"
