"""
Metadata filtering of projected rows.

Each filter entry maps a column key to an expression. Keys containing
``date`` take a ``start->end`` range; every other key takes a case-sensitive
regular expression searched in the column's text. A ``^`` or ``!`` in front
of the key inverts the match. Entries are ANDed in order and surviving rows
keep their relative order.

A row that lacks the column never survives that entry, whatever its
polarity. An expression that does not compile (or a date that does not
parse) is logged once and matches no row.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from pagequery.core.logging import get_logger
from pagequery.core.models import Row
from pagequery.query.dates import DateRange
from pagequery.query.options import split_polarity

logger = get_logger(__name__)


def is_date_column(key: str) -> bool:
    return "date" in key


@dataclass(frozen=True)
class FilterEntry:
    """One compiled filter: column, polarity and predicate."""

    column: str
    exclude: bool
    expression: str
    predicate: Callable[[Any], bool]

    def keeps(self, row: Row) -> bool:
        if not row.has(self.column):
            return False
        return self.predicate(row.get(self.column)) != self.exclude


def _never(_: Any) -> bool:
    return False


def compile_entry(key: str, expression: str, tz: tzinfo) -> FilterEntry:
    """Build the predicate of one filter entry."""
    column, exclude = split_polarity(key)

    if is_date_column(column):
        parsed = DateRange.parse(expression, tz)
        if parsed.is_err():
            logger.warning("pagequery.filter.invalid_date", column=column, expression=expression,
                           error=str(parsed.error))
            return FilterEntry(column, exclude, expression, _never)
        return FilterEntry(column, exclude, expression, parsed.unwrap().matches)

    try:
        pattern = re.compile(expression)
    except re.error as exc:
        logger.warning("pagequery.filter.invalid_regex", column=column, expression=expression, error=str(exc))
        return FilterEntry(column, exclude, expression, _never)
    return FilterEntry(column, exclude, expression, lambda value: pattern.search(str(value)) is not None)


class MetadataFilter:
    """
    Narrow rows by an ordered ``{column: expression}`` mapping.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> rows = [Row(id="a", name="a", title="Alpha"), Row(id="b", name="b", title="beta")]
        >>> [r.id for r in MetadataFilter({"title": "^[A-Z]"}, ZoneInfo("UTC")).apply(rows)]
        ['a']
        >>> [r.id for r in MetadataFilter({"!title": "^[A-Z]"}, ZoneInfo("UTC")).apply(rows)]
        ['b']
    """

    def __init__(self, spec: Mapping[str, str], tz: tzinfo) -> None:
        self.entries = [compile_entry(key, expression, tz) for key, expression in spec.items()]

    def __bool__(self) -> bool:
        return bool(self.entries)

    def apply(self, rows: Sequence[Row]) -> list[Row]:
        survivors = list(rows)
        for entry in self.entries:
            survivors = [row for row in survivors if entry.keeps(row)]
        return survivors


__all__ = ["FilterEntry", "MetadataFilter", "compile_entry", "is_date_column"]
