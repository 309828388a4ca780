"""
Multi-key stable sorting of rows.

The comparator walks the sort keys left to right and returns the first
non-zero comparison, negated for descending keys. Python's sort is stable,
so rows whose whole key tuple compares equal keep their projected order.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from functools import cmp_to_key
from typing import Any

from pagequery.core.enums import Collation
from pagequery.core.logging import get_logger
from pagequery.core.models import Row, SortKey

logger = get_logger(__name__)

Comparison = Callable[[Any, Any], int]

_DIGIT_RUN = re.compile(r"(\d+)")


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def as_int(value: Any) -> int:
    """Integer cast used by numeric collation; non-numbers count as 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0


def natural_key(text: str) -> tuple[tuple[int, Any], ...]:
    """Split text into comparable chunks: digit runs by value, the rest as text.

    >>> natural_key("page10") > natural_key("page2")
    True
    """
    chunks = []
    for index, chunk in enumerate(_DIGIT_RUN.split(text.lstrip())):
        if not chunk:
            continue
        chunks.append((0, int(chunk)) if index % 2 else (1, chunk))
    return tuple(chunks)


def compare_numeric(left: Any, right: Any) -> int:
    return _sign(as_int(left), as_int(right))


def compare_string(left: Any, right: Any) -> int:
    return _sign(str(left), str(right))


def compare_string_case(left: Any, right: Any) -> int:
    return _sign(str(left).casefold(), str(right).casefold())


def compare_natural(left: Any, right: Any) -> int:
    return _sign(natural_key(str(left)), natural_key(str(right)))


def compare_natural_case(left: Any, right: Any) -> int:
    return _sign(natural_key(str(left).casefold()), natural_key(str(right).casefold()))


COMPARISONS: dict[Collation, Comparison] = {
    Collation.NUMERIC: compare_numeric,
    Collation.STRING: compare_string,
    Collation.STRING_CASE: compare_string_case,
    Collation.NATURAL: compare_natural,
    Collation.NATURAL_CASE: compare_natural_case,
}


class MultiKeyComparator:
    """
    Composite three-way comparison of two rows.

    Examples:
        >>> from pagequery.core.enums import Direction
        >>> cmp = MultiKeyComparator([SortKey("name", Collation.NATURAL_CASE)])
        >>> cmp(Row(id="p2", name="page2", title=""), Row(id="p10", name="page10", title=""))
        -1
    """

    def __init__(self, keys: Sequence[SortKey]) -> None:
        self.keys = list(keys)
        self._steps = [(key.column, COMPARISONS[key.collation], key.direction.sign) for key in self.keys]

    def __call__(self, left: Row, right: Row) -> int:
        for column, compare, sign in self._steps:
            result = compare(left.get(column, ""), right.get(column, ""))
            if result:
                return result * sign
        return 0


def sort_rows(rows: list[Row], keys: Sequence[SortKey]) -> bool:
    """
    Sort ``rows`` in place by ``keys``.

    Returns ``False`` (leaving ``rows`` untouched) when there is nothing to
    sort by; ``True`` otherwise.
    """
    if not keys:
        logger.debug("pagequery.sort.skipped", reason="empty sort specification")
        return False
    rows.sort(key=cmp_to_key(MultiKeyComparator(keys)))
    return True


__all__ = [
    "COMPARISONS",
    "MultiKeyComparator",
    "as_int",
    "natural_key",
    "sort_rows",
]
