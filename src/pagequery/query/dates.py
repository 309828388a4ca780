"""
Date handling for date-part columns, headings and date-range filters.

Date-part column keys (``cyear``, ``mmonth-day``, ``cyear-month-day`` ...)
become strftime formats holding only the requested components, always in
year, month, day order. With word spelling enabled, each format has a wordy
twin used only for group headings (``%Y-%m`` → ``%B %Y``).

Range filters take ``start->end`` with either side optional. Both sides are
calendar dates (``2020-01-31``, ``31.01.2020``, ``31/01/2020``) or ISO
datetimes; a bare end date includes the whole of that day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any

from pagequery.core.errors import ValidationError
from pagequery.core.result import Err, Ok, Result

RANGE_SEPARATOR = "->"

# %-d is an unpadded day of month; expanded by format_timestamp on every platform
WORD_FORMATS = {
    "%m": "%B",
    "%d": "%-d–%A",
    "%Y-%m": "%B %Y",
    "%m-%d": "%B %-d, %A",
    "%Y-%m-%d": "%A, %B %-d, %Y",
}

_EURO_FORMATS = ("%d.%m.%Y", "%d.%m.%y")


def date_key_format(key: str) -> str:
    """strftime format for a date-part column key.

    >>> date_key_format("cyear")
    '%Y'
    >>> date_key_format("mmonth-day")
    '%m-%d'
    >>> date_key_format("cday-year")
    '%Y-%d'
    """
    parts = []
    if "year" in key:
        parts.append("%Y")
    if "month" in key:
        parts.append("%m")
    if "day" in key:
        parts.append("%d")
    return "-".join(parts)


def word_format(key_format: str) -> str:
    """Wordy equivalent of a date-part format, or ``""`` when there is none.

    >>> word_format("%Y-%m")
    '%B %Y'
    >>> word_format("%Y")
    ''
    """
    return WORD_FORMATS.get(key_format, "")


def to_timestamp(value: Any) -> int:
    """Coerce a metadata timestamp to an int, 0 when it is not numeric."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def format_timestamp(fmt: str, timestamp: Any, tz: tzinfo) -> str:
    """strftime over a raw timestamp in ``tz``.

    >>> from zoneinfo import ZoneInfo
    >>> format_timestamp("%Y-%m", 1600000000, ZoneInfo("UTC"))
    '2020-09'
    >>> format_timestamp("%B %-d", 1600000000, ZoneInfo("UTC"))
    'September 13'
    >>> format_timestamp("%Y", 10**15, ZoneInfo("UTC"))
    ''
    """
    if not fmt:
        return ""
    try:
        moment = datetime.fromtimestamp(to_timestamp(timestamp), tz)
    except (OverflowError, ValueError, OSError):
        # outside the platform range; shown as blank like a missing date
        return ""
    unpadded_day = str(moment.day)
    fmt = fmt.replace("%-d", unpadded_day).replace("%#d", unpadded_day)
    return moment.strftime(fmt)


def _parse_bound(text: str, tz: tzinfo, *, end: bool) -> int | None:
    text = text.strip().replace("/", ".")
    parsed: datetime | None = None
    date_only = False

    try:
        parsed = datetime.fromisoformat(text)
        date_only = len(text) <= 10
    except ValueError:
        for fmt in _EURO_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                date_only = True
                break
            except ValueError:
                continue
    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    if end and date_only:
        parsed = parsed + timedelta(days=1) - timedelta(seconds=1)
    return int(parsed.timestamp())


@dataclass(frozen=True)
class DateRange:
    """
    Closed timestamp range with optional bounds.

    An empty range (neither bound) matches nothing.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> year = DateRange.parse("2020-01-01->2020-12-31", ZoneInfo("UTC")).unwrap()
        >>> year.matches(1593561600)   # 2020-07-01
        True
        >>> year.matches(1609459200)   # 2021-01-01
        False
    """

    begin: int | None = None
    end: int | None = None

    @classmethod
    def parse(cls, expr: str, tz: tzinfo) -> Result[DateRange]:
        first, _, second = expr.partition(RANGE_SEPARATOR)
        begin = end = None
        if first.strip():
            begin = _parse_bound(first, tz, end=False)
            if begin is None:
                return Err(ValidationError(f"Invalid start date: {first.strip()!r}"))
        if second.strip():
            end = _parse_bound(second, tz, end=True)
            if end is None:
                return Err(ValidationError(f"Invalid end date: {second.strip()!r}"))
        return Ok(cls(begin=begin, end=end))

    def matches(self, timestamp: Any) -> bool:
        value = to_timestamp(timestamp)
        if self.begin is not None and self.end is not None:
            return self.begin <= value <= self.end
        if self.begin is not None:
            return value >= self.begin
        if self.end is not None:
            return value <= self.end
        return False


__all__ = [
    "RANGE_SEPARATOR",
    "WORD_FORMATS",
    "date_key_format",
    "word_format",
    "to_timestamp",
    "format_timestamp",
    "DateRange",
]
