from __future__ import annotations

from typing import TYPE_CHECKING

from .types import UNDATED, Dated, EffectiveDate, PartialDate, as_int

if TYPE_CHECKING:
    from ..tabs import TabDateInfo

UNDATED_KEY = "undated"


def _fields(date: PartialDate | None) -> tuple[int, int, int] | None:
    if date is None:
        return None
    year = as_int(date.year)
    if year is None:
        return None
    # month/day default to 1 independently of each other; out-of-range counts as missing
    month = as_int(date.month)
    day = as_int(date.day)
    if month is None or not 1 <= month <= 12:
        month = 1
    if day is None or not 1 <= day <= 31:
        day = 1
    return year, month, day


def to_comparable(date: PartialDate | None) -> int | None:
    """Encode a partial date as an integer that orders chronologically.

    Date-only (no clock, no time zone): year * 10000 + month * 100 + day.
    Returns None unless the year is present. A month outside 1-12 or a day
    outside 1-31 is treated as absent, which keeps the encoding ordered.
    """

    f = _fields(date)
    if f is None:
        return None
    year, month, day = f
    return year * 10000 + month * 100 + day


def date_key(date: PartialDate | None) -> str:
    """Bucket key / group title for a date: "2023-5-1", or "undated"."""

    f = _fields(date)
    if f is None:
        return UNDATED_KEY
    year, month, day = f
    return f"{year}-{month}-{day}"


def has_group(group_id: int | None) -> bool:
    # browsers report ungrouped tabs with group id -1
    return group_id is not None and group_id != -1


def effective_date(info: "TabDateInfo | None") -> EffectiveDate:
    """The date a tab is ordered and bucketed by.

    A grouped tab whose group label carries a date uses that date; every other
    tab uses its own resolved date.
    """

    if info is None:
        return UNDATED
    if has_group(info.group_id):
        value = to_comparable(info.group_date)
        if value is not None:
            return Dated(date=info.group_date, value=value)  # type: ignore[arg-type]
    value = to_comparable(info.date)
    if value is not None:
        return Dated(date=info.date, value=value)  # type: ignore[arg-type]
    return UNDATED
