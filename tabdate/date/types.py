from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Union

UndatedPlacement = Literal["start", "end", "preserve"]
UNDATED_PLACEMENTS: tuple[str, ...] = ("start", "end", "preserve")

DateField = Union[int, str, None]


def as_int(value: Any) -> int | None:
    """Normalize a captured date field; anything that isn't a non-negative integer is absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 0 else None
    try:
        n = int(str(value).strip())
    except ValueError:
        return None
    return n if n >= 0 else None


@dataclass(frozen=True)
class PartialDate:
    """A date that may be missing its month and/or day.

    Fields are stored as captured (a regex group is a string, the provider sends
    numbers or nulls); use `as_int` before doing arithmetic on them.
    """

    year: DateField = None
    month: DateField = None
    day: DateField = None

    @classmethod
    def from_obj(cls, obj: Any) -> "PartialDate | None":
        if not isinstance(obj, Mapping):
            return None
        return cls(year=obj.get("year"), month=obj.get("month"), day=obj.get("day"))


@dataclass(frozen=True)
class Dated:
    """Effective date of a tab that has at least a year."""

    date: PartialDate
    value: int  # see compare.to_comparable


@dataclass(frozen=True)
class Undated:
    pass


EffectiveDate = Union[Dated, Undated]
UNDATED = Undated()
