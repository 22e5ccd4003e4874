from __future__ import annotations

from typing import Mapping

from .date.compare import UNDATED_KEY, date_key, effective_date
from .date.types import Dated
from .tabs import Tab, TabDateInfo


def bucket(tabs: list[Tab], dates: Mapping[int, TabDateInfo]) -> dict[str, list[int]]:
    """Partition tab ids by effective date key, in input order.

    Pass tabs already sorted by `sort_by_date` to get chronological buckets.
    The "undated" bucket only exists if some tab has no date.
    """

    buckets: dict[str, list[int]] = {}
    for tab in tabs:
        eff = effective_date(dates.get(tab.id))
        key = date_key(eff.date) if isinstance(eff, Dated) else UNDATED_KEY
        buckets.setdefault(key, []).append(tab.id)
    return buckets
