from __future__ import annotations

import logging
from typing import Mapping

from .date.compare import effective_date, has_group
from .date.types import UNDATED_PLACEMENTS, Dated, EffectiveDate, UndatedPlacement
from .tabs import Tab, TabDateInfo

logger = logging.getLogger(__name__)


def _placement_rank(dated: bool, placement: UndatedPlacement) -> int:
    """0 sorts first. "end" and "preserve" both put dated tabs first."""
    if placement == "start":
        return 1 if dated else 0
    return 0 if dated else 1


def sort_by_date(
    tabs: list[Tab],
    dates: Mapping[int, TabDateInfo],
    undated_placement: UndatedPlacement = "end",
) -> list[Tab]:
    """Return tabs ordered by effective date; the input list is left untouched.

    Tabs of one group that are all dated (or all undated) stay together in
    window order: the dated ones sit at the group's earliest date, the
    undated ones where the group's first undated tab was. Other ties keep
    input order. Tabs missing from dates count as undated.
    """

    if undated_placement not in UNDATED_PLACEMENTS:
        raise ValueError(f"Unsupported undated placement: {undated_placement}")

    eff: list[EffectiveDate] = [effective_date(dates.get(t.id)) for t in tabs]

    # per (group, dated?) the earliest date and the first input position
    anchors: dict[tuple[int, bool], tuple[int, int]] = {}
    for pos, (tab, e) in enumerate(zip(tabs, eff)):
        if not has_group(tab.group_id):
            continue
        dated = isinstance(e, Dated)
        value = e.value if isinstance(e, Dated) else 0
        key = (tab.group_id, dated)  # type: ignore[assignment]
        if key in anchors:
            first_value, first_pos = anchors[key]
            anchors[key] = (min(first_value, value), first_pos)
        else:
            anchors[key] = (value, pos)

    keyed = []
    for pos, (tab, e) in enumerate(zip(tabs, eff)):
        dated = isinstance(e, Dated)
        value = e.value if isinstance(e, Dated) else 0
        if has_group(tab.group_id):
            value, anchor_pos = anchors[(tab.group_id, dated)]  # type: ignore[index]
            key = (_placement_rank(dated, undated_placement), value, anchor_pos, tab.index)
        else:
            key = (_placement_rank(dated, undated_placement), value, pos, 0)
        keyed.append((key, tab))

    out = [tab for _, tab in sorted(keyed, key=lambda kt: kt[0])]
    logger.debug("Sorted tab ids: %s", [t.id for t in out])
    return out
