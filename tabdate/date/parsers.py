from __future__ import annotations

import re

from .types import PartialDate

# YYYY-MM-DD anywhere in the text, e.g. a tab group title "2024-03-02 reading"
LABEL_DATE_RE = re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})")


def parse_label_date(text: str | None) -> PartialDate | None:
    """Return the leftmost YYYY-MM-DD in text as a PartialDate (groups kept as strings)."""

    if not text:
        return None
    m = LABEL_DATE_RE.search(text)
    if not m:
        return None
    return PartialDate(year=m.group("year"), month=m.group("month"), day=m.group("day"))
