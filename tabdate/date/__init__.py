"""Date parsing and comparison for tabs.

Tabs may carry no date at all, or only a year. Every consumer goes through
`effective_date`, which reduces a tab's record to `Dated` or `Undated`.
"""

from .types import UNDATED, Dated, EffectiveDate, PartialDate, Undated, UndatedPlacement, as_int
from .parsers import parse_label_date
from .compare import UNDATED_KEY, date_key, effective_date, has_group, to_comparable
