from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class DateProvider(ABC):
    name: str

    @abstractmethod
    def request_dates(self, tab_ids: list[int]) -> Any:
        """Send one get-dates request for tab_ids and return the raw response.

        Expected shape is {"data": [{"tabId", "url", "title", "dateString", "date"}, ...]},
        but callers must not assume it; the resolver validates.
        """
        raise NotImplementedError
