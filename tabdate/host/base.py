from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from ..tabs import Tab

LoadListener = Callable[[], None]


class TabHost(ABC):
    """The browser, as seen by the grouping code.

    Coroutine methods may raise on host failure; callers in this package catch
    and log those. Load listeners are invoked on the event loop thread.
    """

    user_agent: str = ""

    @abstractmethod
    async def query_highlighted_tabs(self) -> list[Tab]:
        """Highlighted tabs of the focused window, in window order."""
        raise NotImplementedError

    @abstractmethod
    async def get_group_title(self, group_id: int) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def reload_tab(self, tab_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_load_listener(self, tab_id: int, callback: LoadListener) -> None:
        """Call `callback` when tab_id finishes loading (until removed)."""
        raise NotImplementedError

    @abstractmethod
    def remove_load_listener(self, tab_id: int, callback: LoadListener) -> None:
        raise NotImplementedError

    @abstractmethod
    async def group_tabs(self, tab_ids: list[int]) -> int:
        """Put tab_ids into a new group and return its id."""
        raise NotImplementedError

    @abstractmethod
    async def set_group_title(self, group_id: int, title: str) -> None:
        raise NotImplementedError
