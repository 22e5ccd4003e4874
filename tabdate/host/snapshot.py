from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..tabs import NO_GROUP, Tab
from .base import LoadListener, TabHost


class SnapshotHost(TabHost):
    """A TabHost backed by a JSON snapshot of one browser window.

    Snapshot shape:
        {"userAgent": "...",
         "tabs": [{"id": 1, "index": 0, "groupId": -1, "status": "complete",
                   "discarded": false, "highlighted": true, "url": "...", "title": "..."}],
         "groups": {"3": "2024-03-02 reading"},
         "stalled": [5]}

    Reloading a tab marks it complete and notifies listeners on the next loop
    iteration. Tabs listed in "stalled" never finish loading.
    """

    def __init__(self, snapshot: dict[str, Any]):
        self.user_agent = str(snapshot.get("userAgent") or "")
        self._tabs: dict[int, Tab] = {}
        self._highlighted: dict[int, bool] = {}
        for obj in snapshot.get("tabs") or []:
            tab = Tab.from_host(obj)
            self._tabs[tab.id] = tab
            self._highlighted[tab.id] = bool(obj.get("highlighted", True))
        self._groups: dict[int, str] = {int(k): str(v or "") for k, v in (snapshot.get("groups") or {}).items()}
        self._stalled = {int(t) for t in snapshot.get("stalled") or []}
        self._listeners: dict[int, list[LoadListener]] = {}
        self.reloads: list[int] = []

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotHost":
        return cls(json.loads(path.read_text(encoding="utf-8")))

    def to_snapshot(self) -> dict[str, Any]:
        tabs = []
        for tab in sorted(self._tabs.values(), key=lambda t: t.index):
            obj = tab.to_host()
            obj["highlighted"] = self._highlighted.get(tab.id, True)
            tabs.append(obj)
        out: dict[str, Any] = {
            "userAgent": self.user_agent,
            "tabs": tabs,
            "groups": {str(k): v for k, v in sorted(self._groups.items())},
        }
        if self._stalled:
            out["stalled"] = sorted(self._stalled)
        return out

    def _require_tab(self, tab_id: int) -> Tab:
        tab = self._tabs.get(tab_id)
        if tab is None:
            raise ValueError(f"No tab with id: {tab_id}")
        return tab

    async def query_highlighted_tabs(self) -> list[Tab]:
        tabs = [t for t in self._tabs.values() if self._highlighted.get(t.id, True)]
        return sorted(tabs, key=lambda t: t.index)

    async def get_group_title(self, group_id: int) -> str | None:
        if group_id not in self._groups:
            raise ValueError(f"No group with id: {group_id}")
        return self._groups[group_id]

    async def reload_tab(self, tab_id: int) -> None:
        tab = self._require_tab(tab_id)
        self.reloads.append(tab_id)
        if tab_id in self._stalled:
            return
        self._tabs[tab_id] = replace(tab, status="complete", discarded=False)
        asyncio.get_running_loop().call_soon(self._notify_loaded, tab_id)

    def _notify_loaded(self, tab_id: int) -> None:
        for cb in list(self._listeners.get(tab_id, [])):
            cb()

    def add_load_listener(self, tab_id: int, callback: LoadListener) -> None:
        self._listeners.setdefault(tab_id, []).append(callback)

    def remove_load_listener(self, tab_id: int, callback: LoadListener) -> None:
        cbs = self._listeners.get(tab_id)
        if not cbs or callback not in cbs:
            return
        cbs.remove(callback)
        if not cbs:
            del self._listeners[tab_id]

    def listener_count(self, tab_id: int | None = None) -> int:
        if tab_id is not None:
            return len(self._listeners.get(tab_id, []))
        return sum(len(cbs) for cbs in self._listeners.values())

    async def group_tabs(self, tab_ids: list[int]) -> int:
        if not tab_ids:
            raise ValueError("Cannot group an empty list of tabs")
        tabs = [self._require_tab(t) for t in tab_ids]
        used = set(self._groups) | {t.group_id for t in self._tabs.values() if t.group_id is not None}
        group_id = max(used | {NO_GROUP, 0}) + 1
        for tab in tabs:
            self._tabs[tab.id] = replace(tab, group_id=group_id)
        self._groups[group_id] = ""
        return group_id

    async def set_group_title(self, group_id: int, title: str) -> None:
        if group_id not in self._groups:
            raise ValueError(f"No group with id: {group_id}")
        self._groups[group_id] = title

    def tab(self, tab_id: int) -> Tab:
        return self._require_tab(tab_id)

    def group_title(self, group_id: int) -> str | None:
        return self._groups.get(group_id)
