from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .date.types import PartialDate, as_int

NO_GROUP = -1


@dataclass(frozen=True)
class Tab:
    """Snapshot of a browser tab as reported by the host."""

    id: int
    index: int
    group_id: int | None = None
    status: str = "complete"  # "loading" | "complete"
    discarded: bool = False
    url: str | None = None
    title: str | None = None
    window_id: int | None = None

    @property
    def needs_reload(self) -> bool:
        return self.discarded or self.status != "complete"

    @classmethod
    def from_host(cls, obj: Mapping[str, Any]) -> "Tab":
        """Build a Tab from the browser's tab record (camelCase keys)."""
        tab_id = as_int(obj.get("id"))
        if tab_id is None:
            raise ValueError(f"Tab record without a usable id: {obj!r}")
        group_id = obj.get("groupId")
        return cls(
            id=tab_id,
            index=int(obj.get("index") or 0),
            group_id=int(group_id) if group_id is not None else None,
            status=str(obj.get("status") or "complete"),
            discarded=bool(obj.get("discarded", False)),
            url=obj.get("url"),
            title=obj.get("title"),
            window_id=obj.get("windowId"),
        )

    def to_host(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "index": self.index,
            "groupId": self.group_id if self.group_id is not None else NO_GROUP,
            "status": self.status,
            "discarded": self.discarded,
        }
        if self.url is not None:
            out["url"] = self.url
        if self.title is not None:
            out["title"] = self.title
        if self.window_id is not None:
            out["windowId"] = self.window_id
        return out


@dataclass
class TabDateInfo:
    """Everything known about one tab's date after resolution.

    `date` comes from the date provider, `group_date` from the title of the
    tab's group. Built fresh on each resolve; treat as read-only afterwards.
    """

    tab_id: int
    url: str | None = None
    title: str | None = None
    date_string: str | None = None
    date: PartialDate | None = None
    group_id: int | None = None
    group_date: PartialDate | None = None

    @classmethod
    def default_for(cls, tab: Tab) -> "TabDateInfo":
        return cls(tab_id=tab.id, url=tab.url, group_id=tab.group_id)

    def merged_with(self, record: Mapping[str, Any]) -> "TabDateInfo":
        """Replace the provider-sourced fields with a provider record; group fields are kept."""
        return TabDateInfo(
            tab_id=self.tab_id,
            url=record.get("url", self.url),
            title=record.get("title"),
            date_string=record.get("dateString"),
            date=PartialDate.from_obj(record.get("date")),
            group_id=self.group_id,
            group_date=self.group_date,
        )


DateMap = dict[int, TabDateInfo]
