from __future__ import annotations

import asyncio
from typing import Any

import pytest

from tabdate.config import ResolvePolicy
from tabdate.date import PartialDate
from tabdate.host.snapshot import SnapshotHost
from tabdate.provider.base import DateProvider
from tabdate.resolve import resolve, wait_for_reload
from tabdate.tabs import TabDateInfo

FAST = ResolvePolicy(reload_timeout_s=0.05)


class FakeProvider(DateProvider):
    name = "fake"

    def __init__(self, response: Any = None, exc: Exception | None = None, host: SnapshotHost | None = None):
        self.response = response
        self.exc = exc
        self.host = host
        self.calls: list[list[int]] = []
        self.listeners_at_call: list[int] = []

    def request_dates(self, tab_ids: list[int]) -> Any:
        self.calls.append(list(tab_ids))
        if self.host is not None:
            self.listeners_at_call.append(self.host.listener_count())
        if self.exc is not None:
            raise self.exc
        return self.response


class BrokenGroupsHost(SnapshotHost):
    async def get_group_title(self, group_id: int) -> str | None:
        raise RuntimeError("tabGroups API unavailable")


class FailingReloadHost(SnapshotHost):
    async def reload_tab(self, tab_id: int) -> None:
        raise RuntimeError("No tab with id")


def _snapshot(**kw: Any) -> dict[str, Any]:
    snap: dict[str, Any] = {
        "userAgent": "Mozilla/5.0 Chrome/120",
        "tabs": [
            {"id": 5, "index": 0, "status": "complete", "url": "https://a.example/"},
            {"id": 7, "index": 1, "status": "complete", "url": "https://b.example/"},
        ],
        "groups": {},
    }
    snap.update(kw)
    return snap


def test_partial_response_keeps_defaults_for_missing_tabs() -> None:
    host = SnapshotHost(_snapshot())
    tabs = asyncio.run(host.query_highlighted_tabs())
    provider = FakeProvider({"data": [{"tabId": 7, "date": {"year": 2024, "month": 3, "day": 2}}]})

    dates = asyncio.run(resolve(tabs, host, provider, FAST))

    assert provider.calls == [[5, 7]]
    assert dates[5] == TabDateInfo(tab_id=5, url="https://a.example/")
    assert dates[7].date == PartialDate(year=2024, month=3, day=2)


def test_full_record_is_merged() -> None:
    host = SnapshotHost(_snapshot())
    tabs = asyncio.run(host.query_highlighted_tabs())
    record = {
        "tabId": 5,
        "url": "https://a.example/post",
        "title": "Post",
        "dateString": "March 2, 2024",
        "date": {"year": "2024", "month": "03", "day": "02"},
    }
    dates = asyncio.run(resolve(tabs, host, FakeProvider({"data": [record, {"tabId": 99}]}), FAST))

    assert dates[5].title == "Post"
    assert dates[5].url == "https://a.example/post"
    assert dates[5].date_string == "March 2, 2024"
    assert set(dates) == {5, 7}


@pytest.mark.parametrize(
    "response",
    [None, True, False, [], "ok", {"error": "not ready"}, {"data": "nope"}, {"data": [1, "x", None]}],
)
def test_malformed_responses_degrade_to_defaults(response: Any) -> None:
    host = SnapshotHost(_snapshot())
    tabs = asyncio.run(host.query_highlighted_tabs())
    dates = asyncio.run(resolve(tabs, host, FakeProvider(response), FAST))
    assert all(info.date is None for info in dates.values())
    assert set(dates) == {5, 7}


def test_provider_exception_is_not_raised() -> None:
    host = SnapshotHost(_snapshot())
    tabs = asyncio.run(host.query_highlighted_tabs())
    dates = asyncio.run(resolve(tabs, host, FakeProvider(exc=ConnectionError("relay down")), FAST))
    assert [d.date for d in dates.values()] == [None, None]


def test_missing_provider_still_uses_group_titles() -> None:
    snap = _snapshot(
        tabs=[{"id": 5, "index": 0, "groupId": 3}, {"id": 7, "index": 1, "groupId": -1}],
        groups={"3": "trip 2024-03-02"},
    )
    host = SnapshotHost(snap)
    tabs = asyncio.run(host.query_highlighted_tabs())
    dates = asyncio.run(resolve(tabs, host, None, FAST))
    assert dates[5].group_date == PartialDate("2024", "03", "02")
    assert dates[7].group_date is None


def test_group_lookup_failure_is_soft() -> None:
    snap = _snapshot(tabs=[{"id": 5, "index": 0, "groupId": 3}, {"id": 7, "index": 1}], groups={"3": "2024-03-02"})
    host = BrokenGroupsHost(snap)
    tabs = asyncio.run(host.query_highlighted_tabs())
    provider = FakeProvider({"data": [{"tabId": 7, "date": {"year": 2021, "month": None, "day": None}}]})

    dates = asyncio.run(resolve(tabs, host, provider, FAST))

    assert dates[5].group_date is None
    assert dates[7].date == PartialDate(2021, None, None)


def test_stalled_tab_times_out_and_keeps_default_record() -> None:
    snap = _snapshot(
        tabs=[
            {"id": 5, "index": 0, "status": "complete"},
            {"id": 7, "index": 1, "status": "loading", "discarded": True},
        ],
        stalled=[7],
    )
    host = SnapshotHost(snap)
    tabs = asyncio.run(host.query_highlighted_tabs())
    provider = FakeProvider({"data": []}, host=host)

    dates = asyncio.run(resolve(tabs, host, provider, FAST))

    assert host.reloads == [7]
    assert dates[7] == TabDateInfo(tab_id=7)
    # every wait settled and cleaned up before the provider was asked
    assert provider.listeners_at_call == [0]
    assert host.listener_count() == 0


def test_only_unloaded_tabs_are_reloaded() -> None:
    snap = _snapshot(
        tabs=[
            {"id": 5, "index": 0, "status": "complete"},
            {"id": 6, "index": 1, "status": "loading"},
            {"id": 7, "index": 2, "status": "complete", "discarded": True},
        ]
    )
    host = SnapshotHost(snap)
    tabs = asyncio.run(host.query_highlighted_tabs())
    asyncio.run(resolve(tabs, host, FakeProvider({"data": []}), ResolvePolicy(reload_timeout_s=5)))
    assert sorted(host.reloads) == [6, 7]
    assert host.tab(6).status == "complete"
    assert host.listener_count() == 0


def test_wait_for_reload_outcomes() -> None:
    snap = _snapshot(tabs=[{"id": 1, "index": 0, "status": "loading"}, {"id": 2, "index": 1}], stalled=[2])
    host = SnapshotHost(snap)

    async def run() -> list[str]:
        done = await wait_for_reload(host, 1, 5)
        stalled = await wait_for_reload(host, 2, 0.05)
        return [done.status, stalled.status]

    assert asyncio.run(run()) == ["reloaded", "timeout"]
    assert host.listener_count() == 0


def test_wait_for_reload_failure_removes_listener() -> None:
    host = FailingReloadHost(_snapshot())
    result = asyncio.run(wait_for_reload(host, 5, 5))
    assert result.status == "failed"
    assert host.listener_count() == 0


class SlowAndBrokenGroupsHost(SnapshotHost):
    def __init__(self, snapshot: dict[str, Any]):
        super().__init__(snapshot)
        self.finished: list[int] = []

    async def get_group_title(self, group_id: int) -> str | None:
        if group_id == 1:
            raise RuntimeError("group 1 is gone")
        await asyncio.sleep(0.05)
        self.finished.append(group_id)
        return "2024-03-02"


class StuckListenerHost(SnapshotHost):
    def remove_load_listener(self, tab_id: int, callback: Any) -> None:
        raise RuntimeError("listener registry unavailable")


def test_group_lookups_all_settle_before_resolve_returns() -> None:
    snap = _snapshot(tabs=[{"id": 5, "index": 0, "groupId": 1}, {"id": 7, "index": 1, "groupId": 2}])
    host = SlowAndBrokenGroupsHost(snap)

    async def run() -> tuple[list[int], Any]:
        tabs = await host.query_highlighted_tabs()
        dates = await resolve(tabs, host, None, FAST)
        return list(host.finished), dates

    finished, dates = asyncio.run(run())
    assert finished == [2]
    # one failed lookup drops the whole batch of group dates
    assert dates[5].group_date is None and dates[7].group_date is None


def test_listener_removal_failure_is_not_raised() -> None:
    snap = _snapshot(tabs=[{"id": 5, "index": 0, "status": "loading"}])
    host = StuckListenerHost(snap)
    tabs = asyncio.run(host.query_highlighted_tabs())
    provider = FakeProvider({"data": [{"tabId": 5, "date": {"year": 2024, "month": 1, "day": 2}}]})

    dates = asyncio.run(resolve(tabs, host, provider, FAST))

    assert host.reloads == [5]
    assert dates[5].date == PartialDate(2024, 1, 2)
