"""Resolve a best-effort date for each tab.

Two sources are merged per tab: the title of the tab's group (when it
contains a YYYY-MM-DD date) and the external date provider. Nothing in here
raises on host or provider trouble; affected tabs simply stay undated.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from .config import ResolvePolicy
from .date.compare import has_group
from .date.parsers import parse_label_date
from .date.types import PartialDate, as_int
from .host.base import TabHost
from .provider.base import DateProvider
from .tabs import DateMap, Tab, TabDateInfo

logger = logging.getLogger(__name__)

ReloadStatus = Literal["reloaded", "timeout", "failed"]


@dataclass(frozen=True)
class ReloadResult:
    tab_id: int
    status: ReloadStatus


async def wait_for_reload(host: TabHost, tab_id: int, timeout_s: float) -> ReloadResult:
    """Reload a tab and wait until it reports load-complete or timeout_s passes.

    The load listener is removed before returning on every path, so a late
    completion can't reach a resolve call that has already moved on.
    """

    loop = asyncio.get_running_loop()
    loaded: asyncio.Future[None] = loop.create_future()

    def on_loaded() -> None:
        if not loaded.done():
            loaded.set_result(None)

    async def reload_and_wait() -> None:
        await host.reload_tab(tab_id)
        await loaded

    try:
        host.add_load_listener(tab_id, on_loaded)
        await asyncio.wait_for(reload_and_wait(), timeout=timeout_s)
        return ReloadResult(tab_id, "reloaded")
    except asyncio.TimeoutError:
        logger.info("Tab %s did not finish loading within %ss", tab_id, timeout_s)
        return ReloadResult(tab_id, "timeout")
    except Exception as e:
        logger.warning("Failed to reload tab %s: %s", tab_id, e)
        return ReloadResult(tab_id, "failed")
    finally:
        if not loaded.done():
            loaded.cancel()
        try:
            host.remove_load_listener(tab_id, on_loaded)
        except Exception as e:
            logger.warning("Failed to remove load listener for tab %s: %s", tab_id, e)


async def reload_unloaded(host: TabHost, tabs: list[Tab], timeout_s: float) -> list[ReloadResult]:
    """Reload every tab that isn't fully loaded; returns once all waits have settled."""

    unloaded = [t for t in tabs if t.needs_reload]
    if not unloaded:
        return []
    results = await asyncio.gather(*(wait_for_reload(host, t.id, timeout_s) for t in unloaded))
    logger.info("Tab reload results: %s", [(r.tab_id, r.status) for r in results])
    return list(results)


async def fetch_group_dates(host: TabHost, tabs: list[Tab]) -> dict[int, PartialDate | None]:
    """Parse a date out of the title of every group the tabs belong to.

    Every lookup settles before this returns; if any of them failed, the first
    failure is raised.
    """

    group_ids = sorted({t.group_id for t in tabs if has_group(t.group_id)})  # type: ignore[type-var]
    if not group_ids:
        return {}
    titles = await asyncio.gather(*(host.get_group_title(g) for g in group_ids), return_exceptions=True)
    for title in titles:
        if isinstance(title, BaseException):
            raise title
    return {g: parse_label_date(title) for g, title in zip(group_ids, titles)}  # type: ignore[arg-type]


def _response_items(response: Any) -> list[Any] | None:
    """Return the per-tab items of a provider response, or None if it isn't usable."""

    if not response:
        logger.warning("No response from date provider")
        return None
    if not isinstance(response, Mapping):
        logger.warning("Unexpected response format from date provider: %r", response)
        return None
    if response.get("error"):
        logger.warning("Date provider returned error: %s", response.get("error"))
        return None
    data = response.get("data")
    if not isinstance(data, list):
        logger.warning("Unexpected response format from date provider: %r", response)
        return None
    return data


def merge_provider_response(dates: DateMap, response: Any) -> int:
    """Merge provider records into dates by tab id; returns how many tabs were updated."""

    items = _response_items(response)
    if items is None:
        return 0

    merged = 0
    for item in items:
        if not isinstance(item, Mapping):
            logger.debug("Skipping malformed provider item: %r", item)
            continue
        tab_id = as_int(item.get("tabId"))
        if tab_id is None or tab_id not in dates:
            logger.debug("Skipping provider item for unknown tab: %r", item.get("tabId"))
            continue
        dates[tab_id] = dates[tab_id].merged_with(item)
        merged += 1
    return merged


async def resolve(
    tabs: list[Tab],
    host: TabHost,
    provider: DateProvider | None,
    policy: ResolvePolicy = ResolvePolicy(),
) -> DateMap:
    """Return one TabDateInfo per tab, keyed by tab id."""

    dates: DateMap = {t.id: TabDateInfo.default_for(t) for t in tabs}

    try:
        group_dates = await fetch_group_dates(host, tabs)
    except Exception as e:
        logger.warning("Failed to read tab group titles: %s", e)
        group_dates = {}
    for info in dates.values():
        if info.group_id in group_dates:
            info.group_date = group_dates[info.group_id]  # type: ignore[index]

    try:
        await reload_unloaded(host, tabs, policy.reload_timeout_s)
    except Exception as e:
        logger.warning("Failed to reload unloaded tabs: %s", e)

    if provider is None:
        logger.warning("No date provider available; only group titles will be used")
        return dates

    tab_ids = [t.id for t in tabs]
    try:
        response = await asyncio.to_thread(provider.request_dates, tab_ids)
    except Exception as e:
        logger.warning("Failed to fetch tab dates: %s", e)
        return dates

    merged = merge_provider_response(dates, response)
    logger.info("Date provider returned records for %d of %d tabs", merged, len(tab_ids))
    return dates
