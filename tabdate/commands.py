"""Top-level grouping commands.

These are what a keyboard shortcut or toolbar click ends up calling. None of
them raises: failures are logged and reported through the return value.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .config import GroupingConfig
from .date.compare import UNDATED_KEY
from .group import bucket
from .host.base import TabHost
from .provider.base import DateProvider
from .resolve import resolve
from .sort import sort_by_date
from .tabs import Tab

logger = logging.getLogger(__name__)

COMMANDS = ("group-tabs", "group-tabs-by-date")


@dataclass
class GroupingReport:
    ok: bool
    buckets: dict[str, list[int]] = field(default_factory=dict)
    groups: dict[str, int] = field(default_factory=dict)  # bucket key -> created group id
    failed: list[str] = field(default_factory=list)  # bucket keys that could not be grouped


async def get_selected_tabs(host: TabHost) -> list[Tab]:
    try:
        tabs = await host.query_highlighted_tabs()
    except Exception as e:
        logger.warning("Failed to get selected tabs: %s", e)
        return []
    logger.info("Tabs obtained: %s", [(t.id, t.url, t.title) for t in tabs])
    return tabs


async def group_selected_tabs(host: TabHost) -> bool:
    """Put all selected tabs into one new group."""
    tabs = await get_selected_tabs(host)
    if not tabs:
        logger.info("No tabs found.")
        return False
    try:
        group_id = await host.group_tabs([t.id for t in tabs])
    except Exception as e:
        logger.warning("Error grouping tabs: %s", e)
        return False
    logger.info("Grouped %d tabs into group %s", len(tabs), group_id)
    return True


async def _create_group(host: TabHost, key: str, tab_ids: list[int]) -> int:
    group_id = await host.group_tabs(tab_ids)
    if key != UNDATED_KEY:
        await host.set_group_title(group_id, key)
    logger.info("Grouped tabs by date: %s %s", key, tab_ids)
    return group_id


async def group_selected_tabs_by_date(
    host: TabHost,
    provider: DateProvider | None,
    config: GroupingConfig = GroupingConfig(),
) -> GroupingReport:
    """Sort the selected tabs by date and put each date into its own titled group."""

    try:
        tabs = await get_selected_tabs(host)
        if not tabs:
            logger.info("No tabs found.")
            return GroupingReport(ok=False)

        dates = await resolve(tabs, host, provider, config.resolve_policy())
        sorted_tabs = sort_by_date(tabs, dates, config.undated_placement)
        buckets = bucket(sorted_tabs, dates)
        logger.info("Tab groups: %s", buckets)

        results = await asyncio.gather(
            *(_create_group(host, key, ids) for key, ids in buckets.items()),
            return_exceptions=True,
        )
    except Exception:
        logger.exception("Error grouping tabs by date")
        return GroupingReport(ok=False)

    report = GroupingReport(ok=True, buckets=buckets)
    for key, result in zip(buckets, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning("Error grouping tabs on date %s: %s", key, result)
            report.failed.append(key)
        else:
            report.groups[key] = result
    report.ok = not report.failed
    return report


async def run_command(
    command: str,
    host: TabHost,
    provider: DateProvider | None,
    config: GroupingConfig = GroupingConfig(),
) -> bool:
    if command == "group-tabs":
        return await group_selected_tabs(host)
    if command == "group-tabs-by-date":
        report = await group_selected_tabs_by_date(host, provider, config)
        return report.ok
    logger.warning("Unknown command: %s (expected one of %s)", command, ", ".join(COMMANDS))
    return False
