#!/usr/bin/env python3
"""Run a tab grouping command against a JSON snapshot of a browser window.

This script is intentionally thin; resolution, sorting and bucketing live in
the tabdate package. The snapshot format is documented on
tabdate.host.snapshot.SnapshotHost.

Usage:
  PYTHONPATH=. python3 scripts/group_tabs.py \
    --snapshot window.json \
    --placement start \
    --provider none \
    --out window.grouped.json

Defaults for --placement/--timeout/--provider come from TABDATE_* env vars
(or .env), see tabdate.config.GroupingConfig.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from tabdate.commands import COMMANDS, run_command
from tabdate.config import GroupingConfig
from tabdate.date.types import UNDATED_PLACEMENTS
from tabdate.host.snapshot import SnapshotHost
from tabdate.provider.registry import build_provider


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--snapshot", required=True, help="JSON snapshot of the browser window.")
    ap.add_argument("--command", default="group-tabs-by-date", choices=COMMANDS)
    ap.add_argument("--placement", choices=UNDATED_PLACEMENTS, default=None, help="Where undated tabs go.")
    ap.add_argument("--provider", default=None, help="Date provider: http | none.")
    ap.add_argument("--timeout", type=float, default=None, help="Seconds to wait for each reloading tab.")
    ap.add_argument("--out", default=None, help="Write the resulting snapshot here instead of stdout.")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    snapshot_path = Path(args.snapshot).expanduser()
    if not snapshot_path.exists():
        raise SystemExit(f"Snapshot not found: {snapshot_path}")

    cfg = GroupingConfig.from_env()
    if args.placement:
        cfg = replace(cfg, undated_placement=args.placement)
    if args.timeout is not None:
        cfg = replace(cfg, reload_timeout_s=args.timeout)
    if args.provider:
        cfg = replace(cfg, provider=args.provider)

    host = SnapshotHost.from_file(snapshot_path)
    provider = None
    if args.command == "group-tabs-by-date":
        try:
            provider = build_provider(cfg.provider, user_agent=host.user_agent)
        except (RuntimeError, ValueError) as e:
            raise SystemExit(str(e))

    ok = asyncio.run(run_command(args.command, host, provider, cfg))

    out = json.dumps(host.to_snapshot(), indent=2) + "\n"
    if args.out:
        out_path = Path(args.out).expanduser()
        out_path.write_text(out, encoding="utf-8")
        print(f"{'OK' if ok else 'WARN'}: wrote {out_path}", file=sys.stderr)
    else:
        sys.stdout.write(out)
        if not ok:
            print("WARN: grouping did not fully succeed (see log)", file=sys.stderr)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
