"""
itam.cli
========

Command‑line helpers.

Examples
--------
$ python -m itam.cli init-db
$ python -m itam.cli states
$ python -m itam.cli next-states "In Service"
$ python -m itam.cli report --refresh
$ python -m itam.cli chart --out-dir images/
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import accounting, viz
from .db import create_all
from .inventory_db import DBAssetRegistry, DBLicenseRegistry
from .lifecycle import TERMINAL_STATES, TRANSITIONS, reachable_states
from .models import AssetState
from .settings import settings


def _cmd_init_db(args: argparse.Namespace) -> int:
    create_all()
    print(f"✅ schema initialised at {settings.db_url}")
    return 0


def _cmd_states(args: argparse.Namespace) -> int:
    for (source, target), precondition in TRANSITIONS.items():
        cond = f"  [{precondition.name}]" if precondition else ""
        print(f"{source.value:<11} → {target.value}{cond}")
    print("terminal: " + ", ".join(s.value for s in sorted(TERMINAL_STATES)))
    return 0


def _cmd_next_states(args: argparse.Namespace) -> int:
    try:
        state = AssetState(args.state)
    except ValueError:
        print(f"⛔ unknown state: {args.state}", file=sys.stderr)
        return 2
    targets = reachable_states(state)
    print("\n".join(t.value for t in targets) if targets else "(none)")
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    with DBLicenseRegistry() as licenses:
        rows = licenses.refresh() if args.refresh else list(licenses)
    report = {
        "compliance": accounting.compliance_report(rows),
        "utilization": accounting.utilization_stats(rows),
        "expiring": [
            lic.license_id
            for lic in accounting.expiring_licenses(rows, settings.expiring_window_days)
        ],
    }
    print(json.dumps(report, indent=2))
    return 0


def _cmd_chart(args: argparse.Namespace) -> int:
    out_dir = Path(args.out_dir) if args.out_dir else Path(settings.image_dir)
    with DBAssetRegistry() as assets, DBLicenseRegistry() as licenses:
        paths = [
            viz.state_summary(assets, out_dir / "asset_states.png"),
            viz.compliance_summary(licenses, out_dir / "license_compliance.png"),
        ]
    for p in paths:
        print(f"✅ wrote {p}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m itam.cli", description="ITAM rules utilities")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create tables").set_defaults(func=_cmd_init_db)
    sub.add_parser("states", help="print the asset transition table").set_defaults(func=_cmd_states)

    p = sub.add_parser("next-states", help="list table successors of a state")
    p.add_argument("state", help='asset state, e.g. "In Service"')
    p.set_defaults(func=_cmd_next_states)

    p = sub.add_parser("report", help="license compliance / utilization report as JSON")
    p.add_argument("--refresh", action="store_true", help="recompute derived fields before reporting")
    p.set_defaults(func=_cmd_report)

    p = sub.add_parser("chart", help="render PNG charts")
    p.add_argument("--out-dir", help="directory for the PNG files")
    p.set_defaults(func=_cmd_chart)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
