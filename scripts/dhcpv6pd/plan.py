#!/usr/bin/env python3
"""Print the ip -batch lines a prefix change would produce (dry run)."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from dhcpv6pd.config import derive_config  # noqa: E402
from dhcpv6pd.desired_state import DesiredState  # noqa: E402
from dhcpv6pd.eui64 import UnknownInterfaceError  # noqa: E402
from dhcpv6pd.reconciler import plan_changes  # noqa: E402


LOG = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the interfaces configuration tree (RFC 7951 JSON)",
    )
    parser.add_argument(
        "--macs",
        type=Path,
        required=True,
        help="JSON object mapping interface names to MAC addresses",
    )
    parser.add_argument(
        "--old",
        type=Path,
        help="JSON object of previously delegated prefixes (source -> prefix)",
    )
    parser.add_argument(
        "--new",
        type=Path,
        help="JSON object of currently delegated prefixes (source -> prefix)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def load_json(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    with path.open() as fh:
        return json.load(fh)


def static_lookup(macs: Mapping[str, str]):
    def lookup(ifname: str) -> Optional[str]:
        if ifname not in macs:
            raise UnknownInterfaceError(f"interface {ifname} not in MAC table")
        return macs[ifname]

    return lookup


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    derived = derive_config(load_json(args.config))
    old = DesiredState(config=derived, known_prefixes=load_json(args.old))
    new = DesiredState(config=derived, known_prefixes=load_json(args.new))

    plan = plan_changes(old, new, static_lookup(load_json(args.macs)))
    if not plan:
        LOG.info("No address changes required")
        return

    for op in plan.remove + plan.add:
        print(op.as_batch_line())


if __name__ == "__main__":
    main()
