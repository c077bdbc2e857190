"""Emit a prefix delegation notification into the agent's spool.

Intended to be called from dhclient hooks, or by hand to replay an event.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dhcpv6pd.events import PREFIX_ASSIGNED, PREFIX_REMOVED, emit_prefix_assigned, emit_prefix_removed

from .config import DEFAULT_SPOOL_DIR
from .spool import SpoolEmitter

LOG = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--notif",
        required=True,
        choices=(PREFIX_ASSIGNED, PREFIX_REMOVED),
        help="The notification to emit",
    )
    parser.add_argument(
        "--interface",
        required=True,
        help="The interface on which the event was seen",
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="The ipv6 prefix of the event",
    )
    parser.add_argument(
        "--spool",
        type=Path,
        default=DEFAULT_SPOOL_DIR,
        help="Spool directory watched by the agent",
    )
    args = parser.parse_args(argv)

    if args.notif == PREFIX_ASSIGNED and not args.prefix:
        parser.error("--prefix is required for prefix-assigned")

    emitter = SpoolEmitter(args.spool)
    try:
        if args.notif == PREFIX_ASSIGNED:
            emit_prefix_assigned(emitter, args.interface, args.prefix)
        else:
            emit_prefix_removed(emitter, args.interface, args.prefix)
    except OSError as exc:
        LOG.error("failed to emit %s: %s", args.notif, exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
