"""Re-announce prefixes found in leases left behind by dhclient.

The agent does not persist which prefixes it has seen, so on start-up every
delegated prefix still present in a lease file is treated as a fresh
assignment.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Tuple

from dhcpv6pd.events import Emitter, emit_prefix_assigned

LOG = logging.getLogger(__name__)

IAPREFIX_RE = re.compile(r"iaprefix (.*) {")


def read_lease_file(path: Path) -> List[str]:
    """Return the distinct ``iaprefix`` values of ``path`` in first-seen order."""

    try:
        text = path.read_text()
    except OSError as exc:
        LOG.warning("failed to read lease file %s: %s", path, exc)
        return []

    prefixes = [match.group(1) for match in map(IAPREFIX_RE.search, text.splitlines()) if match]
    unique = list(dict.fromkeys(prefixes))
    LOG.debug("unique prefixes in %s: %s", path, unique)
    return unique


def scan_leases(directory: Path, pattern: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(interface, prefix)`` for every lease file matching ``pattern``."""

    regex = re.compile(pattern)
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        LOG.warning("failed to list lease directory %s: %s", directory, exc)
        return

    for entry in entries:
        match = regex.fullmatch(entry.name)
        if not match or len(match.groups()) != 1 or not entry.is_file():
            continue
        interface = match.group(1)
        for prefix in read_lease_file(entry):
            yield interface, prefix


def announce_existing_leases(emitter: Emitter, directory: Path, pattern: str) -> int:
    """Emit ``prefix-assigned`` for each leased prefix; return how many were sent."""

    sent = 0
    for interface, prefix in scan_leases(directory, pattern):
        LOG.info("Emitting prefix-assigned %s %s", interface, prefix)
        try:
            emit_prefix_assigned(emitter, interface, prefix)
        except (OSError, ValueError) as exc:
            LOG.warning("failed to announce %s on %s: %s", prefix, interface, exc)
            continue
        sent += 1
    return sent
