"""Directory based notification transport.

Each notification is one JSON file::

    {"module": "vyatta-dhcpv6pd-v1",
     "notification": "prefix-assigned",
     "payload": {"vyatta-dhcpv6pd-v1:interface": "dp0s3",
                 "vyatta-dhcpv6pd-v1:prefix": "2001:db8:1::/56"}}

File names start with a nanosecond timestamp and a per-emitter counter so
lexical order is delivery order.  Files are written to a temporary name and
renamed into place, so a reader never sees a partial notification.
"""

from __future__ import annotations

import itertools
import json
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from dhcpv6pd.events import Emitter

SUFFIX = ".json"


class SpoolEmitter(Emitter):
    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._sequence = itertools.count()

    def emit(self, module: str, notification: str, payload: Mapping[str, Any]) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        name = f"{time.time_ns():020d}-{next(self._sequence):06d}-{uuid.uuid4().hex}{SUFFIX}"
        record = {"module": module, "notification": notification, "payload": dict(payload)}
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=self._directory, prefix=".", suffix=".tmp",
            encoding="utf-8",
        ) as fh:
            json.dump(record, fh)
            tmp_name = fh.name
        os.replace(tmp_name, self._directory / name)


def read_notification(path: Path) -> Tuple[str, str, Dict[str, Any]]:
    """Return ``(module, notification, payload)`` stored in ``path``."""

    record = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(record, dict):
        raise ValueError("notification must be a JSON object")
    payload = record.get("payload", {})
    if not isinstance(payload, dict):
        raise ValueError("notification 'payload' must be an object")
    try:
        return str(record["module"]), str(record["notification"]), payload
    except KeyError as exc:
        raise ValueError(f"notification missing {exc.args[0]!r}") from None
