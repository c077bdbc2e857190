"""File-based configuration watcher."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Event, Thread
from typing import Any, Dict, Optional

from dhcpv6pd.service import Config, ConfigWriteError

LOG = logging.getLogger(__name__)


class FileConfigWatcher(Thread):
    """Poll a JSON interfaces document and push changes to the service."""

    def __init__(
        self,
        config: Config,
        path: Path,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True)
        self._config = config
        self._path = Path(path)
        self._interval = interval
        self._stop_event = stop_event
        self._state: Optional[Dict[str, Any]] = None

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception:  # pragma: no cover - logged below
                LOG.exception("config watcher encountered an error")
            self._stop_event.wait(self._interval)

    def poll(self) -> None:
        if not self._path.exists():
            LOG.debug("interfaces file %s does not exist yet", self._path)
            return

        try:
            tree = json.loads(self._path.read_text())
        except json.JSONDecodeError as exc:
            LOG.warning("failed to parse interfaces file %s: %s", self._path, exc)
            return

        if not isinstance(tree, dict):
            LOG.warning("invalid interfaces file %s: not a JSON object", self._path)
            return

        if tree == self._state:
            return

        self._config.validate(tree)
        LOG.debug("interfaces file %s changed", self._path)
        self._state = tree
        try:
            self._config.set(tree)
        except ConfigWriteError as exc:
            LOG.warning("configuration applied but not cached: %s", exc)
