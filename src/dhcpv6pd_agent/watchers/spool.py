"""Deliver notifications dropped into the spool directory."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Event, Thread

from dhcpv6pd.registry import NotificationRegistry

from dhcpv6pd_agent.spool import SUFFIX, read_notification

LOG = logging.getLogger(__name__)


class SpoolNotificationWatcher(Thread):
    """Poll ``path`` and hand each notification file to ``registry``."""

    def __init__(
        self,
        registry: NotificationRegistry,
        path: Path,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True)
        self._registry = registry
        self._path = Path(path)
        self._interval = interval
        self._stop_event = stop_event

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception:  # pragma: no cover - logged below
                LOG.exception("spool watcher encountered an error")
            self._stop_event.wait(self._interval)

    def poll(self) -> int:
        """Deliver every pending notification; return how many were handled."""

        if not self._path.is_dir():
            LOG.debug("spool directory %s does not exist yet", self._path)
            return 0

        delivered = 0
        for entry in sorted(self._path.glob(f"[!.]*{SUFFIX}")):
            try:
                module, notification, payload = read_notification(entry)
                self._registry.emit(module, notification, payload)
            except ValueError as exc:
                LOG.warning("dropping malformed notification %s: %s", entry.name, exc)
            else:
                delivered += 1
            # Any other failure leaves the file for the next poll.
            entry.unlink(missing_ok=True)
        return delivered
