"""Watcher implementations used by the dhcpv6pd agent."""

from .file import FileConfigWatcher  # noqa: F401
from .spool import SpoolNotificationWatcher  # noqa: F401

__all__ = ["FileConfigWatcher", "SpoolNotificationWatcher"]
