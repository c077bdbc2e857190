"""DHCPv6 prefix delegation service.

:class:`DHCPv6PD` wires the pipeline together::

    ConfigStore ──┐
                  ├─> DesiredStateAggregator ─> SystemUpdater ─> BatchExecutor
    PrefixRegistry┘

and exposes the configuration and state surfaces used by the management
plane, plus the handlers for ``prefix-assigned`` / ``prefix-removed``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from .desired_state import DesiredState, DesiredStateAggregator
from .eui64 import HardwareLookup
from .events import PrefixAssigned, PrefixRemoved
from .executor import BatchExecutor
from .netlink import hardware_address
from .prefixes import PrefixMap, PrefixRegistry
from .reconciler import SystemUpdater
from .registry import NotificationSubscriber
from .store import ConfigStore

LOG = logging.getLogger(__name__)


class ConfigWriteError(RuntimeError):
    """Persisting the configuration failed; the live config was still applied."""


class ConfigWriter(ABC):
    @abstractmethod
    def write_config(self, tree: Mapping[str, Any]) -> None:
        """Persist ``tree`` so it can be restored on restart."""


class Config:
    """Configuration surface: ``get``, ``set`` and ``validate``."""

    def __init__(self, store: ConfigStore, writer: ConfigWriter) -> None:
        self._store = store
        self._writer = writer

    def get(self) -> Dict[str, Any]:
        return self._store.current()

    def validate(self, tree: Mapping[str, Any]) -> None:
        self._store.validate(tree)

    def set(self, tree: Mapping[str, Any]) -> None:
        """Apply ``tree`` to the live store, then persist it.

        Raises :class:`ConfigWriteError` if persisting fails.  The in-memory
        configuration has already been replaced at that point.
        """

        self._store.replace(tree)
        try:
            self._writer.write_config(tree)
        except (OSError, TypeError, ValueError) as exc:
            raise ConfigWriteError(f"failed to persist configuration: {exc}") from exc


class State:
    """State surface.  No operational state is modelled yet."""

    def get(self) -> Dict[str, Any]:
        return {}


class DHCPv6PD(NotificationSubscriber):
    """Reconcile delegated prefixes and configuration into interface addresses."""

    def __init__(
        self,
        initial_config: Optional[Mapping[str, Any]],
        writer: ConfigWriter,
        executor: BatchExecutor,
        lookup: HardwareLookup = hardware_address,
    ) -> None:
        self._prefixes = PrefixRegistry()
        self._store = ConfigStore()
        self._desired = DesiredStateAggregator(self._store, self._prefixes)
        self._updater = SystemUpdater(self._desired, executor, lookup)
        self._store.replace(initial_config)

        self._config = Config(self._store, writer)
        self._state = State()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def state(self) -> State:
        return self._state

    # ------------------------------------------------------------------
    # Notification handlers
    # ------------------------------------------------------------------
    def handle_prefix_assigned(self, interface: str, prefix: str) -> None:
        LOG.info("prefix %s assigned on %s", prefix, interface)
        self._prefixes.assign(interface, prefix)

    def handle_prefix_removed(self, interface: str, prefix: str = "") -> None:
        LOG.info("prefix %s removed from %s", prefix or "<any>", interface)
        self._prefixes.remove(interface)

    def on_prefix_assigned(self, event: PrefixAssigned) -> None:
        self.handle_prefix_assigned(event.interface, event.prefix)

    def on_prefix_removed(self, event: PrefixRemoved) -> None:
        self.handle_prefix_removed(event.interface, event.prefix)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        for actor in (self._updater, self._desired, self._prefixes):
            actor.start()

    def flush(self) -> None:
        """Wait until every queued change has reached the executor."""

        for actor in (self._prefixes, self._desired, self._updater):
            actor.join_queue()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        for actor in (self._prefixes, self._desired, self._updater):
            actor.stop(timeout)

    # ------------------------------------------------------------------
    # Introspection helpers (useful for tests / CLI)
    # ------------------------------------------------------------------
    def known_prefixes(self) -> PrefixMap:
        return self._prefixes.current()

    def desired_state(self) -> DesiredState:
        return self._desired.deref()

    def reconciled_state(self) -> DesiredState:
        return self._updater.deref()
