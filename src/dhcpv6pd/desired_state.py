"""Join configuration and prefix knowledge into a single snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .actor import Actor
from .config import ConfigDerivedMap
from .prefixes import PrefixMap, PrefixRegistry
from .store import ConfigStore

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DesiredState:
    """Composite of the latest derived config and the latest prefix map.

    Either slot stays ``None`` until its source publishes for the first time.
    """

    config: Optional[ConfigDerivedMap] = None
    known_prefixes: Optional[PrefixMap] = None

    def with_config(self, config: ConfigDerivedMap) -> "DesiredState":
        return replace(self, config=config)

    def with_known_prefixes(self, prefixes: PrefixMap) -> "DesiredState":
        return replace(self, known_prefixes=prefixes)


EMPTY_STATE = DesiredState()


def _assoc_config(state: DesiredState, config: ConfigDerivedMap) -> DesiredState:
    return state.with_config(config)


def _assoc_prefixes(state: DesiredState, prefixes: PrefixMap) -> DesiredState:
    return state.with_known_prefixes(prefixes)


class DesiredStateAggregator(Actor[DesiredState]):
    """Republish the whole :class:`DesiredState` on every upstream change."""

    watch_key = "desired-state"

    def __init__(self, store: ConfigStore, prefixes: PrefixRegistry) -> None:
        super().__init__("desired-state", EMPTY_STATE)
        store.watch(self.watch_key, self._on_config)
        prefixes.watch(self.watch_key, self._on_prefixes)
        self.watch("debug", self._log_update)

    def _on_config(self, key: str, derived: ConfigDerivedMap) -> None:
        self.send(_assoc_config, derived)

    def _on_prefixes(self, key: str, old: PrefixMap, new: PrefixMap) -> None:
        self.send(_assoc_prefixes, new)

    @staticmethod
    def _log_update(key: str, old: DesiredState, new: DesiredState) -> None:
        LOG.debug("desired state updated to: %s", new)
