"""Registry of the prefixes currently delegated to each source interface."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from .actor import Actor

LOG = logging.getLogger(__name__)

PrefixMap = Mapping[str, str]

EMPTY_PREFIXES: PrefixMap = MappingProxyType({})


def assoc_prefix(prefixes: PrefixMap, interface: str, prefix: str) -> PrefixMap:
    updated = dict(prefixes)
    updated[interface] = prefix
    return MappingProxyType(updated)


def dissoc_prefix(prefixes: PrefixMap, interface: str) -> PrefixMap:
    if interface not in prefixes:
        return prefixes
    updated = dict(prefixes)
    del updated[interface]
    return MappingProxyType(updated)


class PrefixRegistry(Actor[PrefixMap]):
    """Hold at most one delegated prefix per source interface.

    Every applied ``assign``/``remove`` republishes the full resulting map to
    watchers, even when the map did not change.
    """

    def __init__(self) -> None:
        super().__init__("prefix-registry", EMPTY_PREFIXES)
        self.watch("debug", self._log_update)

    def assign(self, interface: str, prefix: str) -> None:
        self.send(assoc_prefix, interface, prefix)

    def remove(self, interface: str) -> None:
        self.send(dissoc_prefix, interface)

    def current(self) -> PrefixMap:
        return self.deref()

    @staticmethod
    def _log_update(key: str, old: PrefixMap, new: PrefixMap) -> None:
        LOG.debug("known-prefixes updated to %s", dict(new))
