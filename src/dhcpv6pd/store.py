"""In-memory holder for the last accepted configuration tree."""

from __future__ import annotations

import copy
import logging
from threading import Lock
from typing import Any, Callable, Dict, Mapping, Optional

from .config import EMPTY_DERIVED, ConfigDerivedMap, derive_config

LOG = logging.getLogger(__name__)

ConfigWatch = Callable[[str, ConfigDerivedMap], None]


class ConfigStore:
    """Swap configuration trees atomically and publish the derived map.

    The tree itself never leaves the store: :meth:`current` hands out a deep
    copy and :meth:`replace` keeps one, so callers cannot mutate the held
    value behind the store's back.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._lock = Lock()
        self._tree: Dict[str, Any] = copy.deepcopy(dict(initial or {}))
        self._derived: ConfigDerivedMap = derive_config(self._tree)
        self._watches: Dict[str, ConfigWatch] = {}

    def watch(self, key: str, callback: ConfigWatch) -> None:
        with self._lock:
            if key in self._watches:
                raise ValueError(f"watch '{key}' already registered on config store")
            self._watches[key] = callback

    def unwatch(self, key: str) -> None:
        with self._lock:
            self._watches.pop(key, None)

    def validate(self, tree: Mapping[str, Any]) -> None:
        """Accept any tree; semantic checks are not performed at this layer."""

    def replace(self, tree: Optional[Mapping[str, Any]]) -> ConfigDerivedMap:
        held = copy.deepcopy(dict(tree or {}))
        derived = derive_config(held)
        with self._lock:
            self._tree = held
            self._derived = derived
            LOG.debug("config updated to: %s", held)
            # Published under the lock so watchers observe swaps in order.
            for key, callback in list(self._watches.items()):
                try:
                    callback(key, derived)
                except Exception:
                    LOG.exception("config watch '%s' failed", key)
        return derived

    def current(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._tree)

    def derived(self) -> ConfigDerivedMap:
        with self._lock:
            return self._derived or EMPTY_DERIVED
