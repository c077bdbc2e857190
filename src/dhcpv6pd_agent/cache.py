"""On-disk cache of the last configuration accepted by the service."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping

from dhcpv6pd.service import ConfigWriter

LOG = logging.getLogger(__name__)


def read_cached_config(path: Path) -> Dict[str, Any]:
    """Return the cached tree, or an empty tree when nothing was cached yet."""

    if not path.exists():
        LOG.debug("no cached configuration at %s", path)
        return {}
    data = json.loads(path.read_text(encoding="utf-8") or "{}")
    if not isinstance(data, dict):
        raise ValueError(f"cached configuration {path} is not a JSON object")
    return data


def write_cached_config(path: Path, tree: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", delete=False, dir=path.parent, encoding="utf-8"
    ) as fh:
        json.dump(tree, fh)
        tmp_name = fh.name
    os.replace(tmp_name, path)


class CachedConfigWriter(ConfigWriter):
    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def write_config(self, tree: Mapping[str, Any]) -> None:
        write_cached_config(self._path, tree)
        LOG.debug("cached configuration written to %s", self._path)
