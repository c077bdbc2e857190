import json
from pathlib import Path

import pytest

from dhcpv6pd_agent.cache import CachedConfigWriter, read_cached_config

TREE = {
    "vyatta-interfaces-v1:interfaces": {
        "vyatta-interfaces-dataplane-v1:dataplane": [{"tagnode": "dp0s3"}]
    }
}


def test_missing_cache_is_empty_tree(tmp_path: Path):
    assert read_cached_config(tmp_path / "config.cache") == {}


def test_writer_creates_directory_and_round_trips(tmp_path: Path):
    path = tmp_path / "run" / "vci-dhcpv6-pd" / "config.cache"
    writer = CachedConfigWriter(path)

    writer.write_config(TREE)

    assert read_cached_config(path) == TREE
    assert [p.name for p in path.parent.iterdir()] == ["config.cache"]


def test_writer_replaces_previous_content(tmp_path: Path):
    path = tmp_path / "config.cache"
    path.write_text(json.dumps({"stale": True}) + " " * 1000)

    CachedConfigWriter(path).write_config(TREE)

    assert json.loads(path.read_text()) == TREE


def test_corrupt_cache_raises(tmp_path: Path):
    path = tmp_path / "config.cache"
    path.write_text("[1, 2, 3]")

    with pytest.raises(ValueError):
        read_cached_config(path)
