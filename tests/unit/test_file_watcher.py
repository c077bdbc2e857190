import json
from pathlib import Path
from threading import Event

from dhcpv6pd.service import Config, ConfigWriter
from dhcpv6pd.store import ConfigStore
from dhcpv6pd_agent.watchers.file import FileConfigWatcher


class RecordingWriter(ConfigWriter):
    def __init__(self, fail=False):
        self.trees = []
        self._fail = fail

    def write_config(self, tree):
        if self._fail:
            raise OSError("disk full")
        self.trees.append(tree)


def build_tree(target: str):
    return {
        "vyatta-interfaces-v1:interfaces": {
            "vyatta-interfaces-dataplane-v1:dataplane": [
                {
                    "tagnode": "dp0s3",
                    "ipv6": {
                        "vyatta-dhcpv6pd-v1:dhcpv6pd": {
                            "target-interface": [
                                {"name": target, "address-type": "eui64", "sla-id": 1}
                            ]
                        }
                    },
                }
            ]
        }
    }


def build_watcher(path: Path, writer: ConfigWriter):
    store = ConfigStore()
    watcher = FileConfigWatcher(
        config=Config(store, writer),
        path=path,
        interval=0.1,
        stop_event=Event(),
    )
    return watcher, store


def test_file_watcher_applies_changes(tmp_path: Path):
    interfaces = tmp_path / "interfaces.json"
    interfaces.write_text(json.dumps(build_tree("dp0s4")))
    writer = RecordingWriter()
    watcher, store = build_watcher(interfaces, writer)

    watcher.poll()
    assert store.current() == build_tree("dp0s4")
    assert writer.trees == [build_tree("dp0s4")]

    watcher.poll()
    assert len(writer.trees) == 1

    interfaces.write_text(json.dumps(build_tree("dp0s5")))
    watcher.poll()
    assert set(store.derived()["dp0s3"]) == {"dp0s5"}
    assert len(writer.trees) == 2


def test_file_watcher_ignores_missing_and_broken_files(tmp_path: Path):
    interfaces = tmp_path / "interfaces.json"
    writer = RecordingWriter()
    watcher, store = build_watcher(interfaces, writer)

    watcher.poll()
    interfaces.write_text("{not json")
    watcher.poll()
    interfaces.write_text("[]")
    watcher.poll()

    assert store.current() == {}
    assert writer.trees == []


def test_file_watcher_survives_cache_failure(tmp_path: Path):
    interfaces = tmp_path / "interfaces.json"
    interfaces.write_text(json.dumps(build_tree("dp0s4")))
    watcher, store = build_watcher(interfaces, RecordingWriter(fail=True))

    watcher.poll()

    assert store.current() == build_tree("dp0s4")
