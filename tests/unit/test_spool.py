from pathlib import Path
from threading import Event

import pytest

from dhcpv6pd import NotificationRegistry, PrefixAssigned, PrefixRemoved
from dhcpv6pd.events import emit_prefix_assigned, emit_prefix_removed
from dhcpv6pd.registry import NotificationSubscriber
from dhcpv6pd_agent import emit
from dhcpv6pd_agent.spool import SpoolEmitter, read_notification
from dhcpv6pd_agent.watchers.spool import SpoolNotificationWatcher


class RecordingSubscriber(NotificationSubscriber):
    def __init__(self):
        self.events = []

    def on_prefix_assigned(self, event):
        self.events.append(event)

    def on_prefix_removed(self, event):
        self.events.append(event)


def build_watcher(spool: Path):
    registry = NotificationRegistry()
    subscriber = RecordingSubscriber()
    registry.subscribe("recorder", subscriber)
    watcher = SpoolNotificationWatcher(
        registry=registry,
        path=spool,
        interval=0.1,
        stop_event=Event(),
    )
    return watcher, subscriber


def test_spool_emitter_writes_complete_records(tmp_path: Path):
    spool = tmp_path / "spool"

    emit_prefix_assigned(SpoolEmitter(spool), "dp0s3", "2001:db8:1::/56")

    files = list(spool.iterdir())
    assert len(files) == 1
    module, notification, payload = read_notification(files[0])
    assert module == "vyatta-dhcpv6pd-v1"
    assert notification == "prefix-assigned"
    assert payload == {
        "vyatta-dhcpv6pd-v1:interface": "dp0s3",
        "vyatta-dhcpv6pd-v1:prefix": "2001:db8:1::/56",
    }


def test_watcher_delivers_in_order_and_consumes_files(tmp_path: Path):
    spool = tmp_path / "spool"
    emitter = SpoolEmitter(spool)
    emit_prefix_assigned(emitter, "dp0s3", "2001:db8:1::/56")
    emit_prefix_assigned(emitter, "dp0s3", "2001:db8:2::/56")
    emit_prefix_removed(emitter, "dp0s3", "2001:db8:2::/56")
    watcher, subscriber = build_watcher(spool)

    assert watcher.poll() == 3

    assert subscriber.events == [
        PrefixAssigned("dp0s3", "2001:db8:1::/56"),
        PrefixAssigned("dp0s3", "2001:db8:2::/56"),
        PrefixRemoved("dp0s3", "2001:db8:2::/56"),
    ]
    assert list(spool.iterdir()) == []
    assert watcher.poll() == 0


def test_watcher_drops_malformed_notifications(tmp_path: Path):
    spool = tmp_path / "spool"
    spool.mkdir()
    (spool / "0001-bad.json").write_text("{broken")
    (spool / "0002-bad.json").write_text('{"module": "vyatta-dhcpv6pd-v1"}')
    (spool / "0003-bad.json").write_text(
        '{"module": "vyatta-dhcpv6pd-v1", "notification": "prefix-assigned", "payload": {}}'
    )
    emit_prefix_removed(SpoolEmitter(spool), "dp0s3", "")
    watcher, subscriber = build_watcher(spool)

    assert watcher.poll() == 1

    assert subscriber.events == [PrefixRemoved("dp0s3", "")]
    assert list(spool.iterdir()) == []


def test_watcher_waits_for_spool_directory(tmp_path: Path):
    watcher, subscriber = build_watcher(tmp_path / "missing")

    assert watcher.poll() == 0
    assert subscriber.events == []


def test_emit_cli_writes_notification(tmp_path: Path):
    spool = tmp_path / "spool"

    rc = emit.main(
        [
            "--notif",
            "prefix-assigned",
            "--interface",
            "dp0s3",
            "--prefix",
            "2001:db8:1::/56",
            "--spool",
            str(spool),
        ]
    )

    assert rc == 0
    watcher, subscriber = build_watcher(spool)
    watcher.poll()
    assert subscriber.events == [PrefixAssigned("dp0s3", "2001:db8:1::/56")]


def test_watcher_keeps_notification_when_delivery_fails(tmp_path: Path):
    spool = tmp_path / "spool"
    emit_prefix_assigned(SpoolEmitter(spool), "dp0s3", "2001:db8:1::/56")
    watcher, subscriber = build_watcher(spool)

    def broken(event):
        raise RuntimeError("subscriber unavailable")

    subscriber.on_prefix_assigned = broken

    with pytest.raises(RuntimeError):
        watcher.poll()
    assert len(list(spool.iterdir())) == 1

    del subscriber.on_prefix_assigned

    assert watcher.poll() == 1
    assert subscriber.events == [PrefixAssigned("dp0s3", "2001:db8:1::/56")]
    assert list(spool.iterdir()) == []
