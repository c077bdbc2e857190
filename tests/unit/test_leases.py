from pathlib import Path

from dhcpv6pd import NotificationRegistry, PrefixAssigned
from dhcpv6pd.registry import NotificationSubscriber
from dhcpv6pd_agent.config import DEFAULT_LEASE_PATTERN
from dhcpv6pd_agent.leases import announce_existing_leases, read_lease_file, scan_leases

LEASE = """\
default-duid "\\000\\001\\000\\001\\036\\304\\025\\301RT\\000\\022\\064V";
lease6 {
  interface "dp0s3";
  ia-pd 1a2b3c4d {
    starts 1600000000;
    renew 1800;
    rebind 2880;
    iaprefix 2001:db8:1::/56 {
      starts 1600000000;
      preferred-life 3600;
      max-life 7200;
    }
  }
}
lease6 {
  interface "dp0s3";
  ia-pd 1a2b3c4d {
    iaprefix 2001:db8:1::/56 {
      starts 1600003600;
    }
    iaprefix 2001:db8:ff00::/56 {
      starts 1600003600;
    }
  }
}
"""


class RecordingSubscriber(NotificationSubscriber):
    def __init__(self):
        self.events = []

    def on_prefix_assigned(self, event):
        self.events.append(event)

    def on_prefix_removed(self, event):
        self.events.append(event)


def test_read_lease_file_deduplicates_in_order(tmp_path: Path):
    lease = tmp_path / "dhclient_v6_dp0s3.leases"
    lease.write_text(LEASE)

    assert read_lease_file(lease) == ["2001:db8:1::/56", "2001:db8:ff00::/56"]


def test_read_lease_file_missing(tmp_path: Path):
    assert read_lease_file(tmp_path / "absent.leases") == []


def test_scan_leases_only_matches_pattern(tmp_path: Path):
    (tmp_path / "dhclient_v6_dp0s3.leases").write_text(LEASE)
    (tmp_path / "dhclient_v6_dp0s4.leases").write_text("iaprefix 2001:db8:4::/60 {\n")
    (tmp_path / "dhclient_dp0s5.leases").write_text("iaprefix 2001:db8:5::/60 {\n")
    (tmp_path / "dhclient_v6_dp0s6.leases.bak").write_text("iaprefix 2001:db8:6::/60 {\n")

    found = list(scan_leases(tmp_path, DEFAULT_LEASE_PATTERN))

    assert found == [
        ("dp0s3", "2001:db8:1::/56"),
        ("dp0s3", "2001:db8:ff00::/56"),
        ("dp0s4", "2001:db8:4::/60"),
    ]


def test_scan_leases_missing_directory(tmp_path: Path):
    assert list(scan_leases(tmp_path / "nope", DEFAULT_LEASE_PATTERN)) == []


def test_announce_existing_leases(tmp_path: Path):
    (tmp_path / "dhclient_v6_dp0s3.leases").write_text(LEASE)
    registry = NotificationRegistry()
    subscriber = RecordingSubscriber()
    registry.subscribe("recorder", subscriber)

    sent = announce_existing_leases(registry, tmp_path, DEFAULT_LEASE_PATTERN)

    assert sent == 2
    assert subscriber.events == [
        PrefixAssigned("dp0s3", "2001:db8:1::/56"),
        PrefixAssigned("dp0s3", "2001:db8:ff00::/56"),
    ]
