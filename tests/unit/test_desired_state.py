import pytest

from dhcpv6pd.desired_state import DesiredState, DesiredStateAggregator
from dhcpv6pd.prefixes import PrefixRegistry
from dhcpv6pd.store import ConfigStore

TREE = {
    "vyatta-interfaces-v1:interfaces": {
        "vyatta-interfaces-dataplane-v1:dataplane": [
            {
                "tagnode": "eth0",
                "ipv6": {
                    "vyatta-dhcpv6pd-v1:dhcpv6pd": {
                        "target-interface": [
                            {"name": "eth1", "address-type": "eui64", "sla-id": 0}
                        ]
                    }
                },
            }
        ]
    }
}


@pytest.fixture
def pipeline():
    store = ConfigStore()
    prefixes = PrefixRegistry()
    aggregator = DesiredStateAggregator(store, prefixes)
    snapshots = []
    aggregator.watch("recorder", lambda key, old, new: snapshots.append(new))
    prefixes.start()
    aggregator.start()
    yield store, prefixes, aggregator, snapshots
    prefixes.stop(1.0)
    aggregator.stop(1.0)


def flush(prefixes, aggregator):
    prefixes.join_queue()
    aggregator.join_queue()


def test_slots_start_empty():
    state = DesiredState()

    assert state.config is None
    assert state.known_prefixes is None


def test_config_update_carries_latest_prefixes(pipeline):
    store, prefixes, aggregator, snapshots = pipeline

    prefixes.assign("eth0", "2001:db8::/64")
    flush(prefixes, aggregator)
    store.replace(TREE)
    flush(prefixes, aggregator)

    assert len(snapshots) == 2
    assert snapshots[0].config is None
    assert dict(snapshots[0].known_prefixes) == {"eth0": "2001:db8::/64"}
    assert snapshots[1].known_prefixes is snapshots[0].known_prefixes
    assert set(snapshots[1].config) == {"eth0"}


def test_prefix_update_carries_latest_config(pipeline):
    store, prefixes, aggregator, snapshots = pipeline

    store.replace(TREE)
    flush(prefixes, aggregator)
    prefixes.assign("eth0", "2001:db8::/64")
    prefixes.remove("eth0")
    flush(prefixes, aggregator)

    assert len(snapshots) == 3
    assert snapshots[1].config is snapshots[0].config
    assert snapshots[2].config is snapshots[0].config
    assert dict(snapshots[2].known_prefixes) == {}


def test_snapshots_are_immutable(pipeline):
    store, prefixes, aggregator, snapshots = pipeline
    store.replace(TREE)
    flush(prefixes, aggregator)

    with pytest.raises(AttributeError):
        snapshots[0].config = None  # type: ignore[misc]
