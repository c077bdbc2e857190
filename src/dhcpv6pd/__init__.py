"""DHCPv6 prefix delegation address reconciler.

This package derives IPv6 addresses for downstream interfaces from prefixes
delegated to upstream interfaces via DHCPv6-PD.  It is split into small,
independently testable pieces:

* :mod:`dhcpv6pd.config` parses the interface configuration tree into typed
  per-target policies;
* :mod:`dhcpv6pd.eui64` synthesizes addresses from a prefix and a MAC;
* :mod:`dhcpv6pd.store`, :mod:`dhcpv6pd.prefixes` and
  :mod:`dhcpv6pd.desired_state` hold the inputs and join them into a single
  snapshot, each serialized through its own queue; and
* :mod:`dhcpv6pd.reconciler` diffs consecutive snapshots and drives a
  :class:`~dhcpv6pd.executor.BatchExecutor`.

Nothing here talks DHCPv6; prefixes arrive as already decoded notifications.
"""

from .events import PrefixAssigned, PrefixRemoved  # noqa: F401
from .registry import NotificationRegistry  # noqa: F401
from .service import DHCPv6PD  # noqa: F401

__all__ = [
    "DHCPv6PD",
    "NotificationRegistry",
    "PrefixAssigned",
    "PrefixRemoved",
]
