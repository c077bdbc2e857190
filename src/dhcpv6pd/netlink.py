"""pyroute2 backed helpers for interface lookups and address programming."""

from __future__ import annotations

import ipaddress
import logging
from typing import List, Optional, Sequence

import pyroute2
from pyroute2 import NetlinkError

from .eui64 import UnknownInterfaceError
from .executor import ADD, AddressOperation, BatchExecutionError, BatchExecutor

LOG = logging.getLogger(__name__)


def hardware_address(ifname: str) -> Optional[str]:
    """Return the link-layer address of ``ifname`` (``None`` if it has none)."""

    try:
        with pyroute2.IPRoute() as ipr:
            links = ipr.link_lookup(ifname=ifname)
            if not links:
                raise UnknownInterfaceError(f"interface {ifname} does not exist")
            link = ipr.get_links(links[0])[0]
            return link.get_attr("IFLA_ADDRESS")
    except (NetlinkError, OSError) as exc:
        raise UnknownInterfaceError(
            f"failed to retrieve information about interface {ifname}: {exc}"
        ) from exc


class NetlinkBatchExecutor(BatchExecutor):
    """Apply address operations over a single netlink socket.

    Like ``ip -force -batch`` every operation is attempted; failures are
    collected and raised together once the batch has been walked.
    """

    def execute(self, operations: Sequence[AddressOperation]) -> None:
        failures: List[str] = []
        try:
            with pyroute2.IPRoute() as ipr:
                for op in operations:
                    try:
                        self._apply(ipr, op)
                    except (NetlinkError, OSError, ValueError, LookupError) as exc:
                        LOG.debug("netlink operation %s failed: %s", op.as_batch_line(), exc)
                        failures.append(f"{op.as_batch_line()}: {exc}")
        except (NetlinkError, OSError) as exc:
            raise BatchExecutionError(f"netlink socket failed: {exc}") from exc
        if failures:
            raise BatchExecutionError("; ".join(failures))

    @staticmethod
    def _apply(ipr: pyroute2.IPRoute, op: AddressOperation) -> None:
        links = ipr.link_lookup(ifname=op.device)
        if not links:
            raise LookupError(f"device {op.device} does not exist")
        interface = ipaddress.IPv6Interface(op.address)
        command = "add" if op.action == ADD else "del"
        ipr.addr(
            command,
            index=links[0],
            address=str(interface.ip),
            prefixlen=interface.network.prefixlen,
        )
