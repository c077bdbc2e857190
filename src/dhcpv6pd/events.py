"""Prefix delegation notifications exchanged with the DHCP client hooks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

MODULE = "vyatta-dhcpv6pd-v1"
PREFIX_ASSIGNED = "prefix-assigned"
PREFIX_REMOVED = "prefix-removed"

NOTIFICATIONS = (PREFIX_ASSIGNED, PREFIX_REMOVED)


@dataclass(frozen=True)
class PrefixAssigned:
    """A DHCPv6 server delegated ``prefix`` to ``interface``."""

    interface: str
    prefix: str


@dataclass(frozen=True)
class PrefixRemoved:
    """The delegation on ``interface`` ended.

    ``prefix`` is informational; removal is keyed on the interface alone.
    """

    interface: str
    prefix: str = ""


PrefixEvent = Union[PrefixAssigned, PrefixRemoved]


class Emitter(ABC):
    """Anything able to publish a named notification."""

    @abstractmethod
    def emit(self, module: str, notification: str, payload: Mapping[str, Any]) -> None:
        """Publish ``payload`` as ``module``'s ``notification``."""


def build_payload(interface: str, prefix: str) -> Dict[str, str]:
    return {
        f"{MODULE}:interface": interface,
        f"{MODULE}:prefix": prefix,
    }


def _field(payload: Mapping[str, Any], name: str, required: bool = True) -> str:
    for key in (f"{MODULE}:{name}", name):
        if key in payload and payload[key] is not None:
            return str(payload[key])
    if required:
        raise ValueError(f"notification payload missing '{name}'")
    return ""


def event_from_notification(notification: str, payload: Mapping[str, Any]) -> PrefixEvent:
    """Decode a notification payload into a typed event."""

    if notification == PREFIX_ASSIGNED:
        return PrefixAssigned(_field(payload, "interface"), _field(payload, "prefix"))
    if notification == PREFIX_REMOVED:
        return PrefixRemoved(
            _field(payload, "interface"), _field(payload, "prefix", required=False)
        )
    raise ValueError(f"unsupported notification '{notification}'")


def emit_prefix_assigned(emitter: Emitter, interface: str, prefix: str) -> None:
    emitter.emit(MODULE, PREFIX_ASSIGNED, build_payload(interface, prefix))


def emit_prefix_removed(emitter: Emitter, interface: str, prefix: str) -> None:
    emitter.emit(MODULE, PREFIX_REMOVED, build_payload(interface, prefix))
