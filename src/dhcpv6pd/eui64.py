"""Address synthesis from a delegated prefix and a target-interface policy.

EUI-64 derivation follows the modified EUI-64 format (RFC 4291, appendix A):
the 48-bit MAC is split in half, ``ff:fe`` is inserted in the middle and the
universal/local bit of the first octet is complemented.  The subnet id is
placed in the low 16 bits of the upper /64, masked against the delegated
prefix so that it can never rewrite bits owned by the delegating router.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .config import Eui64Policy, Policy, TemplatePolicy

EUI64_PREFIXLEN = 64
MAC_LENGTH = 6
UNIVERSAL_LOCAL_BIT = 0x02

_UPPER64 = (1 << 64) - 1


class UnknownInterfaceError(LookupError):
    """Raised by a hardware lookup when the interface does not exist."""


HardwareLookup = Callable[[str], Optional[str]]


class FailureReason(Enum):
    INVALID_PREFIX = "invalid-prefix"
    PREFIX_TOO_LONG = "prefix-too-long"
    UNKNOWN_INTERFACE = "unknown-interface"
    NO_HARDWARE_ADDRESS = "no-hardware-address"
    UNSUPPORTED_HARDWARE_ADDRESS = "unsupported-hardware-address"
    NOT_IMPLEMENTED = "not-implemented"
    UNSUPPORTED_ADDRESS_TYPE = "unsupported-address-type"


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of a single synthesis attempt."""

    address: Optional[str] = None
    reason: Optional[FailureReason] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.address is not None

    @classmethod
    def success(cls, address: str) -> "SynthesisResult":
        return cls(address=address)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> "SynthesisResult":
        return cls(reason=reason, detail=detail)


def parse_mac(value: str) -> bytes:
    """Parse ``aa:bb:cc:dd:ee:ff`` (or ``-`` separated) into raw bytes."""

    digits = value.replace(":", "").replace("-", "")
    try:
        return bytes.fromhex(digits)
    except ValueError:
        raise ValueError(f"malformed hardware address {value!r}") from None


def eui64_interface_id(mac: bytes) -> int:
    """Return the 64-bit modified EUI-64 interface identifier for ``mac``."""

    if len(mac) != MAC_LENGTH:
        raise ValueError(f"expected a {MAC_LENGTH}-byte MAC, got {len(mac)} bytes")
    mid = len(mac) // 2
    eui = bytearray(mac[:mid] + b"\xff\xfe" + mac[mid:])
    eui[0] ^= UNIVERSAL_LOCAL_BIT
    return int.from_bytes(bytes(eui), "big")


def eui64_address(network: ipaddress.IPv6Network, subnet_id: int, mac: bytes) -> str:
    """Combine ``network``, ``subnet_id`` and ``mac`` into an ``addr/64`` string."""

    if network.prefixlen > EUI64_PREFIXLEN:
        raise ValueError(f"prefix {network} is longer than /{EUI64_PREFIXLEN}")

    upper = int(network.network_address) >> 64
    host_bits = EUI64_PREFIXLEN - network.prefixlen
    free_mask = (1 << host_bits) - 1
    upper = (upper & (_UPPER64 ^ free_mask)) | (subnet_id & 0xFFFF & free_mask)

    address = ipaddress.IPv6Address((upper << 64) | eui64_interface_id(mac))
    return f"{address}/{EUI64_PREFIXLEN}"


def synthesize(
    target: str,
    policy: Policy,
    prefix: str,
    lookup: HardwareLookup,
) -> SynthesisResult:
    """Compute the address ``target`` should carry for delegated ``prefix``."""

    try:
        network = ipaddress.IPv6Network(prefix, strict=False)
    except ValueError as exc:
        return SynthesisResult.failure(FailureReason.INVALID_PREFIX, str(exc))

    if isinstance(policy, TemplatePolicy):
        return SynthesisResult.failure(
            FailureReason.NOT_IMPLEMENTED, "template addressing is not implemented"
        )
    if not isinstance(policy, Eui64Policy):
        return SynthesisResult.failure(
            FailureReason.UNSUPPORTED_ADDRESS_TYPE,
            f"address-type {getattr(policy, 'address_type', None)!r}",
        )

    if network.prefixlen > EUI64_PREFIXLEN:
        return SynthesisResult.failure(
            FailureReason.PREFIX_TOO_LONG,
            f"invalid prefix size {network.prefixlen} for eui64 on {target}",
        )

    try:
        hardware = lookup(target)
    except UnknownInterfaceError as exc:
        return SynthesisResult.failure(FailureReason.UNKNOWN_INTERFACE, str(exc))
    if not hardware:
        return SynthesisResult.failure(
            FailureReason.NO_HARDWARE_ADDRESS, f"{target} has no hardware address"
        )

    try:
        mac = parse_mac(hardware)
        address = eui64_address(network, policy.subnet_id, mac)
    except ValueError as exc:
        return SynthesisResult.failure(FailureReason.UNSUPPORTED_HARDWARE_ADDRESS, str(exc))

    return SynthesisResult.success(address)
