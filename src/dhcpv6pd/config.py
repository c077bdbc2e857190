"""Typed view of the interface configuration tree.

The configuration arrives as an RFC 7951 JSON document describing every
configured interface.  Only a small subset matters here: for each interface
that receives a delegated prefix, the list of target interfaces that should
derive an address from it.  The tree is parsed once into immutable policy
objects so the reconciler never performs string lookups on raw documents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

LOG = logging.getLogger(__name__)

INTERFACES_KEY = "vyatta-interfaces-v1:interfaces"
DHCPV6PD_KEY = "vyatta-dhcpv6pd-v1:dhcpv6pd"
TARGET_INTERFACE_KEY = "target-interface"

# Interface type -> name of the list key identifying each entry.
INTERFACE_LIST_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "vyatta-interfaces-dataplane-v1:dataplane": "tagnode",
    }
)

MAX_SUBNET_ID = 0xFFFF


@dataclass(frozen=True)
class Eui64Policy:
    """Derive the address from the target's MAC and a 16-bit subnet id."""

    subnet_id: int = 0


@dataclass(frozen=True)
class TemplatePolicy:
    """Derive the address from a template.  Not implemented yet."""

    template: Optional[str] = None


@dataclass(frozen=True)
class UnknownPolicy:
    """Placeholder for an address-type this agent does not understand."""

    address_type: Optional[str]


Policy = Union[Eui64Policy, TemplatePolicy, UnknownPolicy]
TargetPolicies = Mapping[str, Policy]
ConfigDerivedMap = Mapping[str, TargetPolicies]

EMPTY_DERIVED: ConfigDerivedMap = MappingProxyType({})


def strip_module(key: str) -> str:
    """Drop the ``module:`` qualifier from an RFC 7951 member name."""

    return key.split(":", 1)[-1]


def parse_policy(entry: Mapping[str, Any]) -> Policy:
    """Build a policy from a ``target-interface`` list entry.

    Raises ``ValueError`` when the entry is structurally unusable.
    """

    fields = {strip_module(key): value for key, value in entry.items()}
    address_type = fields.get("address-type")

    if address_type == "eui64":
        raw = fields.get("sla-id", 0)
        try:
            subnet_id = int(raw)
        except (TypeError, ValueError):
            raise ValueError(f"sla-id {raw!r} is not an integer") from None
        if not 0 <= subnet_id <= MAX_SUBNET_ID:
            raise ValueError(f"sla-id {subnet_id} is outside 0-{MAX_SUBNET_ID}")
        return Eui64Policy(subnet_id=subnet_id)

    if address_type == "template":
        template = fields.get("template")
        return TemplatePolicy(template=None if template is None else str(template))

    return UnknownPolicy(address_type=None if address_type is None else str(address_type))


def _parse_targets(source: str, entry: Mapping[str, Any]) -> Dict[str, Policy]:
    ipv6 = entry.get("ipv6") or {}
    if not isinstance(ipv6, Mapping):
        LOG.warning("ignoring malformed ipv6 container under %s: %s", source, ipv6)
        return {}
    dhcpv6pd = ipv6.get(DHCPV6PD_KEY) or {}
    if not isinstance(dhcpv6pd, Mapping):
        LOG.warning("ignoring malformed dhcpv6pd container under %s: %s", source, dhcpv6pd)
        return {}
    target_list = dhcpv6pd.get(TARGET_INTERFACE_KEY) or []
    if not isinstance(target_list, list):
        LOG.warning("ignoring malformed target-interface list under %s: %s", source, target_list)
        return {}

    targets: Dict[str, Policy] = {}
    for target in target_list:
        if not isinstance(target, Mapping):
            LOG.warning("skipping malformed target-interface under %s: %s", source, target)
            continue
        fields = {strip_module(key): value for key, value in target.items()}
        name = fields.get("name")
        if not name:
            LOG.warning("target-interface without a name under %s: %s", source, target)
            continue
        try:
            targets[str(name)] = parse_policy(target)
        except ValueError as exc:
            LOG.warning("skipping target-interface %s under %s: %s", name, source, exc)
    return targets


def derive_config(tree: Optional[Mapping[str, Any]]) -> ConfigDerivedMap:
    """Map every source interface to its target-interface policies.

    Interface types without a known list key are dropped with a warning, as
    is any part of the tree that does not have the expected shape.
    """

    if not tree:
        return EMPTY_DERIVED

    derived: Dict[str, TargetPolicies] = {}
    interface_types = tree.get(INTERFACES_KEY) or {}
    if not isinstance(interface_types, Mapping):
        LOG.warning("ignoring malformed %s: %s", INTERFACES_KEY, interface_types)
        return EMPTY_DERIVED
    for interface_type, entries in interface_types.items():
        list_key = INTERFACE_LIST_KEYS.get(interface_type)
        if list_key is None:
            LOG.warning("unknown interface type %s", interface_type)
            continue
        if not isinstance(entries, list):
            LOG.warning("ignoring %s: expected a list, got %s", interface_type, entries)
            continue
        for entry in entries:
            if not isinstance(entry, Mapping):
                LOG.warning("skipping malformed %s entry: %s", interface_type, entry)
                continue
            source = entry.get(list_key)
            if source is None:
                LOG.warning("%s entry without %s: %s", interface_type, list_key, entry)
                continue
            derived[str(source)] = MappingProxyType(_parse_targets(str(source), entry))

    return MappingProxyType(derived)
