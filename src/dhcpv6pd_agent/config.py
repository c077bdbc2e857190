"""YAML configuration loader for the dhcpv6pd agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

import yaml

EXECUTOR_TYPES = ("ip-batch", "netlink")
WATCHER_TYPES = ("config-file", "spool")

DEFAULT_CONFIG_CACHE = Path("/run/vci-dhcpv6-pd/config.cache")
DEFAULT_LEASE_DIR = Path("/var/lib/dhcp")
DEFAULT_LEASE_PATTERN = r"dhclient_v6_(.*)\.leases"
DEFAULT_SPOOL_DIR = Path("/run/vci-dhcpv6-pd/notifications")


@dataclass
class ServiceConfig:
    config_cache: Path = DEFAULT_CONFIG_CACHE
    executor: str = "ip-batch"
    executor_timeout: float = 10.0


@dataclass
class LeaseConfig:
    enabled: bool = True
    directory: Path = DEFAULT_LEASE_DIR
    pattern: str = DEFAULT_LEASE_PATTERN


@dataclass
class WatcherConfig:
    type: str
    path: Path
    interval: float = 5.0


@dataclass
class AgentConfig:
    service: ServiceConfig = field(default_factory=ServiceConfig)
    leases: LeaseConfig = field(default_factory=LeaseConfig)
    watchers: Sequence[WatcherConfig] = field(default_factory=list)


def _parse_service(section: dict) -> ServiceConfig:
    executor = str(section.get("executor", "ip-batch"))
    if executor not in EXECUTOR_TYPES:
        raise ValueError(f"Unsupported executor '{executor}'")
    return ServiceConfig(
        config_cache=Path(section.get("config_cache", DEFAULT_CONFIG_CACHE)),
        executor=executor,
        executor_timeout=float(section.get("executor_timeout", 10.0)),
    )


def _parse_leases(section: dict) -> LeaseConfig:
    return LeaseConfig(
        enabled=bool(section.get("enabled", True)),
        directory=Path(section.get("directory", DEFAULT_LEASE_DIR)),
        pattern=str(section.get("pattern", DEFAULT_LEASE_PATTERN)),
    )


def _parse_watchers(entries: Iterable[dict]) -> List[WatcherConfig]:
    watchers: List[WatcherConfig] = []
    for entry in entries:
        watcher_type = str(entry["type"])
        if watcher_type not in WATCHER_TYPES:
            raise ValueError(f"unsupported watcher type '{watcher_type}'")
        if "path" not in entry:
            raise ValueError(f"watcher '{watcher_type}' requires a 'path'")
        watchers.append(
            WatcherConfig(
                type=watcher_type,
                path=Path(entry["path"]),
                interval=float(entry.get("interval", entry.get("poll_interval", 5.0))),
            )
        )
    return watchers


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def load_config(path: Path) -> AgentConfig:
    if not path.exists():
        return AgentConfig()

    data = yaml.safe_load(path.read_text())
    if data is None:
        return AgentConfig()
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    watchers_section = data.get("watchers", [])
    if not isinstance(watchers_section, list):
        raise ValueError("'watchers' section must be a list")

    return AgentConfig(
        service=_parse_service(_section(data, "service")),
        leases=_parse_leases(_section(data, "leases")),
        watchers=_parse_watchers(watchers_section),
    )
