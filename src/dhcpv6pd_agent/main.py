"""Entry point for the dhcpv6pd agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event, Thread
from typing import List

from dhcpv6pd import DHCPv6PD, NotificationRegistry
from dhcpv6pd.executor import BatchExecutor, IPBatchExecutor
from dhcpv6pd.netlink import NetlinkBatchExecutor

from .cache import CachedConfigWriter, read_cached_config
from .config import AgentConfig, ServiceConfig, load_config
from .leases import announce_existing_leases
from .watchers import FileConfigWatcher, SpoolNotificationWatcher

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_executor(config: ServiceConfig) -> BatchExecutor:
    if config.executor == "netlink":
        return NetlinkBatchExecutor()
    return IPBatchExecutor(timeout=config.executor_timeout)


def build_watchers(
    config: AgentConfig,
    service: DHCPv6PD,
    registry: NotificationRegistry,
    stop_event: Event,
) -> List[Thread]:
    watchers: List[Thread] = []
    for watcher_cfg in config.watchers:
        if watcher_cfg.type == "config-file":
            watcher: Thread = FileConfigWatcher(
                config=service.config,
                path=watcher_cfg.path,
                interval=watcher_cfg.interval,
                stop_event=stop_event,
            )
        elif watcher_cfg.type == "spool":
            watcher = SpoolNotificationWatcher(
                registry=registry,
                path=watcher_cfg.path,
                interval=watcher_cfg.interval,
                stop_event=stop_event,
            )
        else:
            raise ValueError(f"unsupported watcher type '{watcher_cfg.type}'")
        watchers.append(watcher)
    return watchers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the dhcpv6pd agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/vci-dhcpv6-pd/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)
    cache_path = config.service.config_cache
    initial = read_cached_config(cache_path)

    service = DHCPv6PD(
        initial,
        CachedConfigWriter(cache_path),
        build_executor(config.service),
    )
    registry = NotificationRegistry()
    registry.subscribe("dhcpv6pd", service)
    service.start()

    stop_event = Event()

    watchers = build_watchers(config, service, registry, stop_event)
    for watcher in watchers:
        watcher.start()

    if not watchers:
        LOG.warning("no watchers configured; only existing leases will be applied")

    if config.leases.enabled:
        Thread(
            target=announce_existing_leases,
            args=(registry, config.leases.directory, config.leases.pattern),
            daemon=True,
            name="lease-recovery",
        ).start()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    for watcher in watchers:
        watcher.join()
    service.stop()

    LOG.info("vci-dhcpv6-pd shutting down")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
