"""Turn desired-state transitions into address operations.

The reconciler never inspects the kernel.  It projects both the previously
reconciled snapshot and the new one onto concrete addresses, diffs the two
projections and submits removals followed by additions.  Executor failures
are logged and left for the next transition to converge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .actor import Actor
from .desired_state import EMPTY_STATE, DesiredState, DesiredStateAggregator
from .eui64 import HardwareLookup, synthesize
from .executor import ADD, DELETE, AddressOperation, BatchExecutionError, BatchExecutor

LOG = logging.getLogger(__name__)

AddressMap = Dict[str, Dict[str, str]]


@dataclass
class ChangePlan:
    """Operations required to move from one snapshot to the next."""

    remove: List[AddressOperation] = field(default_factory=list)
    add: List[AddressOperation] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.remove or self.add)


def compute_addresses(state: Optional[DesiredState], lookup: HardwareLookup) -> AddressMap:
    """Project ``state`` onto ``{source: {target: address}}``.

    Only sources holding a delegated prefix appear.  Targets whose address
    cannot be synthesized are logged and left out.
    """

    if state is None or not state.known_prefixes or not state.config:
        return {}

    addresses: AddressMap = {}
    for source, targets in state.config.items():
        prefix = state.known_prefixes.get(source)
        if prefix is None:
            continue
        resolved: Dict[str, str] = {}
        for target, policy in targets.items():
            result = synthesize(target, policy, prefix, lookup)
            if not result.ok:
                LOG.warning(
                    "failed to calculate address for %s from %s (%s): %s %s",
                    target,
                    prefix,
                    source,
                    result.reason.value if result.reason else "unknown",
                    result.detail,
                )
                continue
            resolved[target] = result.address  # type: ignore[assignment]
        addresses[source] = resolved
    return addresses


def _changed(action: str, primary: AddressMap, other: AddressMap) -> List[AddressOperation]:
    operations: List[AddressOperation] = []
    for source, targets in primary.items():
        previous = other.get(source, {})
        for target, address in targets.items():
            if previous.get(target) != address:
                operations.append(AddressOperation(action, address, target))
    return operations


def diff_addresses(old: AddressMap, new: AddressMap) -> ChangePlan:
    """Pairs gone or changed in ``new`` are removed; new or changed pairs added."""

    return ChangePlan(
        remove=_changed(DELETE, old, new),
        add=_changed(ADD, new, old),
    )


def plan_changes(
    old: Optional[DesiredState],
    new: Optional[DesiredState],
    lookup: HardwareLookup,
) -> ChangePlan:
    old_addresses = compute_addresses(old, lookup)
    new_addresses = compute_addresses(new, lookup)
    LOG.debug(
        "computing differences between new: %s old: %s", new_addresses, old_addresses
    )
    return diff_addresses(old_addresses, new_addresses)


class SystemUpdater(Actor[DesiredState]):
    """Apply each desired-state transition through a :class:`BatchExecutor`.

    The actor's own state is the last snapshot it reconciled.  It advances
    even when the executor fails; there is no retry and no rollback.
    """

    def __init__(
        self,
        desired: DesiredStateAggregator,
        executor: BatchExecutor,
        lookup: HardwareLookup,
    ) -> None:
        super().__init__("system-updater", EMPTY_STATE)
        self._executor = executor
        self._lookup = lookup
        desired.watch("system-updater", self._on_desired_state)

    def _on_desired_state(self, key: str, old: DesiredState, new: DesiredState) -> None:
        self.send(self.update, new)

    def update(self, old: DesiredState, new: DesiredState) -> DesiredState:
        LOG.debug("updating system from: %s to: %s", old, new)
        plan = plan_changes(old, new, self._lookup)
        self._submit("removing", plan.remove)
        self._submit("adding", plan.add)
        return new

    def _submit(self, verb: str, operations: List[AddressOperation]) -> None:
        if not operations:
            return
        LOG.info(
            "%s the following addresses %s", verb, [op.as_batch_line() for op in operations]
        )
        try:
            self._executor.execute(operations)
        except BatchExecutionError as exc:
            LOG.error("error while %s addresses: %s", verb, exc)
