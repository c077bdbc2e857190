"""Batch executors that program interface addresses."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

LOG = logging.getLogger(__name__)

ADD = "add"
DELETE = "del"

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class AddressOperation:
    """One address change on one device."""

    action: str
    address: str
    device: str

    def __post_init__(self) -> None:
        if self.action not in (ADD, DELETE):
            raise ValueError(f"unsupported address action '{self.action}'")

    def as_batch_line(self) -> str:
        return f"address {self.action} {self.address} dev {self.device}"


class BatchExecutionError(RuntimeError):
    """Raised when a batch could not be (fully) applied."""


class BatchExecutor(ABC):
    """Apply an ordered list of address operations in one invocation."""

    @abstractmethod
    def execute(self, operations: Sequence[AddressOperation]) -> None:
        """Apply ``operations``; raise :class:`BatchExecutionError` on failure."""


class IPBatchExecutor(BatchExecutor):
    """Feed operations to ``ip -force -batch -``.

    ``-force`` keeps iproute2 going after a failing line, so a partial batch
    is applied and reported as a single error.
    """

    def __init__(
        self,
        command: Sequence[str] = ("ip", "-force", "-batch", "-"),
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> None:
        self._command = list(command)
        self._timeout = timeout

    def execute(self, operations: Sequence[AddressOperation]) -> None:
        script = "\n".join(op.as_batch_line() for op in operations) + "\n"
        LOG.debug("running %s with %d operations", " ".join(self._command), len(operations))
        try:
            subprocess.run(
                self._command,
                input=script,
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise BatchExecutionError(
                f"{' '.join(self._command)} exited with {exc.returncode}: {stderr}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise BatchExecutionError(
                f"{' '.join(self._command)} timed out after {self._timeout}s"
            ) from exc
        except OSError as exc:
            raise BatchExecutionError(f"failed to run {self._command[0]}: {exc}") from exc

