"""Serialized state holders connected by one-way watches.

Each :class:`Actor` owns a private value and a queue of transformations.  A
single worker thread applies the transformations in submission order and,
after each one, notifies every registered watch with ``(key, old, new)``
before taking the next message.  Watches are expected to do nothing heavier
than enqueueing work on a downstream actor.
"""

from __future__ import annotations

import logging
from queue import Empty, Queue
from threading import Event, Lock, Thread
from typing import Any, Callable, Dict, Generic, Tuple, TypeVar

LOG = logging.getLogger(__name__)

T = TypeVar("T")

Watch = Callable[[str, Any, Any], None]


class Actor(Thread, Generic[T]):
    """Apply queued ``fn(state, *args)`` transformations one at a time."""

    poll_interval = 0.1

    def __init__(self, name: str, initial: T) -> None:
        super().__init__(daemon=True, name=name)
        self._state = initial
        self._queue: Queue[Tuple[Callable[..., T], Tuple[Any, ...]]] = Queue()
        self._watches: Dict[str, Watch] = {}
        self._watches_lock = Lock()
        self._stop_event = Event()

    def send(self, fn: Callable[..., T], *args: Any) -> None:
        """Enqueue ``fn`` and return immediately."""

        self._queue.put((fn, args))

    def deref(self) -> T:
        return self._state

    def watch(self, key: str, callback: Watch) -> None:
        with self._watches_lock:
            if key in self._watches:
                raise ValueError(f"watch '{key}' already registered on {self.name}")
            self._watches[key] = callback

    def unwatch(self, key: str) -> None:
        with self._watches_lock:
            self._watches.pop(key, None)

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                fn, args = self._queue.get(timeout=self.poll_interval)
            except Empty:
                continue
            try:
                self._apply(fn, args)
            except Exception:
                LOG.exception("%s: transformation %s failed", self.name, fn)
            finally:
                self._queue.task_done()

    def _apply(self, fn: Callable[..., T], args: Tuple[Any, ...]) -> None:
        old = self._state
        new = fn(old, *args)
        self._state = new
        with self._watches_lock:
            watches = list(self._watches.items())
        for key, callback in watches:
            try:
                callback(key, old, new)
            except Exception:
                LOG.exception("%s: watch '%s' failed", self.name, key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def join_queue(self) -> None:
        """Block until every message sent so far has been applied."""

        self._queue.join()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the worker; messages still queued are dropped."""

        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
