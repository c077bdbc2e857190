"""Tiny notification registry connecting transports to subscribers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping

from .events import (
    MODULE,
    Emitter,
    PrefixAssigned,
    PrefixEvent,
    PrefixRemoved,
    event_from_notification,
)


class NotificationSubscriber(ABC):
    """Receiver of decoded prefix delegation events."""

    @abstractmethod
    def on_prefix_assigned(self, event: PrefixAssigned) -> None:
        """Record ``event.prefix`` as delegated to ``event.interface``."""

    @abstractmethod
    def on_prefix_removed(self, event: PrefixRemoved) -> None:
        """Forget the delegation held by ``event.interface``."""


class NotificationRegistry(Emitter):
    """Dispatch prefix events to every registered subscriber.

    The registry doubles as an in-process :class:`Emitter`, so helpers such as
    the lease scanner can publish without going through an external bus.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, NotificationSubscriber] = {}

    def subscribe(self, name: str, subscriber: NotificationSubscriber) -> None:
        if name in self._subscribers:
            raise ValueError(f"subscriber '{name}' already registered")
        self._subscribers[name] = subscriber

    def unsubscribe(self, name: str) -> None:
        self._subscribers.pop(name, None)

    def handle(self, event: PrefixEvent) -> None:
        if isinstance(event, PrefixAssigned):
            for subscriber in list(self._subscribers.values()):
                subscriber.on_prefix_assigned(event)
        elif isinstance(event, PrefixRemoved):
            for subscriber in list(self._subscribers.values()):
                subscriber.on_prefix_removed(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event)!r}")

    def emit(self, module: str, notification: str, payload: Mapping[str, Any]) -> None:
        if module != MODULE:
            raise ValueError(f"unsupported notification module '{module}'")
        self.handle(event_from_notification(notification, payload))
