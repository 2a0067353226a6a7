from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, TypeVar

from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
Listener = Callable[[T], Any]

_subscription_ids = itertools.count(1)


@dataclass(frozen=True, eq=False)
class Subscription:
    """Handle returned by ``Feed.subscribe`` and passed back to unsubscribe."""

    feed_name: str
    id: int = field(default_factory=lambda: next(_subscription_ids))


class Feed(Generic[T]):
    """In-memory fan-out channel delivering one event type to every listener.

    Emission is synchronous: each listener registered at the time of
    ``emit`` is called in registration order before ``emit`` returns.
    Listeners added later never see earlier events.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: Dict[Subscription, Listener[T]] = {}
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener[T]) -> Subscription:
        subscription = Subscription(feed_name=self.name)
        with self._lock:
            self._listeners[subscription] = listener
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a listener; returns False when the handle was not registered."""
        with self._lock:
            return self._listeners.pop(subscription, None) is not None

    def emit(self, event: T) -> None:
        with self._lock:
            listeners: List[Listener[T]] = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener on feed %s failed", self.name)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)
