from __future__ import annotations

import threading
from collections import deque
from typing import Any, ContextManager, Deque

from app.services.events import Feed

NEW_MESSAGE = "new-message"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"


class Room:
    """One named chat room: its members, message history and event feeds.

    All mutations and the emissions they trigger happen under the room's
    re-entrant lock, so listeners observe events in mutation order.
    """

    def __init__(self, name: str, history_limit: int = 0) -> None:
        self._name = name
        self._messages: Deque[Any] = deque(maxlen=history_limit or None)
        self._members: set[str] = set()
        self._lock = threading.RLock()

        self.new_message: Feed[Any] = Feed(NEW_MESSAGE)
        self.user_joined: Feed[str] = Feed(USER_JOINED)
        self.user_left: Feed[str] = Feed(USER_LEFT)

    @property
    def name(self) -> str:
        return self._name

    @property
    def feeds(self) -> dict[str, Feed]:
        return {
            NEW_MESSAGE: self.new_message,
            USER_JOINED: self.user_joined,
            USER_LEFT: self.user_left,
        }

    @property
    def messages(self) -> list[Any]:
        with self._lock:
            return list(self._messages)

    def locked(self) -> ContextManager[bool]:
        """Hold the room lock across several reads and subscriptions."""
        return self._lock

    def join(self, user_id: str) -> None:
        with self._lock:
            if user_id in self._members:
                return
            self._members.add(user_id)
            self.user_joined.emit(user_id)

    def exit(self, user_id: str) -> None:
        # user-left is emitted even for ids that were not members
        with self._lock:
            self._members.discard(user_id)
            self.user_left.emit(user_id)

    def add_message(self, payload: Any) -> None:
        with self._lock:
            self._messages.append(payload)
            self.new_message.emit(payload)

    def list_members(self) -> list[str]:
        with self._lock:
            return list(self._members)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._members

    def __repr__(self) -> str:
        return f"Room(name={self._name!r}, members={len(self._members)})"
