from __future__ import annotations

import asyncio
import enum
import threading
from typing import Any, AsyncIterator, Dict, Optional

from app.core.errors import ValidationError
from app.core.logging import get_logger
from app.models.room import NEW_MESSAGE, USER_JOINED, USER_LEFT, Room
from app.schemas.chat import ServerSentEvent, UserEvent
from app.services.events import Subscription
from app.services.registry import RoomRegistry

logger = get_logger(__name__)


class SessionState(str, enum.Enum):
    INITIATED = "initiated"
    JOINED = "joined"
    STREAMING = "streaming"
    CLOSED = "closed"


class SubscriptionSession:
    """Binds one streaming connection to one user in one room.

    ``open`` joins the room and queues the snapshot and acknowledgment
    frames; ``stream`` yields SSE frames until the consumer goes away, at
    which point ``close`` exits the room, drops the feed subscriptions and
    asks the registry to evict the room if it is now empty.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        room_name: Optional[str],
        user_id: Optional[str],
        queue_size: int = 0,
    ) -> None:
        self.registry = registry
        self.room_name = room_name
        self.user_id = user_id
        self.room: Optional[Room] = None
        self.state = SessionState.INITIATED
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=queue_size)
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def open(self) -> None:
        if not self.room_name or not self.user_id:
            raise ValidationError("room or userId not defined")
        if self.state is not SessionState.INITIATED:
            raise RuntimeError(f"session already {self.state.value}")

        room = self.registry.join(self.room_name, self.user_id)
        self.room = room
        self.state = SessionState.JOINED

        # nothing may be emitted between the snapshot and the subscriptions
        with room.locked():
            snapshot = [member for member in room.list_members() if member != self.user_id]
            self._push(ServerSentEvent.with_json("current-users", snapshot))
            self._subscriptions = {
                NEW_MESSAGE: room.new_message.subscribe(self._on_message),
                USER_JOINED: room.user_joined.subscribe(self._on_user_joined),
                USER_LEFT: room.user_left.subscribe(self._on_user_left),
            }
        self._push(ServerSentEvent(event="chat-connected"))
        self.state = SessionState.STREAMING
        logger.info("Session opened | room=%s | user=%s", self.room_name, self.user_id)

    async def stream(self) -> AsyncIterator[str]:
        try:
            while True:
                if self.state is SessionState.CLOSED and self._queue.empty():
                    break
                frame = await self._queue.get()
                if frame is None:
                    break
                yield frame
        finally:
            self.close()

    def close(self) -> bool:
        """Tear the session down; returns False if it was already closed."""
        with self._lock:
            if self.state is SessionState.CLOSED:
                return False
            previous, self.state = self.state, SessionState.CLOSED

        room = self.room
        if room is None or previous is SessionState.INITIATED:
            return True

        room.exit(self.user_id)
        for feed_name, subscription in self._subscriptions.items():
            room.feeds[feed_name].unsubscribe(subscription)
        self._subscriptions = {}
        self.registry.remove_if_empty(self.room_name, room)
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # stream() stops on its own once the backlog is drained
            pass
        logger.info("Session closed | room=%s | user=%s", self.room_name, self.user_id)
        return True

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _on_message(self, payload: Any) -> None:
        self._push(ServerSentEvent.with_json("chat-message", payload))

    def _on_user_joined(self, user_id: str) -> None:
        self._push(ServerSentEvent.with_json("user-enter", UserEvent(user=user_id).model_dump()))

    def _on_user_left(self, user_id: str) -> None:
        self._push(ServerSentEvent.with_json("user-exits", UserEvent(user=user_id).model_dump()))

    def _push(self, event: ServerSentEvent) -> None:
        try:
            self._queue.put_nowait(event.encode())
        except asyncio.QueueFull:
            logger.warning(
                "Outbound queue full, dropping %s | room=%s | user=%s",
                event.event,
                self.room_name,
                self.user_id,
            )
        else:
            logger.debug("Queued %s | room=%s | user=%s", event.event, self.room_name, self.user_id)
