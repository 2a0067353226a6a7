from __future__ import annotations

import threading
from typing import Dict, Optional

from app.core.logging import get_logger
from app.models.room import Room

logger = get_logger(__name__)


class RoomRegistry:
    """Directory of live rooms keyed by name.

    Rooms are created on first access and evicted once their last member
    exits. Creation, joins and eviction share one lock so that a join can
    never land in a room that is concurrently being removed.
    """

    def __init__(self, history_limit: int = 0) -> None:
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()
        self._history_limit = history_limit

    def get_or_create(self, room_name: str) -> Room:
        with self._lock:
            return self._get_or_create(room_name)

    def get(self, room_name: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_name)

    def join(self, room_name: str, user_id: str) -> Room:
        with self._lock:
            room = self._get_or_create(room_name)
            room.join(user_id)
            return room

    def remove_if_empty(self, room_name: str, room: Optional[Room] = None) -> bool:
        """Evict ``room_name`` when it has no members.

        When ``room`` is given only that instance is evicted; a newer room
        registered under the same name is left in place.
        """
        with self._lock:
            current = self._rooms.get(room_name)
            if current is None:
                return False
            if room is not None and current is not room:
                return False
            if not current.is_empty():
                return False
            del self._rooms[room_name]
        logger.info("Room evicted | room=%s", room_name)
        return True

    def list_rooms(self) -> list[str]:
        with self._lock:
            return list(self._rooms)

    def _get_or_create(self, room_name: str) -> Room:
        room = self._rooms.get(room_name)
        if room is None:
            room = Room(room_name, history_limit=self._history_limit)
            self._rooms[room_name] = room
            logger.info("Room created | room=%s", room_name)
        return room

    def __contains__(self, room_name: object) -> bool:
        with self._lock:
            return room_name in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
