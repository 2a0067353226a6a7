from __future__ import annotations

from typing import Any, Optional

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.services.registry import RoomRegistry
from app.services.session import SubscriptionSession

logger = get_logger(__name__)


def _is_missing(value: Any) -> bool:
    # empty scalars count as missing, empty objects and arrays do not
    if value is None:
        return True
    return isinstance(value, (str, int, float)) and not value


class ChatService:
    def __init__(self, registry: RoomRegistry, queue_size: Optional[int] = None):
        self.registry = registry
        self.queue_size = settings.session_queue_size if queue_size is None else queue_size

    def open_session(self, room_name: Optional[str], user_id: Optional[str]) -> SubscriptionSession:
        session = SubscriptionSession(self.registry, room_name, user_id, queue_size=self.queue_size)
        session.open()
        return session

    def post_message(self, room_name: Optional[str], payload: Any) -> None:
        if not room_name or _is_missing(payload):
            raise ValidationError("room or message not defined")

        room = self.registry.get(room_name)
        if room is None:
            logger.info("Post to unknown room | room=%s", room_name)
            raise NotFoundError("room not found")

        room.add_message(payload)
        logger.debug("Message posted | room=%s", room_name)
