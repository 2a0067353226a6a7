from fastapi import Depends, Request

from app.services.chat_service import ChatService
from app.services.registry import RoomRegistry


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


def get_chat_service(registry: RoomRegistry = Depends(get_registry)) -> ChatService:
    return ChatService(registry)
