from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.chat_service import ChatService
from app.services.registry import RoomRegistry


def _parse_frame(frame: str) -> tuple[str, Any]:
    """Split an SSE frame into its event name and decoded JSON data."""
    event_line, data_line = frame.rstrip("\n").split("\n")
    event = event_line.removeprefix("event: ")
    data = data_line.removeprefix("data:").strip()
    return event, json.loads(data) if data else None


async def _next_event(stream: AsyncIterator[str]) -> tuple[str, Any]:
    frame = await asyncio.wait_for(anext(stream), timeout=1)
    return _parse_frame(frame)


@pytest.fixture()
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture()
def service(registry: RoomRegistry) -> ChatService:
    return ChatService(registry, queue_size=0)


@pytest.fixture()
def client(registry: RoomRegistry) -> TestClient:
    return TestClient(create_app(registry))


@pytest.fixture()
def parse_frame():
    return _parse_frame


@pytest.fixture()
def next_event():
    return _next_event
