from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel

EventName = Literal[
    "current-users",
    "chat-connected",
    "chat-message",
    "user-enter",
    "user-exits",
]


def dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


class UserEvent(BaseModel):
    user: str


class ServerSentEvent(BaseModel):
    event: EventName
    data: str = ""

    @classmethod
    def with_json(cls, event: EventName, payload: Any) -> "ServerSentEvent":
        return cls(event=event, data=dumps(payload))

    def encode(self) -> str:
        return f"event: {self.event}\ndata:{' ' + self.data if self.data else ''}\n\n"


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    rooms: int
