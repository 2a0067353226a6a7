from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.api.deps import get_chat_service
from app.core.errors import ValidationError
from app.services.chat_service import ChatService
from app.services.session import SubscriptionSession

router = APIRouter(prefix="/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _read_payload(request: Request) -> Any:
    body = await request.body()
    if not body:
        return None
    if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)
    try:
        return json.loads(body)
    except ValueError:
        raise ValidationError("room or message not defined")


async def event_stream(session: SubscriptionSession) -> AsyncIterator[str]:
    try:
        async for frame in session.stream():
            yield frame
            await asyncio.sleep(0)
    finally:
        session.close()


@router.get("/{room}")
async def join_room(
    room: str,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    service: ChatService = Depends(get_chat_service),
):
    session = service.open_session(room, user_id)
    return StreamingResponse(
        event_stream(session),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(session.close),
    )


@router.post("/{room}", status_code=status.HTTP_201_CREATED)
async def post_message(
    room: str,
    request: Request,
    service: ChatService = Depends(get_chat_service),
):
    payload = await _read_payload(request)
    service.post_message(room, payload)
    return Response(status_code=status.HTTP_201_CREATED)
