from __future__ import annotations

from fastapi import status


class ChatError(Exception):
    """Request rejected before any room state was touched."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChatError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ChatError):
    status_code = status.HTTP_404_NOT_FOUND
