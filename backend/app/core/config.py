from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

_BACKEND_DIR = Path(__file__).resolve().parents[2]


class Settings:
    """Application configuration exposed via lazy singleton."""

    def __init__(self) -> None:
        default_index = str(_BACKEND_DIR / "front" / "index.html")
        self.app_name = os.getenv("APP_NAME", "Room Relay")
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8080"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        # 0 keeps every message for the room's lifetime
        self.message_history_limit = int(os.getenv("MESSAGE_HISTORY_LIMIT", "0"))
        # 0 means an unbounded outbound queue per connection
        self.session_queue_size = int(os.getenv("SESSION_QUEUE_SIZE", "0"))
        self.index_file = os.getenv("INDEX_FILE", default_index)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
