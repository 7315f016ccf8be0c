from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CHAT_API_URL: str = "http://localhost:5000"
    CHAT_WS_URL: str | None = None
    CHAT_WS_PATH: str = "/ws/chat"
    CHAT_AUTH_TOKEN: str | None = None

    HTTP_TIMEOUT_SECONDS: float = 10.0

    REDIS_URL: str = "redis://localhost:6379/0"

    CACHE_BACKEND: Literal["redis", "memory"] = "redis"
    CACHE_KEY_PREFIX: str = "messages_"
    CACHE_TTL_SECONDS: int = 60 * 60
    CACHE_WINDOW_DAYS: int = 5
    CACHE_MAX_CONVERSATIONS: int = 50
    CACHE_MAX_MESSAGES: int = 200

    MESSAGE_PAGE_SIZE: int = 50

    TYPING_IDLE_SECONDS: float = 2.0

    WS_RECONNECT_BASE_DELAY: float = 1.0
    WS_RECONNECT_MAX_DELAY: float = 30.0

    DEBUG_HOST: str = "127.0.0.1"
    DEBUG_PORT: int = 8001

    @property
    def websocket_url(self) -> str:
        if self.CHAT_WS_URL:
            return self.CHAT_WS_URL
        base = self.CHAT_API_URL.rstrip("/")
        if base.startswith("https://"):
            base = "wss://" + base[len("https://"):]
        elif base.startswith("http://"):
            base = "ws://" + base[len("http://"):]
        return f"{base}{self.CHAT_WS_PATH}"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
