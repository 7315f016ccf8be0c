from __future__ import annotations

from typing import Protocol

from chat_sync.application.dto.principal import Principal


class TokenProvider(Protocol):
    """Source of the current session's bearer token."""

    def get_auth_token(self) -> str | None: ...


class TokenInspector(Protocol):
    async def inspect(self, token: str) -> Principal: ...
