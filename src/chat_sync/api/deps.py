"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from chat_sync.services.messenger import Messenger


def get_messenger(request: Request) -> Messenger:
    return request.app.state.messenger


MessengerDep = Annotated[Messenger, Depends(get_messenger)]
