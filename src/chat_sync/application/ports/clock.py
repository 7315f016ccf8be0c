"""Time source for cache freshness and locally stamped read receipts."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def epoch_ms(ts: datetime) -> int:
    """Milliseconds since the Unix epoch, the unit cache records are stamped in."""
    return int(ts.timestamp() * 1000)
