"""Video clock adapter.

The playback client owns the real player. It reports its position with
ticks and picks up seek requests on its next poll; the interview only ever
reads the current position and asks for seeks without waiting on them.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Protocol

from loguru import logger


class VideoClock(Protocol):
    """Source of the current playback position (seconds)."""

    def current_timestamp(self) -> float:
        ...

    def seek(self, seconds: float) -> None:
        ...


class PlaybackClock:
    """Clock of one breakdown's video, fed by playback ticks."""

    def __init__(self, breakdown_id: str, timestamp: float = 0.0):
        self.breakdown_id = breakdown_id
        self._timestamp = timestamp
        self._pending_seek: float | None = None
        self.updated_at = datetime.now(timezone.utc)

    def current_timestamp(self) -> float:
        return self._timestamp

    def is_idle(self, max_idle: timedelta, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) - self.updated_at > max_idle

    def tick(self, timestamp: float) -> None:
        """Record the player's reported position."""
        if not math.isfinite(timestamp) or timestamp < 0:
            raise ValueError(f"Invalid playback timestamp: {timestamp}")
        self._timestamp = timestamp
        self.updated_at = datetime.now(timezone.utc)

    def seek(self, seconds: float) -> None:
        """Request the player to jump to ``seconds`` (fire-and-forget)."""
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid seek position: {seconds}")
        self._pending_seek = max(0.0, seconds)
        self.updated_at = datetime.now(timezone.utc)
        logger.debug(f"Seek requested on breakdown {self.breakdown_id} to {self._pending_seek}s")

    @property
    def pending_seek(self) -> float | None:
        return self._pending_seek

    def take_pending_seek(self) -> float | None:
        """Hand the pending seek to the player and clear it."""
        seek, self._pending_seek = self._pending_seek, None
        return seek


class ClockRegistry:
    """One playback clock per breakdown, created on first write."""

    def __init__(self):
        self._clocks: dict[str, PlaybackClock] = {}

    def get(self, breakdown_id: str) -> PlaybackClock:
        clock = self._clocks.get(breakdown_id)
        if clock is None:
            clock = PlaybackClock(breakdown_id)
            self._clocks[breakdown_id] = clock
        return clock

    def find(self, breakdown_id: str) -> PlaybackClock | None:
        """Look a clock up without creating it."""
        return self._clocks.get(breakdown_id)

    def __len__(self) -> int:
        return len(self._clocks)

    def reap_idle(
        self,
        max_idle: timedelta,
        now: datetime | None = None,
    ) -> list[str]:
        """Drop clocks that have not been ticked or seeked within ``max_idle``."""
        idle = [c.breakdown_id for c in self._clocks.values() if c.is_idle(max_idle, now)]
        for breakdown_id in idle:
            del self._clocks[breakdown_id]
        return idle
