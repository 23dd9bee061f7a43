"""Session reaper worker for dropping abandoned interviews and clocks."""

from datetime import timedelta

from loguru import logger

from stattaker.core.config import get_settings
from stattaker.workflow.clock import ClockRegistry
from stattaker.workflow.registry import SessionRegistry

settings = get_settings()


class SessionReaperWorker:
    """Worker for cancelling interview sessions nobody has touched lately.

    Playback clocks that stopped reporting within the same window are
    dropped as well.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        idle_minutes: int | None = None,
        clocks: ClockRegistry | None = None,
    ):
        self.registry = registry
        self.clocks = clocks
        self.idle_minutes = idle_minutes or settings.session_idle_timeout_minutes

    async def run(self) -> list[str]:
        """Run the idle cleanup. Returns the ids of the reaped sessions."""
        max_idle = timedelta(minutes=self.idle_minutes)

        if self.clocks is not None and len(self.clocks):
            dropped = self.clocks.reap_idle(max_idle)
            if dropped:
                logger.info(f"Dropped {len(dropped)} idle playback clocks")

        if not len(self.registry):
            return []

        reaped = self.registry.reap_idle(max_idle)
        if reaped:
            logger.info(
                f"Reaped {len(reaped)} idle sessions "
                f"(idle > {self.idle_minutes} min, {len(self.registry)} live)"
            )
        return reaped
