"""FastAPI dependencies for dependency injection."""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.db.session import async_session_maker
from stattaker.workflow.clock import ClockRegistry
from stattaker.workflow.registry import SessionRegistry

# Process-wide runtime state (sessions and clocks are never persisted)
_session_registry = SessionRegistry()
_clock_registry = ClockRegistry()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def get_session_registry() -> SessionRegistry:
    """Get the live interview session registry."""
    return _session_registry


def get_clock_registry() -> ClockRegistry:
    """Get the per-breakdown playback clock registry."""
    return _clock_registry


# Type aliases for cleaner dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
Sessions = Annotated[SessionRegistry, Depends(get_session_registry)]
Clocks = Annotated[ClockRegistry, Depends(get_clock_registry)]
