"""Playback clock schemas for API request/response."""

from pydantic import BaseModel, Field


class ClockState(BaseModel):
    """Current playback position and any seek not yet picked up."""

    breakdown_id: str
    timestamp: float
    pending_seek: float | None = None


class ClockTick(BaseModel):
    """Playback position reported by the player."""

    timestamp: float = Field(..., ge=0)


class SeekRequest(BaseModel):
    """Ask the player to jump to a position."""

    seconds: float = Field(..., ge=0)
