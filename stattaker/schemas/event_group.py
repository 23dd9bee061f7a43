"""Event group schemas for API request/response."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class EventGroupEventDTO(BaseModel):
    """Event response schema."""

    id: str
    breakdown_id: str
    event_group_id: str
    event_type_id: str
    breakdown_player_id: str | None = None
    breakdown_team_id: str | None = None
    video_timestamp: float | None = None
    game_clock_timestamp: float | None = None
    metadata: dict[str, Any] | None = None
    deleted_at: datetime | None = None


class EventGroupDTO(BaseModel):
    """Event group response schema."""

    id: str
    breakdown_id: str
    workflow_id: str | None = None
    video_timestamp: float
    game_clock_timestamp: float | None = None
    events: list[EventGroupEventDTO] = []


class EventGroupListResponse(BaseModel):
    """Event groups of one breakdown."""

    data: list[EventGroupDTO]


class EventGroupResponse(BaseModel):
    """Single event group envelope."""

    data: EventGroupDTO


class EventResponse(BaseModel):
    """Single event envelope."""

    data: EventGroupEventDTO


class EventGroupCreate(BaseModel):
    """Event group creation schema."""

    video_timestamp: float = Field(..., ge=0)
    game_clock_timestamp: float | None = Field(None, ge=0)
    workflow_id: str | None = None


class EventCreate(BaseModel):
    """Event creation schema.

    Timestamps default to the owning group's when omitted.
    """

    event_type_id: str
    breakdown_player_id: str | None = None
    breakdown_team_id: str | None = None
    video_timestamp: float | None = Field(None, ge=0)
    game_clock_timestamp: float | None = Field(None, ge=0)
    metadata: dict[str, Any] | None = None


class EventGroupPatch(BaseModel):
    """Reposition an event group.

    Only fields present in the request body are applied, so an explicit
    ``null`` game clock clears it.
    """

    video_timestamp: float | None = Field(None, ge=0)
    game_clock_timestamp: float | None = Field(None, ge=0)

    @model_validator(mode="after")
    def video_timestamp_not_null(self) -> "EventGroupPatch":
        """A group always keeps a video timestamp."""
        if "video_timestamp" in self.model_fields_set and self.video_timestamp is None:
            raise ValueError("video_timestamp cannot be null")
        return self


class EventPatch(BaseModel):
    """Patch an event's participant and timestamps (present fields only)."""

    breakdown_player_id: str | None = None
    breakdown_team_id: str | None = None
    video_timestamp: float | None = Field(None, ge=0)
    game_clock_timestamp: float | None = Field(None, ge=0)


class LineupCreate(BaseModel):
    """Players on the floor from a point of the video onwards.

    Starters are anchored at the start of the video; otherwise the lineup
    takes ``video_timestamp``, or the breakdown's playback position when it
    is omitted.
    """

    workflow_id: str
    player_ids: list[str] = Field(..., min_length=1)
    starters: bool = False
    video_timestamp: float | None = Field(None, ge=0)
    game_clock_timestamp: float | None = Field(None, ge=0)


class InGamePlayersResponse(BaseModel):
    """Players on the floor at a video position."""

    breakdown_id: str
    timestamp: float
    player_ids: list[str]
    starters_set: bool
