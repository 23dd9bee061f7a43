"""Lineup API endpoints (who is on the floor)."""

from fastapi import APIRouter, Query

from stattaker.core.deps import Clocks, DBSession
from stattaker.schemas.event_group import (
    EventGroupResponse,
    InGamePlayersResponse,
    LineupCreate,
)
from stattaker.services.event_group_service import EventGroupService
from stattaker.workflow.clock import ClockRegistry

router = APIRouter()


def _playback_position(clocks: ClockRegistry, breakdown_id: str) -> float:
    clock = clocks.find(breakdown_id)
    return clock.current_timestamp() if clock else 0.0


@router.post("", response_model=EventGroupResponse)
async def create_lineup(
    breakdown_id: str,
    data: LineupCreate,
    db: DBSession,
    clocks: Clocks,
) -> EventGroupResponse:
    """
    Record the players on the floor.

    - **workflow_id**: The collection's system-reserved lineup workflow
    - **player_ids**: Players on the floor (one substitution event each)
    - **starters**: Anchor the lineup at the start of the video
    - **video_timestamp**: Video position (defaults to the playback position)
    """
    video_timestamp = data.video_timestamp
    if video_timestamp is None:
        video_timestamp = _playback_position(clocks, breakdown_id)

    event_group_service = EventGroupService(db)
    group = await event_group_service.commit_lineup(breakdown_id, data, video_timestamp)
    return EventGroupResponse(data=group)


@router.get("/in-game", response_model=InGamePlayersResponse)
async def get_players_in_game(
    breakdown_id: str,
    db: DBSession,
    clocks: Clocks,
    timestamp: float | None = Query(None, ge=0),
) -> InGamePlayersResponse:
    """Get the players on the floor at a video position (defaults to the playback position)."""
    if timestamp is None:
        timestamp = _playback_position(clocks, breakdown_id)

    event_group_service = EventGroupService(db)
    return InGamePlayersResponse(
        breakdown_id=breakdown_id,
        timestamp=timestamp,
        player_ids=await event_group_service.players_in_game(breakdown_id, timestamp),
        starters_set=await event_group_service.starters_set(breakdown_id),
    )
