"""Event group API endpoints (committed tags of a breakdown)."""

from fastapi import APIRouter, HTTPException, status

from stattaker.core.deps import Clocks, DBSession
from stattaker.schemas.clock import ClockState
from stattaker.schemas.event_group import (
    EventCreate,
    EventGroupCreate,
    EventGroupListResponse,
    EventGroupPatch,
    EventGroupResponse,
    EventPatch,
    EventResponse,
)
from stattaker.services.event_group_service import EventGroupService

router = APIRouter()


# =============================================================================
# Event Groups
# =============================================================================


@router.get("", response_model=EventGroupListResponse)
async def get_event_groups(
    breakdown_id: str,
    db: DBSession,
) -> EventGroupListResponse:
    """Get the event groups of a breakdown in video order."""
    event_group_service = EventGroupService(db)
    groups = await event_group_service.list_groups(breakdown_id)
    return EventGroupListResponse(data=groups)


@router.post("", response_model=EventGroupResponse)
async def create_event_group(
    breakdown_id: str,
    data: EventGroupCreate,
    db: DBSession,
) -> EventGroupResponse:
    """
    Create an event group without running a workflow.

    - **video_timestamp**: Video position (seconds)
    - **game_clock_timestamp**: Optional game clock (seconds)
    - **workflow_id**: Optional workflow the group belongs to
    """
    event_group_service = EventGroupService(db)
    group = await event_group_service.create_group(breakdown_id, data)
    return EventGroupResponse(data=group)


@router.patch("/{group_id}", response_model=EventGroupResponse)
async def patch_event_group(
    breakdown_id: str,
    group_id: str,
    data: EventGroupPatch,
    db: DBSession,
) -> EventGroupResponse:
    """Reposition an event group."""
    event_group_service = EventGroupService(db)
    group = await event_group_service.patch_group(group_id, breakdown_id, data)

    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event group not found",
        )

    return EventGroupResponse(data=group)


@router.delete("/{group_id}")
async def delete_event_group(
    breakdown_id: str,
    group_id: str,
    db: DBSession,
) -> dict:
    """Delete an event group and all of its events."""
    event_group_service = EventGroupService(db)
    success = await event_group_service.delete_group(group_id, breakdown_id)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event group not found",
        )

    return {"status": "success"}


@router.post("/{group_id}/seek", response_model=ClockState)
async def seek_to_event_group(
    breakdown_id: str,
    group_id: str,
    db: DBSession,
    clocks: Clocks,
) -> ClockState:
    """Ask the player to jump to the group's video position."""
    event_group_service = EventGroupService(db)
    group = await event_group_service.get_group(group_id, breakdown_id)

    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event group not found",
        )

    clock = clocks.get(breakdown_id)
    clock.seek(group.video_timestamp)
    return ClockState(
        breakdown_id=breakdown_id,
        timestamp=clock.current_timestamp(),
        pending_seek=clock.pending_seek,
    )


# =============================================================================
# Events
# =============================================================================


@router.post("/{group_id}/events", response_model=EventResponse)
async def create_event(
    breakdown_id: str,
    group_id: str,
    data: EventCreate,
    db: DBSession,
) -> EventResponse:
    """
    Add an event to a group.

    - **event_type_id**: Event type
    - **breakdown_player_id** / **breakdown_team_id**: Optional participant
    - **metadata**: Optional JSON metadata (e.g. a coordinate)
    """
    event_group_service = EventGroupService(db)
    event = await event_group_service.create_event(group_id, breakdown_id, data)

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event group not found",
        )

    return EventResponse(data=event)


@router.patch("/{group_id}/events/{event_id}", response_model=EventResponse)
async def patch_event(
    breakdown_id: str,
    group_id: str,
    event_id: str,
    data: EventPatch,
    db: DBSession,
) -> EventResponse:
    """Change an event's participant or timestamps."""
    event_group_service = EventGroupService(db)
    event = await event_group_service.patch_event(group_id, event_id, breakdown_id, data)

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )

    return EventResponse(data=event)


@router.delete("/{group_id}/events/{event_id}", response_model=EventResponse)
async def delete_event(
    breakdown_id: str,
    group_id: str,
    event_id: str,
    db: DBSession,
) -> EventResponse:
    """
    Soft-delete an event.

    The last live event of a group cannot be deleted; delete the group instead.
    """
    event_group_service = EventGroupService(db)
    event = await event_group_service.delete_event(group_id, event_id, breakdown_id)

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )

    return EventResponse(data=event)
