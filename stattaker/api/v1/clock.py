"""Playback clock API endpoints.

The player reports its position with ticks and polls for seek requests.
"""

from fastapi import APIRouter, HTTPException, status

from stattaker.core.deps import Clocks
from stattaker.schemas.clock import ClockState, ClockTick, SeekRequest
from stattaker.workflow.clock import PlaybackClock

router = APIRouter()


def _to_state(clock: PlaybackClock) -> ClockState:
    return ClockState(
        breakdown_id=clock.breakdown_id,
        timestamp=clock.current_timestamp(),
        pending_seek=clock.pending_seek,
    )


@router.get("", response_model=ClockState)
async def get_clock(
    breakdown_id: str,
    clocks: Clocks,
) -> ClockState:
    """Get the playback position and any pending seek (zero if never reported)."""
    clock = clocks.find(breakdown_id)
    if clock is None:
        return ClockState(breakdown_id=breakdown_id, timestamp=0.0, pending_seek=None)
    return _to_state(clock)


@router.put("", response_model=ClockState)
async def tick_clock(
    breakdown_id: str,
    data: ClockTick,
    clocks: Clocks,
) -> ClockState:
    """
    Report the player's position.

    The response carries the pending seek once; it is cleared afterwards.
    """
    clock = clocks.get(breakdown_id)
    try:
        clock.tick(data.timestamp)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    state = _to_state(clock)
    clock.take_pending_seek()
    return state


@router.post("/seek", response_model=ClockState)
async def seek_clock(
    breakdown_id: str,
    data: SeekRequest,
    clocks: Clocks,
) -> ClockState:
    """Request a seek (fire-and-forget; picked up on the next tick)."""
    clock = clocks.get(breakdown_id)
    clock.seek(data.seconds)
    return _to_state(clock)
