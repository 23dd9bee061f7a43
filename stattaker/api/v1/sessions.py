"""Interview session API endpoints.

Interview errors (invalid transitions, failed validation, commit failures)
propagate to the handler registered in ``stattaker.main``.
"""

from fastapi import APIRouter

from stattaker.core.deps import Clocks, DBSession, Sessions
from stattaker.schemas.interview import (
    CommitResponse,
    CoordinateAnswer,
    GameClockUpdate,
    OptionSelect,
    ParticipantAnswer,
    SessionStart,
    SessionStateDTO,
)
from stattaker.services.interview_service import InterviewService

router = APIRouter()


@router.post("", response_model=SessionStateDTO)
async def start_session(
    data: SessionStart,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """
    Start an interview at the breakdown's current playback position.

    - **breakdown_id**: Breakdown being tagged
    - **workflow_id**: Workflow to walk
    - **game_clock_timestamp**: Optional game clock (seconds)
    - **auto_commit**: Commit as soon as the interview completes
    """
    interview_service = InterviewService(db, sessions, clocks)
    return await interview_service.start_session(data)


@router.get("/{session_id}", response_model=SessionStateDTO)
async def get_session(
    session_id: str,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """Get the current prompt, answers and pending events."""
    interview_service = InterviewService(db, sessions, clocks)
    return interview_service.get_session(session_id)


@router.post("/{session_id}/select", response_model=SessionStateDTO)
async def select_option(
    session_id: str,
    data: OptionSelect,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """
    Answer the current step.

    When the selection completes an auto-committing interview, the stored
    group is returned in **event_group**.
    """
    interview_service = InterviewService(db, sessions, clocks)
    return await interview_service.select_option(session_id, data.option_id)


@router.post("/{session_id}/participant", response_model=SessionStateDTO)
async def supply_participant(
    session_id: str,
    data: ParticipantAnswer,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """
    Answer the pending participant prompt.

    - **player_id** / **team_id**: Participant within the breakdown
    - **no_attribution**: Record the event without a participant
    """
    interview_service = InterviewService(db, sessions, clocks)
    return await interview_service.supply_participant(session_id, data)


@router.post("/{session_id}/coordinate", response_model=SessionStateDTO)
async def supply_coordinate(
    session_id: str,
    data: CoordinateAnswer,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """Answer the pending coordinate prompt (normalized image space)."""
    interview_service = InterviewService(db, sessions, clocks)
    return await interview_service.supply_coordinate(session_id, data)


@router.post("/{session_id}/back", response_model=SessionStateDTO)
async def go_back(
    session_id: str,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """Undo the most recent answer."""
    interview_service = InterviewService(db, sessions, clocks)
    return interview_service.go_back(session_id)


@router.put("/{session_id}/game-clock", response_model=SessionStateDTO)
async def set_game_clock(
    session_id: str,
    data: GameClockUpdate,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """Set the game clock for the session and its pending events."""
    interview_service = InterviewService(db, sessions, clocks)
    return interview_service.set_game_clock(session_id, data.game_clock_timestamp)


@router.post("/{session_id}/commit", response_model=CommitResponse)
async def commit_session(
    session_id: str,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> CommitResponse:
    """
    Commit a completed interview.

    **data** is null when the interview produced no events.
    """
    interview_service = InterviewService(db, sessions, clocks)
    group = await interview_service.commit(session_id)
    return CommitResponse(session_id=session_id, data=group)


@router.delete("/{session_id}", response_model=SessionStateDTO)
async def cancel_session(
    session_id: str,
    db: DBSession,
    sessions: Sessions,
    clocks: Clocks,
) -> SessionStateDTO:
    """Cancel an interview. Nothing is stored."""
    interview_service = InterviewService(db, sessions, clocks)
    return interview_service.cancel(session_id)
