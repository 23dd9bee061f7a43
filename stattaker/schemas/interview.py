"""Interview session schemas for API request/response."""

from typing import Any

from pydantic import BaseModel, Field

from stattaker.schemas.event_group import EventGroupDTO


class SessionStart(BaseModel):
    """Start an interview at the breakdown's current playback position."""

    breakdown_id: str
    workflow_id: str
    game_clock_timestamp: float | None = Field(None, ge=0)
    auto_commit: bool = True


class OptionSelect(BaseModel):
    """Answer the current step."""

    option_id: str


class ParticipantAnswer(BaseModel):
    """Answer a participant prompt.

    Exactly one of ``player_id`` / ``team_id`` unless the prompt allows both;
    ``no_attribution`` records the event without a participant.
    """

    player_id: str | None = None
    team_id: str | None = None
    no_attribution: bool = False


class CoordinateAnswer(BaseModel):
    """Answer a coordinate prompt (normalized image space)."""

    x: float
    y: float
    image_id: str | None = None


class GameClockUpdate(BaseModel):
    """Set the game clock for the session's events."""

    game_clock_timestamp: float | None = Field(None, ge=0)


class OptionView(BaseModel):
    """Option as offered to the caller."""

    id: str
    label: str
    display_order: int
    ends_interview: bool
    emits_event_type_id: str | None = None
    collect_participant: bool = False
    collect_coordinate: bool = False


class StepView(BaseModel):
    """Current step as offered to the caller."""

    id: str
    prompt: str
    type: str
    options: list[OptionView]


class ParticipantPromptView(BaseModel):
    """Pending participant prompt."""

    prompt: str | None = None
    allow_both: bool = False


class CoordinatePromptView(BaseModel):
    """Pending coordinate prompt."""

    prompt: str | None = None
    image_id: str | None = None


class AnswerView(BaseModel):
    """One logged answer."""

    step_id: str
    option_id: str
    breakdown_player_id: str | None = None
    breakdown_team_id: str | None = None
    participant_collected: bool = False
    coordinate: dict[str, Any] | None = None


class PendingEventView(BaseModel):
    """Event payload waiting for commit."""

    event_type_id: str
    breakdown_player_id: str | None = None
    breakdown_team_id: str | None = None
    video_timestamp: float
    game_clock_timestamp: float | None = None
    metadata: dict[str, Any] | None = None


class SessionStateDTO(BaseModel):
    """Interview session snapshot."""

    id: str
    breakdown_id: str
    workflow_id: str
    state: str
    video_timestamp: float
    game_clock_timestamp: float | None = None
    auto_commit: bool = True
    current_step: StepView | None = None
    participant_prompt: ParticipantPromptView | None = None
    coordinate_prompt: CoordinatePromptView | None = None
    answers: list[AnswerView] = []
    pending_events: list[PendingEventView] = []
    event_group: EventGroupDTO | None = None


class CommitResponse(BaseModel):
    """Result of committing an interview.

    ``data`` is null when the interview produced no events.
    """

    session_id: str
    data: EventGroupDTO | None = None
