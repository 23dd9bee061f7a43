"""Pydantic schemas for API request/response validation."""

from stattaker.schemas.clock import ClockState, ClockTick, SeekRequest
from stattaker.schemas.event_group import (
    EventCreate,
    EventGroupCreate,
    EventGroupDTO,
    EventGroupEventDTO,
    EventGroupListResponse,
    EventGroupPatch,
    EventGroupResponse,
    EventPatch,
    EventResponse,
    InGamePlayersResponse,
    LineupCreate,
)
from stattaker.schemas.interview import (
    CommitResponse,
    CoordinateAnswer,
    GameClockUpdate,
    OptionSelect,
    ParticipantAnswer,
    SessionStart,
    SessionStateDTO,
)
from stattaker.schemas.workflow import (
    CollectionWorkflowDTO,
    WorkflowListResponse,
    WorkflowSeedFile,
    WorkflowValidationResponse,
)

__all__ = [
    "ClockState",
    "ClockTick",
    "CollectionWorkflowDTO",
    "CommitResponse",
    "CoordinateAnswer",
    "EventCreate",
    "EventGroupCreate",
    "EventGroupDTO",
    "EventGroupEventDTO",
    "EventGroupListResponse",
    "EventGroupPatch",
    "EventGroupResponse",
    "EventPatch",
    "EventResponse",
    "GameClockUpdate",
    "InGamePlayersResponse",
    "LineupCreate",
    "OptionSelect",
    "ParticipantAnswer",
    "SeekRequest",
    "SessionStart",
    "SessionStateDTO",
    "WorkflowListResponse",
    "WorkflowSeedFile",
    "WorkflowValidationResponse",
]
