"""Database models."""

from stattaker.models.event_group import EventGroup, EventGroupEvent
from stattaker.models.participant import BreakdownPlayer, BreakdownTeam
from stattaker.models.workflow import CollectionWorkflow, WorkflowOption, WorkflowStep

__all__ = [
    "BreakdownPlayer",
    "BreakdownTeam",
    "CollectionWorkflow",
    "EventGroup",
    "EventGroupEvent",
    "WorkflowOption",
    "WorkflowStep",
]
