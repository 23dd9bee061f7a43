"""Workflow interpreter: graph, interview session, collectors and clock."""

from stattaker.workflow.clock import ClockRegistry, PlaybackClock, VideoClock
from stattaker.workflow.collector import (
    Coordinate,
    CoordinateCollector,
    ParticipantCollector,
    ParticipantLookup,
    ParticipantRef,
)
from stattaker.workflow.graph import OptionNode, StepNode, WorkflowGraph
from stattaker.workflow.registry import SessionRegistry
from stattaker.workflow.session import InterviewSession, PendingEvent, SessionState

__all__ = [
    "ClockRegistry",
    "Coordinate",
    "CoordinateCollector",
    "InterviewSession",
    "OptionNode",
    "ParticipantCollector",
    "ParticipantLookup",
    "ParticipantRef",
    "PendingEvent",
    "PlaybackClock",
    "SessionRegistry",
    "SessionState",
    "StepNode",
    "VideoClock",
    "WorkflowGraph",
]
