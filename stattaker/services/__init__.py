"""Service layer for business logic."""

from stattaker.services.commit_engine import CommitEngine
from stattaker.services.event_group_service import EventGroupService
from stattaker.services.interview_service import InterviewService
from stattaker.services.participant_service import ParticipantService
from stattaker.services.workflow_service import WorkflowService

__all__ = [
    "CommitEngine",
    "EventGroupService",
    "InterviewService",
    "ParticipantService",
    "WorkflowService",
]
