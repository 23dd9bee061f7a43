"""
Model registry.

Import all models here to ensure they are registered with SQLAlchemy metadata
before ``Base.metadata.create_all`` runs.
"""

from stattaker.db.base import Base
from stattaker.models.event_group import EventGroup, EventGroupEvent
from stattaker.models.participant import BreakdownPlayer, BreakdownTeam
from stattaker.models.workflow import CollectionWorkflow, WorkflowOption, WorkflowStep

__all__ = [
    "Base",
    "BreakdownPlayer",
    "BreakdownTeam",
    "CollectionWorkflow",
    "EventGroup",
    "EventGroupEvent",
    "WorkflowOption",
    "WorkflowStep",
]
