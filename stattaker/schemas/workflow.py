"""Workflow schemas for API request/response."""

from pydantic import BaseModel, Field


class WorkflowOptionDTO(BaseModel):
    """Workflow option response schema."""

    id: str
    step_id: str
    label: str
    display_order: int = 0
    next_step_id: str | None = None
    event_type_id: str | None = None
    collect_participant: bool = False
    participant_prompt: str | None = None
    participant_copy_step_id: str | None = None
    participant_allow_both: bool = False
    collect_coordinate: bool = False
    coordinate_prompt: str | None = None
    coordinate_image_id: str | None = None

    model_config = {"from_attributes": True}


class WorkflowStepDTO(BaseModel):
    """Workflow step response schema."""

    id: str
    workflow_id: str
    prompt: str
    type: str = "single_select"
    display_order: int = 0
    options: list[WorkflowOptionDTO] = []

    model_config = {"from_attributes": True}


class CollectionWorkflowDTO(BaseModel):
    """Collection workflow response schema (steps and options included)."""

    id: str
    collection_id: str
    name: str
    display_order: int = 0
    first_step_id: str | None = None
    system_reserved: bool = False
    steps: list[WorkflowStepDTO] = []

    model_config = {"from_attributes": True}


class WorkflowListResponse(BaseModel):
    """Workflows of one collection."""

    data: list[CollectionWorkflowDTO]


class WorkflowValidationResponse(BaseModel):
    """Integrity report for a workflow graph."""

    workflow_id: str
    valid: bool
    errors: list[str] = Field(default_factory=list)


# YAML seed file shapes. Steps and options are referenced by key within a
# workflow; ids are assigned on import.


class WorkflowOptionSeed(BaseModel):
    """Option definition in a workflow seed file."""

    label: str
    next: str | None = None
    event_type_id: str | None = None
    collect_participant: bool = False
    participant_prompt: str | None = None
    participant_copy_from: str | None = None
    participant_allow_both: bool = False
    collect_coordinate: bool = False
    coordinate_prompt: str | None = None
    coordinate_image_id: str | None = None


class WorkflowStepSeed(BaseModel):
    """Step definition in a workflow seed file."""

    key: str
    prompt: str
    type: str = "single_select"
    options: list[WorkflowOptionSeed] = []


class WorkflowSeed(BaseModel):
    """Workflow definition in a workflow seed file."""

    id: str | None = None
    collection_id: str
    name: str
    display_order: int = 0
    system_reserved: bool = False
    first_step: str | None = None
    steps: list[WorkflowStepSeed] = []


class WorkflowSeedFile(BaseModel):
    """Top-level workflow seed file."""

    workflows: list[WorkflowSeed] = []
