"""Workflow API endpoints (read-only)."""

from fastapi import APIRouter, HTTPException, status

from stattaker.core.deps import DBSession
from stattaker.schemas.workflow import (
    CollectionWorkflowDTO,
    WorkflowListResponse,
    WorkflowValidationResponse,
)
from stattaker.services.workflow_service import WorkflowService

router = APIRouter()


@router.get("/collections/{collection_id}/workflows", response_model=WorkflowListResponse)
async def get_collection_workflows(
    collection_id: str,
    db: DBSession,
) -> WorkflowListResponse:
    """
    Get the workflows of a collection with their steps and options.

    - **collection_id**: Collection ID
    """
    workflow_service = WorkflowService(db)
    workflows = await workflow_service.get_collection_workflows(collection_id)
    return WorkflowListResponse(data=workflows)


@router.get("/workflows/{workflow_id}", response_model=CollectionWorkflowDTO)
async def get_workflow(
    workflow_id: str,
    db: DBSession,
) -> CollectionWorkflowDTO:
    """Get one workflow."""
    workflow_service = WorkflowService(db)
    workflow = await workflow_service.get_workflow_dto(workflow_id)

    if not workflow:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workflow not found",
        )

    return workflow


@router.get("/workflows/{workflow_id}/validate", response_model=WorkflowValidationResponse)
async def validate_workflow(
    workflow_id: str,
    db: DBSession,
) -> WorkflowValidationResponse:
    """Report integrity problems of a workflow graph."""
    workflow_service = WorkflowService(db)
    report = await workflow_service.validate_workflow(workflow_id)

    if not report:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workflow not found",
        )

    return report
