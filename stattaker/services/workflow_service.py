"""Workflow service - authored workflows and their graphs."""

from pathlib import Path

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.models.workflow import CollectionWorkflow
from stattaker.schemas.workflow import CollectionWorkflowDTO, WorkflowValidationResponse
from stattaker.services.base_service import BaseService
from stattaker.workflow.errors import WorkflowNotFoundError
from stattaker.workflow.graph import WorkflowGraph
from stattaker.workflow.loader import build_workflow, load_seed_file


class WorkflowService(BaseService[CollectionWorkflow]):
    """Read access to workflows plus YAML seeding."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, CollectionWorkflow)

    async def get_collection_workflows(self, collection_id: str) -> list[CollectionWorkflowDTO]:
        """Workflows of a collection in display order."""
        result = await self.db.execute(
            select(CollectionWorkflow)
            .where(CollectionWorkflow.collection_id == collection_id)
            .order_by(CollectionWorkflow.display_order, CollectionWorkflow.name)
        )
        return [CollectionWorkflowDTO.model_validate(w) for w in result.scalars().all()]

    async def get_workflow_dto(self, workflow_id: str) -> CollectionWorkflowDTO | None:
        workflow = await self.get_by_id(workflow_id)
        if not workflow:
            return None
        return CollectionWorkflowDTO.model_validate(workflow)

    async def load_graph(self, workflow_id: str) -> WorkflowGraph:
        """Load a workflow and index it. Raises if it does not exist."""
        workflow = await self.get_workflow_dto(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
        return WorkflowGraph.from_dto(workflow)

    async def validate_workflow(self, workflow_id: str) -> WorkflowValidationResponse | None:
        """Integrity report without raising."""
        workflow = await self.get_workflow_dto(workflow_id)
        if workflow is None:
            return None
        errors = WorkflowGraph.from_dto(workflow).integrity_errors()
        return WorkflowValidationResponse(
            workflow_id=workflow_id,
            valid=not errors,
            errors=errors,
        )

    async def seed_from_file(self, path: str | Path) -> int:
        """Import workflows from a YAML file.

        Workflows whose id, or whose (collection, name) pair, already exists
        are skipped so seeding is safe to repeat on every startup.
        """
        seed_file = load_seed_file(path)
        created = 0
        for seed in seed_file.workflows:
            if seed.id and await self.get_by_id(seed.id):
                continue
            result = await self.db.execute(
                select(CollectionWorkflow.id).where(
                    CollectionWorkflow.collection_id == seed.collection_id,
                    CollectionWorkflow.name == seed.name,
                )
            )
            if result.first() is not None:
                continue

            workflow = build_workflow(seed)
            errors = WorkflowGraph.from_dto(
                CollectionWorkflowDTO.model_validate(workflow)
            ).integrity_errors()
            if errors:
                logger.warning(
                    f"Seeded workflow '{seed.name}' has integrity problems: {'; '.join(errors)}"
                )
            self.db.add(workflow)
            created += 1

        await self.commit()
        logger.info(f"Seeded {created} workflows from {path}")
        return created
