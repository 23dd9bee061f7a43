"""Workflow seed loader (YAML).

Seed files describe workflows with step keys instead of ids so they can be
written by hand::

    workflows:
      - collection_id: basketball
        name: Shot
        first_step: shot
        steps:
          - key: shot
            prompt: Result?
            options:
              - label: Make
                event_type_id: FGM
              - label: Miss
                event_type_id: FGA
                next: rebound
          - key: rebound
            prompt: Who rebounded?
            options:
              - label: Rebound
                event_type_id: REB
                collect_participant: true

Keys are resolved to freshly generated ids on import.
"""

import uuid
from pathlib import Path

import yaml
from pydantic import ValidationError

from stattaker.models.workflow import CollectionWorkflow, WorkflowOption, WorkflowStep
from stattaker.schemas.workflow import WorkflowSeed, WorkflowSeedFile


class WorkflowSeedError(ValueError):
    """Seed file is unreadable or refers to unknown step keys."""


def load_seed_file(path: str | Path) -> WorkflowSeedFile:
    """Parse a YAML seed file."""
    seed_path = Path(path)
    if not seed_path.exists():
        raise WorkflowSeedError(f"Workflow seed file not found: {seed_path}")
    with open(seed_path) as f:
        raw = yaml.safe_load(f) or {}
    try:
        return WorkflowSeedFile.model_validate(raw)
    except ValidationError as e:
        raise WorkflowSeedError(f"Invalid workflow seed file {seed_path}: {e}") from e


def build_workflow(seed: WorkflowSeed) -> CollectionWorkflow:
    """Turn one seed definition into ORM rows with resolved ids."""
    workflow_id = seed.id or str(uuid.uuid4())
    step_ids = {step.key: str(uuid.uuid4()) for step in seed.steps}
    first_step_key = seed.first_step or (seed.steps[0].key if seed.steps else None)

    def resolve(key: str | None, what: str) -> str | None:
        if key is None:
            return None
        if key not in step_ids:
            raise WorkflowSeedError(
                f"Workflow '{seed.name}': {what} refers to unknown step '{key}'"
            )
        return step_ids[key]

    workflow = CollectionWorkflow(
        id=workflow_id,
        collection_id=seed.collection_id,
        name=seed.name,
        display_order=seed.display_order,
        system_reserved=seed.system_reserved,
        first_step_id=resolve(first_step_key, "first_step"),
        steps=[],
    )

    for step_order, step_seed in enumerate(seed.steps):
        step = WorkflowStep(
            id=step_ids[step_seed.key],
            workflow_id=workflow_id,
            prompt=step_seed.prompt,
            type=step_seed.type,
            display_order=step_order,
            options=[],
        )
        for option_order, option_seed in enumerate(step_seed.options):
            step.options.append(
                WorkflowOption(
                    id=str(uuid.uuid4()),
                    step_id=step.id,
                    label=option_seed.label,
                    display_order=option_order,
                    next_step_id=resolve(option_seed.next, f"option '{option_seed.label}'"),
                    event_type_id=option_seed.event_type_id,
                    collect_participant=option_seed.collect_participant,
                    participant_prompt=option_seed.participant_prompt,
                    participant_copy_step_id=resolve(
                        option_seed.participant_copy_from,
                        f"option '{option_seed.label}' participant_copy_from",
                    ),
                    participant_allow_both=option_seed.participant_allow_both,
                    collect_coordinate=option_seed.collect_coordinate,
                    coordinate_prompt=option_seed.coordinate_prompt,
                    coordinate_image_id=option_seed.coordinate_image_id,
                )
            )
        workflow.steps.append(step)

    return workflow
