"""Immutable workflow graph indexed by step id.

Steps and options refer to each other by loose ids (``next_step_id``,
``participant_copy_step_id``). The graph resolves those ids through a map
built once per load; traversal is always id lookup, never object links.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterable

from stattaker.schemas.workflow import CollectionWorkflowDTO
from stattaker.workflow.errors import GraphIntegrityError, StepHasNoOptions


@dataclass(frozen=True)
class OptionNode:
    """One selectable answer. Capabilities are independent of each other."""

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

    @property
    def ends_interview(self) -> bool:
        return self.next_step_id is None

    @property
    def copies_participant(self) -> bool:
        return self.collect_participant and self.participant_copy_step_id is not None


@dataclass(frozen=True)
class StepNode:
    """One prompt. Options are kept sorted by display order."""

    id: str
    workflow_id: str
    prompt: str
    type: str = "single_select"
    options: tuple[OptionNode, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.options


class WorkflowGraph:
    """Read-only index over one workflow's steps and options."""

    def __init__(
        self,
        workflow_id: str,
        first_step_id: str | None,
        steps: Iterable[StepNode],
        name: str = "",
        collection_id: str | None = None,
        system_reserved: bool = False,
    ):
        self.workflow_id = workflow_id
        self.first_step_id = first_step_id
        self.name = name
        self.collection_id = collection_id
        self.system_reserved = system_reserved

        self._steps: dict[str, StepNode] = {}
        self._options: dict[str, OptionNode] = {}
        for step in steps:
            ordered = tuple(sorted(step.options, key=lambda o: (o.display_order, o.id)))
            node = StepNode(
                id=step.id,
                workflow_id=step.workflow_id,
                prompt=step.prompt,
                type=step.type,
                options=ordered,
            )
            self._steps[node.id] = node
            for option in ordered:
                self._options[option.id] = option

    @classmethod
    def from_dto(cls, workflow: CollectionWorkflowDTO) -> "WorkflowGraph":
        """Build the index from a loaded workflow."""
        steps = [
            StepNode(
                id=step.id,
                workflow_id=step.workflow_id,
                prompt=step.prompt,
                type=step.type,
                options=tuple(
                    OptionNode(**option.model_dump()) for option in step.options
                ),
            )
            for step in workflow.steps
        ]
        return cls(
            workflow_id=workflow.id,
            first_step_id=workflow.first_step_id,
            steps=steps,
            name=workflow.name,
            collection_id=workflow.collection_id,
            system_reserved=workflow.system_reserved,
        )

    @property
    def steps(self) -> list[StepNode]:
        return list(self._steps.values())

    def has_step(self, step_id: str) -> bool:
        return step_id in self._steps

    def step(self, step_id: str) -> StepNode:
        """Look up a step of this workflow."""
        try:
            return self._steps[step_id]
        except KeyError:
            raise GraphIntegrityError(
                f"Step {step_id} does not belong to workflow {self.workflow_id}",
                step_id=step_id,
            ) from None

    def option(self, option_id: str) -> OptionNode | None:
        return self._options.get(option_id)

    def enterable_step(self, step_id: str) -> StepNode:
        """Look up a step that is about to become current.

        A step reached with no options is an error, never implicit completion.
        """
        step = self.step(step_id)
        if step.is_empty:
            raise StepHasNoOptions(
                f"Step {step_id} has no options to select",
                step_id=step_id,
            )
        return step

    def first_step(self) -> StepNode:
        """The step an interview starts on."""
        if self.first_step_id is None:
            raise GraphIntegrityError(
                f"Workflow {self.workflow_id} has no first step"
            )
        return self.enterable_step(self.first_step_id)

    def successors(self, step_id: str) -> set[str]:
        """Steps directly reachable from ``step_id`` by one selection."""
        step = self._steps.get(step_id)
        if step is None:
            return set()
        return {
            o.next_step_id
            for o in step.options
            if o.next_step_id is not None and o.next_step_id in self._steps
        }

    def reachable_from(self, step_id: str, include_start: bool = True) -> set[str]:
        """Steps reachable from ``step_id`` (breadth-first, cycle safe)."""
        seen: set[str] = set()
        queue = deque(self.successors(step_id))
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            queue.extend(self.successors(current) - seen)
        if include_start and step_id in self._steps:
            seen.add(step_id)
        return seen

    def integrity_errors(self) -> list[str]:
        """Describe every integrity problem in the graph (empty when valid)."""
        errors: list[str] = []

        if self.first_step_id is not None and self.first_step_id not in self._steps:
            errors.append(
                f"first_step_id {self.first_step_id} does not reference a step of this workflow"
            )

        targeted: set[str] = set()
        if self.first_step_id is not None:
            targeted.add(self.first_step_id)

        for step in self._steps.values():
            if step.workflow_id != self.workflow_id:
                errors.append(
                    f"Step {step.id} belongs to workflow {step.workflow_id}"
                )
            for option in step.options:
                if option.step_id != step.id:
                    errors.append(
                        f"Option {option.id} is listed under step {step.id} "
                        f"but owned by step {option.step_id}"
                    )
                if option.next_step_id is not None:
                    if option.next_step_id in self._steps:
                        targeted.add(option.next_step_id)
                    else:
                        errors.append(
                            f"Option {option.id} points to step {option.next_step_id} "
                            f"outside this workflow"
                        )
                if option.participant_copy_step_id is not None:
                    errors.extend(self._copy_source_errors(step, option))

        for step_id in sorted(targeted):
            step = self._steps.get(step_id)
            if step is not None and step.is_empty:
                errors.append(f"Step {step_id} is reachable but has no options")

        return errors

    def _copy_source_errors(self, step: StepNode, option: OptionNode) -> list[str]:
        source_id = option.participant_copy_step_id
        source = self._steps.get(source_id) if source_id else None
        if source is None:
            return [
                f"Option {option.id} copies participant from step {source_id} "
                f"outside this workflow"
            ]
        errors = []
        # The source must be answerable before the copying step on some path
        if step.id not in self.reachable_from(source.id, include_start=False):
            errors.append(
                f"Option {option.id} copies participant from step {source.id}, "
                f"which never precedes step {step.id}"
            )
        if not any(o.collect_participant for o in source.options):
            errors.append(
                f"Option {option.id} copies participant from step {source.id}, "
                f"which never collects a participant"
            )
        return errors

    def validate(self) -> "WorkflowGraph":
        """Raise ``GraphIntegrityError`` if the graph is malformed."""
        errors = self.integrity_errors()
        if errors:
            raise GraphIntegrityError(
                f"Workflow {self.workflow_id} is invalid: " + "; ".join(errors)
            )
        return self
