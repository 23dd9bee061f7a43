"""Workflow models - authored branching interviews (steps and options)."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stattaker.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class CollectionWorkflow(Base):
    """A named interview graph scoped to a collection."""

    __tablename__ = "collection_workflows"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    collection_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Loose reference into this workflow's steps (no FK, steps reference us)
    first_step_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Platform-supplied workflows (e.g. lineup) must not be user-deleted
    system_reserved: Mapped[bool] = mapped_column(Boolean, default=False)

    steps: Mapped[list["WorkflowStep"]] = relationship(
        back_populates="workflow",
        cascade="all, delete-orphan",
        order_by="WorkflowStep.display_order",
        lazy="selectin",
    )


class WorkflowStep(Base):
    """One prompt within a workflow."""

    __tablename__ = "workflow_steps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    workflow_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("collection_workflows.id", ondelete="CASCADE"),
        index=True,
    )
    prompt: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(50), default="single_select")
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    workflow: Mapped[CollectionWorkflow] = relationship(back_populates="steps")
    options: Mapped[list["WorkflowOption"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
        order_by="WorkflowOption.display_order",
        lazy="selectin",
    )


class WorkflowOption(Base):
    """One selectable answer within a step.

    Capabilities are independent: an option may navigate, emit an event,
    collect a participant and collect a coordinate in any combination.
    """

    __tablename__ = "workflow_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    step_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("workflow_steps.id", ondelete="CASCADE"),
        index=True,
    )
    label: Mapped[str] = mapped_column(String(255))
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Navigation (None = end interview and commit)
    next_step_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Event emission
    event_type_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Participant collection
    collect_participant: Mapped[bool] = mapped_column(Boolean, default=False)
    participant_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    participant_copy_step_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    participant_allow_both: Mapped[bool] = mapped_column(Boolean, default=False)

    # Coordinate collection
    collect_coordinate: Mapped[bool] = mapped_column(Boolean, default=False)
    coordinate_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    coordinate_image_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    step: Mapped[WorkflowStep] = relationship(back_populates="options")
