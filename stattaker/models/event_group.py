"""Event group models - persisted results of completed interviews."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stattaker.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventGroup(Base):
    """Timestamp-anchored container for the events of one tagging occurrence."""

    __tablename__ = "event_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    breakdown_id: Mapped[str] = mapped_column(String(255), index=True)
    workflow_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Seconds into the video / game clock
    video_timestamp: Mapped[float] = mapped_column(Float)
    game_clock_timestamp: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Interview session id for commits made through the interpreter
    idempotency_key: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    events: Mapped[list["EventGroupEvent"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="EventGroupEvent.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_event_groups_breakdown_video_ts", "breakdown_id", "video_timestamp"),
    )

    @property
    def live_events(self) -> list["EventGroupEvent"]:
        """Events that have not been soft-deleted."""
        return [e for e in self.events if e.deleted_at is None]


class EventGroupEvent(Base):
    """One tagged occurrence owned by an event group."""

    __tablename__ = "event_group_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    event_group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("event_groups.id", ondelete="CASCADE"),
        index=True,
    )
    breakdown_id: Mapped[str] = mapped_column(String(255), index=True)
    event_type_id: Mapped[str] = mapped_column(String(255), index=True)

    # Order of emission within the group
    position: Mapped[int] = mapped_column(Integer, default=0)

    # Participant (player and/or team within the breakdown)
    breakdown_player_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    breakdown_team_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    video_timestamp: Mapped[float | None] = mapped_column(Float, nullable=True)
    game_clock_timestamp: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Free-form metadata stored as JSON ("metadata" is reserved on declarative classes)
    metadata_json: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    group: Mapped[EventGroup] = relationship(back_populates="events")

    def get_metadata(self) -> dict[str, Any] | None:
        """Deserialize metadata JSON."""
        if not self.metadata_json:
            return None
        try:
            return json.loads(self.metadata_json)
        except json.JSONDecodeError:
            return None

    def set_metadata(self, metadata: dict[str, Any] | None) -> None:
        """Serialize metadata to JSON."""
        self.metadata_json = json.dumps(metadata) if metadata else None
