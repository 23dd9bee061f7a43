"""Event group service - persistence boundary for tagged events."""

import uuid
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.core.config import get_settings
from stattaker.models.event_group import EventGroup, EventGroupEvent
from stattaker.models.workflow import CollectionWorkflow
from stattaker.schemas.event_group import (
    EventCreate,
    EventGroupCreate,
    EventGroupDTO,
    EventGroupEventDTO,
    EventGroupPatch,
    EventPatch,
    LineupCreate,
)
from stattaker.services.base_service import BaseService
from stattaker.services.participant_service import ParticipantService
from stattaker.workflow.errors import (
    CommitFailure,
    EventGroupError,
    LineupError,
    ParticipantResolutionError,
    WorkflowNotFoundError,
)

settings = get_settings()


class EventGroupService(BaseService[EventGroup]):
    """Event group and event operations.

    ``stage_*`` methods only add rows to the unit of work; callers that need
    several rows to land together stage them and then ``commit()`` once.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, EventGroup)

    async def get_group(
        self, group_id: str, breakdown_id: str | None = None
    ) -> EventGroup | None:
        """Get a group, optionally requiring it to belong to ``breakdown_id``."""
        group = await self.get_by_id(group_id)
        if not group:
            return None
        if breakdown_id is not None and group.breakdown_id != breakdown_id:
            return None
        return group

    async def get_by_idempotency_key(self, key: str) -> EventGroup | None:
        """Find the group committed under ``key``, if any."""
        result = await self.db.execute(
            select(EventGroup).where(EventGroup.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def list_groups(self, breakdown_id: str) -> list[EventGroupDTO]:
        """Groups of one breakdown in video order."""
        result = await self.db.execute(
            select(EventGroup)
            .where(EventGroup.breakdown_id == breakdown_id)
            .order_by(EventGroup.video_timestamp, EventGroup.created_at)
        )
        return [self.to_dto(g) for g in result.scalars().all()]

    def stage_group(
        self,
        breakdown_id: str,
        video_timestamp: float,
        game_clock_timestamp: float | None = None,
        workflow_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> EventGroup:
        """Add a new group to the unit of work (not committed)."""
        group = EventGroup(
            id=str(uuid.uuid4()),
            breakdown_id=breakdown_id,
            workflow_id=workflow_id,
            video_timestamp=video_timestamp,
            game_clock_timestamp=game_clock_timestamp,
            idempotency_key=idempotency_key,
            events=[],
        )
        self.db.add(group)
        return group

    def stage_event(
        self,
        group: EventGroup,
        event_type_id: str,
        breakdown_player_id: str | None = None,
        breakdown_team_id: str | None = None,
        video_timestamp: float | None = None,
        game_clock_timestamp: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EventGroupEvent:
        """Attach a new event to ``group`` (not committed).

        Timestamps default to the group's.
        """
        event = EventGroupEvent(
            id=str(uuid.uuid4()),
            event_group_id=group.id,
            breakdown_id=group.breakdown_id,
            event_type_id=event_type_id,
            position=len(group.events),
            breakdown_player_id=breakdown_player_id,
            breakdown_team_id=breakdown_team_id,
            video_timestamp=(
                video_timestamp if video_timestamp is not None else group.video_timestamp
            ),
            game_clock_timestamp=(
                game_clock_timestamp
                if game_clock_timestamp is not None
                else group.game_clock_timestamp
            ),
            deleted_at=None,
        )
        event.set_metadata(metadata)
        group.events.append(event)
        return event

    async def create_group(
        self, breakdown_id: str, data: EventGroupCreate
    ) -> EventGroupDTO:
        """Create an empty group (events are added separately)."""
        group = self.stage_group(
            breakdown_id=breakdown_id,
            video_timestamp=data.video_timestamp,
            game_clock_timestamp=data.game_clock_timestamp,
            workflow_id=data.workflow_id,
        )
        await self.commit()
        logger.info(f"Created event group {group.id} on breakdown {breakdown_id}")
        return self.to_dto(group)

    async def create_event(
        self, group_id: str, breakdown_id: str, data: EventCreate
    ) -> EventGroupEventDTO | None:
        """Add one event to an existing group."""
        group = await self.get_group(group_id, breakdown_id)
        if not group:
            return None

        event = self.stage_event(
            group,
            event_type_id=data.event_type_id,
            breakdown_player_id=data.breakdown_player_id,
            breakdown_team_id=data.breakdown_team_id,
            video_timestamp=data.video_timestamp,
            game_clock_timestamp=data.game_clock_timestamp,
            metadata=data.metadata,
        )
        await self.commit()
        return self.event_to_dto(event)

    async def patch_group(
        self, group_id: str, breakdown_id: str, data: EventGroupPatch
    ) -> EventGroupDTO | None:
        """Reposition a group (video and/or game clock timestamp)."""
        group = await self.get_group(group_id, breakdown_id)
        if not group:
            return None

        for field in data.model_fields_set:
            setattr(group, field, getattr(data, field))

        await self.commit()
        return self.to_dto(group)

    async def patch_event(
        self,
        group_id: str,
        event_id: str,
        breakdown_id: str,
        data: EventPatch,
    ) -> EventGroupEventDTO | None:
        """Patch an event's participant and timestamps."""
        group = await self.get_group(group_id, breakdown_id)
        if not group:
            return None

        event = self._find_event(group, event_id)
        if not event or event.deleted_at is not None:
            return None

        for field in data.model_fields_set:
            setattr(event, field, getattr(data, field))

        await self.commit()
        return self.event_to_dto(event)

    async def delete_group(self, group_id: str, breakdown_id: str) -> bool:
        """Delete a group together with all of its events."""
        group = await self.get_group(group_id, breakdown_id)
        if not group:
            return False

        event_count = len(group.events)
        await self.delete(group)
        logger.info(f"Deleted event group {group_id} and {event_count} events")
        return True

    async def delete_event(
        self, group_id: str, event_id: str, breakdown_id: str
    ) -> EventGroupEventDTO | None:
        """Soft-delete one event. The last live event cannot be removed."""
        group = await self.get_group(group_id, breakdown_id)
        if not group:
            return None

        event = self._find_event(group, event_id)
        if not event or event.deleted_at is not None:
            return None

        if len(group.live_events) <= 1:
            raise EventGroupError(
                f"Event {event_id} is the last event of group {group_id}; "
                "delete the group instead"
            )

        event.deleted_at = datetime.now(timezone.utc)
        await self.commit()
        return self.event_to_dto(event)

    # =========================================================================
    # Lineups
    # =========================================================================

    async def commit_lineup(
        self,
        breakdown_id: str,
        data: LineupCreate,
        video_timestamp: float,
    ) -> EventGroupDTO:
        """Record the players on the floor as one group of substitution events.

        The group belongs to the system-reserved lineup workflow and lands in
        a single transaction. Starters are anchored at 0 regardless of
        ``video_timestamp``.
        """
        workflow = await self.db.get(CollectionWorkflow, data.workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(f"Workflow {data.workflow_id} not found")
        if not workflow.system_reserved:
            raise LineupError(f"Workflow {data.workflow_id} is not a lineup workflow")

        participants = ParticipantService(self.db)
        player_ids = list(dict.fromkeys(data.player_ids))
        for player_id in player_ids:
            if not await participants.player_exists(breakdown_id, player_id):
                raise ParticipantResolutionError(
                    f"Player {player_id} is not part of breakdown {breakdown_id}"
                )

        group = self.stage_group(
            breakdown_id=breakdown_id,
            video_timestamp=0.0 if data.starters else video_timestamp,
            game_clock_timestamp=data.game_clock_timestamp,
            workflow_id=workflow.id,
        )
        for player_id in player_ids:
            self.stage_event(
                group,
                event_type_id=settings.lineup_event_type_id,
                breakdown_player_id=player_id,
            )

        try:
            await self.commit()
        except Exception as e:
            await self.rollback()
            logger.error(f"Lineup commit failed on breakdown {breakdown_id}: {e}")
            raise CommitFailure(f"Could not store lineup: {e}") from e

        logger.info(
            f"Stored lineup of {len(player_ids)} players on breakdown {breakdown_id} "
            f"at {group.video_timestamp}s"
        )
        return self.to_dto(group)

    def _lineup_groups(self, breakdown_id: str):
        return (
            select(EventGroup)
            .join(CollectionWorkflow, CollectionWorkflow.id == EventGroup.workflow_id)
            .where(
                EventGroup.breakdown_id == breakdown_id,
                CollectionWorkflow.system_reserved.is_(True),
            )
        )

    async def players_in_game(self, breakdown_id: str, timestamp: float) -> list[str]:
        """Players on the floor at ``timestamp``.

        The latest lineup at or before ``timestamp`` replaces every earlier
        one; soft-deleted substitution events are ignored.
        """
        result = await self.db.execute(
            self._lineup_groups(breakdown_id)
            .where(EventGroup.video_timestamp <= timestamp)
            .order_by(EventGroup.video_timestamp.desc(), EventGroup.created_at.desc())
            .limit(1)
        )
        group = result.scalar_one_or_none()
        if group is None:
            return []
        return [
            e.breakdown_player_id
            for e in group.live_events
            if e.event_type_id == settings.lineup_event_type_id and e.breakdown_player_id
        ]

    async def starters_set(self, breakdown_id: str) -> bool:
        """Whether a lineup exists at the start of the video."""
        result = await self.db.execute(
            self._lineup_groups(breakdown_id)
            .where(EventGroup.video_timestamp < 1)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    def _find_event(self, group: EventGroup, event_id: str) -> EventGroupEvent | None:
        return next((e for e in group.events if e.id == event_id), None)

    def to_dto(self, group: EventGroup) -> EventGroupDTO:
        """Convert EventGroup model to DTO."""
        return EventGroupDTO(
            id=group.id,
            breakdown_id=group.breakdown_id,
            workflow_id=group.workflow_id,
            video_timestamp=group.video_timestamp,
            game_clock_timestamp=group.game_clock_timestamp,
            events=[self.event_to_dto(e) for e in group.events],
        )

    def event_to_dto(self, event: EventGroupEvent) -> EventGroupEventDTO:
        """Convert EventGroupEvent model to DTO."""
        return EventGroupEventDTO(
            id=event.id,
            breakdown_id=event.breakdown_id,
            event_group_id=event.event_group_id,
            event_type_id=event.event_type_id,
            breakdown_player_id=event.breakdown_player_id,
            breakdown_team_id=event.breakdown_team_id,
            video_timestamp=event.video_timestamp,
            game_clock_timestamp=event.game_clock_timestamp,
            metadata=event.get_metadata(),
            deleted_at=event.deleted_at,
        )
