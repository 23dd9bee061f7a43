"""Commit engine - persists a completed interview as one event group."""

from loguru import logger

from stattaker.schemas.event_group import EventGroupDTO
from stattaker.services.event_group_service import EventGroupService
from stattaker.workflow.errors import CommitFailure, InvalidTransitionError
from stattaker.workflow.session import InterviewSession, SessionState


class CommitEngine:
    """Writes a session's pending events atomically.

    The group and all of its events go through one unit of work: either
    every row is stored or none is. The session id is used as the group's
    idempotency key, so committing the same session twice yields the group
    from the first commit instead of a duplicate.
    """

    def __init__(self, event_groups: EventGroupService):
        self.event_groups = event_groups

    async def commit(self, session: InterviewSession) -> EventGroupDTO | None:
        """Persist ``session``. Returns None when it produced no events."""
        if session.state != SessionState.COMPLETED:
            raise InvalidTransitionError(
                f"Cannot commit while {session.state.value}",
                session_id=session.id,
            )

        existing = await self.event_groups.get_by_idempotency_key(session.id)
        if existing is not None:
            logger.info(f"Session {session.id} already committed as group {existing.id}")
            session.mark_committed()
            return self.event_groups.to_dto(existing)

        if not session.pending_events:
            logger.info(f"Session {session.id} completed with no events; nothing stored")
            session.mark_committed()
            return None

        try:
            group = self.event_groups.stage_group(
                breakdown_id=session.breakdown_id,
                video_timestamp=session.video_timestamp,
                game_clock_timestamp=session.game_clock_timestamp,
                workflow_id=session.workflow_id,
                idempotency_key=session.id,
            )
            for pending in session.pending_events:
                self.event_groups.stage_event(
                    group,
                    event_type_id=pending.event_type_id,
                    breakdown_player_id=pending.breakdown_player_id,
                    breakdown_team_id=pending.breakdown_team_id,
                    video_timestamp=pending.video_timestamp,
                    game_clock_timestamp=pending.game_clock_timestamp,
                    metadata=pending.metadata,
                )
            await self.event_groups.commit()
        except Exception as e:
            await self.event_groups.rollback()
            logger.error(f"Commit of session {session.id} failed: {e}")
            raise CommitFailure(
                f"Failed to store event group: {e}",
                session_id=session.id,
            ) from e

        session.mark_committed()
        logger.info(
            f"Session {session.id} committed group {group.id} "
            f"with {len(group.events)} events at {group.video_timestamp:.3f}s"
        )
        return self.event_groups.to_dto(group)
