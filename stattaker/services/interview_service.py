"""Interview service - drives sessions from API calls.

Wires the pieces of one interview together: the workflow graph from the
database, the breakdown's playback clock, the participant/coordinate
collectors and the commit engine. Live sessions stay in the registry until
they are committed or cancelled.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.core.config import get_settings
from stattaker.schemas.event_group import EventGroupDTO
from stattaker.schemas.interview import (
    AnswerView,
    CoordinateAnswer,
    CoordinatePromptView,
    OptionView,
    ParticipantAnswer,
    ParticipantPromptView,
    PendingEventView,
    SessionStart,
    SessionStateDTO,
    StepView,
)
from stattaker.services.commit_engine import CommitEngine
from stattaker.services.event_group_service import EventGroupService
from stattaker.services.participant_service import ParticipantService
from stattaker.services.workflow_service import WorkflowService
from stattaker.workflow.clock import ClockRegistry
from stattaker.workflow.collector import CoordinateCollector, ParticipantCollector
from stattaker.workflow.registry import SessionRegistry
from stattaker.workflow.session import InterviewSession, SessionState

settings = get_settings()


class InterviewService:
    """Session lifecycle operations."""

    def __init__(
        self,
        db: AsyncSession,
        sessions: SessionRegistry,
        clocks: ClockRegistry,
    ):
        self.db = db
        self.sessions = sessions
        self.clocks = clocks
        self.workflows = WorkflowService(db)
        self.participants = ParticipantCollector(ParticipantService(db))
        self.coordinates = CoordinateCollector(settings.coordinate_min, settings.coordinate_max)
        self.commit_engine = CommitEngine(EventGroupService(db))

    async def start_session(self, data: SessionStart) -> SessionStateDTO:
        """Open an interview at the breakdown's current playback position."""
        graph = await self.workflows.load_graph(data.workflow_id)
        graph.validate()

        session = InterviewSession.start(
            graph,
            breakdown_id=data.breakdown_id,
            clock=self.clocks.get(data.breakdown_id),
            game_clock_timestamp=data.game_clock_timestamp,
            auto_commit=data.auto_commit,
        )
        self.sessions.add(session)
        logger.info(
            f"Session {session.id} started: workflow '{graph.name}' on breakdown "
            f"{session.breakdown_id} at {session.video_timestamp:.3f}s"
        )
        return self._to_dto(session)

    def get_session(self, session_id: str) -> SessionStateDTO:
        return self._to_dto(self.sessions.get(session_id))

    async def select_option(self, session_id: str, option_id: str) -> SessionStateDTO:
        session = self.sessions.get(session_id)
        session.select_option(option_id)
        group = await self._maybe_commit(session)
        return self._to_dto(session, group)

    async def supply_participant(
        self, session_id: str, answer: ParticipantAnswer
    ) -> SessionStateDTO:
        session = self.sessions.get(session_id)
        request = session.participant_request()
        participant = await self.participants.resolve(
            request,
            answer,
            breakdown_id=session.breakdown_id,
            session_id=session.id,
            step_id=session.current_step_id,
            option_id=session.in_flight_option.id,
        )
        session.supply_participant(participant)
        group = await self._maybe_commit(session)
        return self._to_dto(session, group)

    async def supply_coordinate(
        self, session_id: str, answer: CoordinateAnswer
    ) -> SessionStateDTO:
        session = self.sessions.get(session_id)
        request = session.coordinate_request()
        coordinate = self.coordinates.resolve(
            request,
            answer,
            session_id=session.id,
            step_id=session.current_step_id,
            option_id=session.in_flight_option.id,
        )
        session.supply_coordinate(coordinate)
        group = await self._maybe_commit(session)
        return self._to_dto(session, group)

    def go_back(self, session_id: str) -> SessionStateDTO:
        session = self.sessions.get(session_id)
        session.go_back()
        return self._to_dto(session)

    def set_game_clock(
        self, session_id: str, game_clock_timestamp: float | None
    ) -> SessionStateDTO:
        session = self.sessions.get(session_id)
        session.set_game_clock(game_clock_timestamp)
        return self._to_dto(session)

    def cancel(self, session_id: str) -> SessionStateDTO:
        """Cancel a session and drop it. Nothing is persisted."""
        session = self.sessions.get(session_id)
        session.cancel()
        self.sessions.remove(session.id)
        logger.info(f"Session {session.id} cancelled")
        return self._to_dto(session)

    async def commit(self, session_id: str) -> EventGroupDTO | None:
        """Commit a completed session (for sessions without auto-commit)."""
        session = self.sessions.get(session_id)
        return await self._commit(session)

    async def _maybe_commit(self, session: InterviewSession) -> EventGroupDTO | None:
        if not session.is_completed:
            return None
        logger.info(
            f"Session {session.id} completed with {len(session.pending_events)} pending events"
        )
        if not session.auto_commit:
            return None
        return await self._commit(session)

    async def _commit(self, session: InterviewSession) -> EventGroupDTO | None:
        group = await self.commit_engine.commit(session)
        self.sessions.remove(session.id)
        return group

    def _to_dto(
        self,
        session: InterviewSession,
        event_group: EventGroupDTO | None = None,
    ) -> SessionStateDTO:
        """Convert InterviewSession to DTO."""
        step = session.current_step
        current_step = None
        if step is not None:
            current_step = StepView(
                id=step.id,
                prompt=step.prompt,
                type=step.type,
                options=[
                    OptionView(
                        id=o.id,
                        label=o.label,
                        display_order=o.display_order,
                        ends_interview=o.ends_interview,
                        emits_event_type_id=o.event_type_id,
                        collect_participant=o.collect_participant,
                        collect_coordinate=o.collect_coordinate,
                    )
                    for o in step.options
                ],
            )

        participant_prompt = None
        if session.state == SessionState.AWAITING_PARTICIPANT:
            request = session.participant_request()
            participant_prompt = ParticipantPromptView(
                prompt=request.prompt,
                allow_both=request.allow_both,
            )

        coordinate_prompt = None
        if session.state == SessionState.AWAITING_COORDINATE:
            request = session.coordinate_request()
            coordinate_prompt = CoordinatePromptView(
                prompt=request.prompt,
                image_id=request.image_id,
            )

        return SessionStateDTO(
            id=session.id,
            breakdown_id=session.breakdown_id,
            workflow_id=session.workflow_id,
            state=session.state.value,
            video_timestamp=session.video_timestamp,
            game_clock_timestamp=session.game_clock_timestamp,
            auto_commit=session.auto_commit,
            current_step=current_step,
            participant_prompt=participant_prompt,
            coordinate_prompt=coordinate_prompt,
            answers=[
                AnswerView(
                    step_id=a.step_id,
                    option_id=a.option_id,
                    breakdown_player_id=a.participant.player_id if a.participant else None,
                    breakdown_team_id=a.participant.team_id if a.participant else None,
                    participant_collected=a.participant_collected,
                    coordinate=a.coordinate.to_metadata() if a.coordinate else None,
                )
                for a in session.answers
            ],
            pending_events=[
                PendingEventView(
                    event_type_id=e.event_type_id,
                    breakdown_player_id=e.breakdown_player_id,
                    breakdown_team_id=e.breakdown_team_id,
                    video_timestamp=e.video_timestamp,
                    game_clock_timestamp=e.game_clock_timestamp,
                    metadata=e.metadata or None,
                )
                for e in session.pending_events
            ],
            event_group=event_group,
        )
