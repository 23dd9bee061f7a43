"""Interview session - the workflow interpreter.

One session walks one workflow for one tagged moment. It is single-writer
and does no background work: each public call performs at most one
transition and returns the new state. The two ``awaiting_*`` states are the
only suspension points; the session simply waits for the next call.

    awaiting_selection(step)
        -> awaiting_participant(step, option)
        -> awaiting_coordinate(step, option)
        -> awaiting_selection(next_step) | completed

``cancelled`` and ``committed`` are terminal.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from stattaker.workflow.clock import VideoClock
from stattaker.workflow.collector import (
    Coordinate,
    CoordinateRequest,
    ParticipantRef,
    ParticipantRequest,
)
from stattaker.workflow.errors import (
    GraphIntegrityError,
    InvalidTransitionError,
    MissingCopySource,
    StepHasNoOptions,
    UnknownOptionError,
)
from stattaker.workflow.graph import OptionNode, StepNode, WorkflowGraph


class SessionState(str, Enum):
    """Interview session states."""

    AWAITING_SELECTION = "awaiting_selection"
    AWAITING_PARTICIPANT = "awaiting_participant"
    AWAITING_COORDINATE = "awaiting_coordinate"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    COMMITTED = "committed"


TERMINAL_STATES = frozenset({SessionState.CANCELLED, SessionState.COMMITTED})


@dataclass
class Answer:
    """One (step, option) answer with whatever it collected."""

    step_id: str
    option_id: str
    participant: ParticipantRef | None = None
    coordinate: Coordinate | None = None

    @property
    def participant_collected(self) -> bool:
        return self.participant is not None


@dataclass
class PendingEvent:
    """Event payload waiting for commit."""

    event_type_id: str
    video_timestamp: float
    game_clock_timestamp: float | None = None
    participant: ParticipantRef | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    answer_index: int = 0  # position in the answer log that emitted it

    @property
    def breakdown_player_id(self) -> str | None:
        return self.participant.player_id if self.participant else None

    @property
    def breakdown_team_id(self) -> str | None:
        return self.participant.team_id if self.participant else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InterviewSession:
    """State machine over a workflow graph."""

    def __init__(
        self,
        graph: WorkflowGraph,
        breakdown_id: str,
        video_timestamp: float,
        game_clock_timestamp: float | None = None,
        session_id: str | None = None,
        auto_commit: bool = True,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.graph = graph
        self.breakdown_id = breakdown_id
        self.video_timestamp = video_timestamp
        self.game_clock_timestamp = game_clock_timestamp
        self.auto_commit = auto_commit

        try:
            first = graph.first_step()
        except GraphIntegrityError as exc:
            exc.session_id = self.id
            raise

        self.state = SessionState.AWAITING_SELECTION
        self.current_step_id: str | None = first.id
        self.answers: list[Answer] = []
        self.pending_events: list[PendingEvent] = []
        self._in_flight: OptionNode | None = None

        self.created_at = _utcnow()
        self.last_activity = self.created_at

    @classmethod
    def start(
        cls,
        graph: WorkflowGraph,
        breakdown_id: str,
        clock: VideoClock,
        game_clock_timestamp: float | None = None,
        auto_commit: bool = True,
    ) -> "InterviewSession":
        """Open a session anchored at the clock's current position."""
        return cls(
            graph,
            breakdown_id=breakdown_id,
            video_timestamp=clock.current_timestamp(),
            game_clock_timestamp=game_clock_timestamp,
            auto_commit=auto_commit,
        )

    @property
    def workflow_id(self) -> str:
        return self.graph.workflow_id

    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    @property
    def is_closed(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def current_step(self) -> StepNode | None:
        if self.current_step_id is None:
            return None
        return self.graph.step(self.current_step_id)

    @property
    def in_flight_option(self) -> OptionNode | None:
        """Option whose participant/coordinate is being collected."""
        return self._in_flight

    def participant_request(self) -> ParticipantRequest:
        option = self._require_in_flight(SessionState.AWAITING_PARTICIPANT)
        return ParticipantRequest(
            prompt=option.participant_prompt,
            allow_both=option.participant_allow_both,
        )

    def coordinate_request(self) -> CoordinateRequest:
        option = self._require_in_flight(SessionState.AWAITING_COORDINATE)
        return CoordinateRequest(
            prompt=option.coordinate_prompt,
            image_id=option.coordinate_image_id,
        )

    def is_idle(self, max_idle: timedelta, now: datetime | None = None) -> bool:
        return (now or _utcnow()) - self.last_activity > max_idle

    def select_option(self, option_id: str) -> SessionState:
        """Answer the current step with ``option_id``.

        Everything that can fail is checked before the answer is logged, so a
        rejected selection leaves the session exactly as it was.
        """
        self._require_state(SessionState.AWAITING_SELECTION, "select an option")
        step = self.graph.step(self.current_step_id)
        if step.is_empty:
            raise StepHasNoOptions(
                f"Step {step.id} has no options to select",
                session_id=self.id,
                step_id=step.id,
            )

        option = next((o for o in step.options if o.id == option_id), None)
        if option is None:
            raise UnknownOptionError(
                f"Option {option_id} is not offered by step {step.id}",
                session_id=self.id,
                step_id=step.id,
                option_id=option_id,
            )

        if option.next_step_id is not None:
            try:
                self.graph.enterable_step(option.next_step_id)
            except GraphIntegrityError as exc:
                exc.session_id = self.id
                exc.option_id = option.id
                raise

        copied: ParticipantRef | None = None
        if option.copies_participant:
            copied = self._copied_participant(step, option)

        self._touch()
        answer = Answer(step_id=step.id, option_id=option.id)
        self.answers.append(answer)
        self._in_flight = option

        if option.collect_participant:
            if copied is None:
                self.state = SessionState.AWAITING_PARTICIPANT
                return self.state
            answer.participant = copied

        return self._after_participant()

    def supply_participant(self, participant: ParticipantRef) -> SessionState:
        """Record the participant for the option in flight."""
        self._require_in_flight(SessionState.AWAITING_PARTICIPANT)
        self._touch()
        self.answers[-1].participant = participant
        return self._after_participant()

    def supply_coordinate(self, coordinate: Coordinate) -> SessionState:
        """Record the coordinate for the option in flight."""
        self._require_in_flight(SessionState.AWAITING_COORDINATE)
        self._touch()
        self.answers[-1].coordinate = coordinate
        return self._finish_option()

    def go_back(self) -> SessionState:
        """Undo the most recent answer (or abandon the option in flight)."""
        if self.is_closed:
            raise InvalidTransitionError(
                f"Session is {self.state.value}",
                session_id=self.id,
            )

        if self.state in (SessionState.AWAITING_PARTICIPANT, SessionState.AWAITING_COORDINATE):
            answer = self.answers.pop()
            self._in_flight = None
        elif self.answers:
            answer = self.answers.pop()
            index = len(self.answers)
            self.pending_events = [
                e for e in self.pending_events if e.answer_index != index
            ]
        else:
            raise InvalidTransitionError(
                "Nothing to undo",
                session_id=self.id,
                step_id=self.current_step_id,
            )

        self._touch()
        self.current_step_id = answer.step_id
        self.state = SessionState.AWAITING_SELECTION
        return self.state

    def set_game_clock(self, game_clock_timestamp: float | None) -> None:
        """Set the game clock shared by the session and its pending events."""
        if self.is_closed:
            raise InvalidTransitionError(
                f"Session is {self.state.value}",
                session_id=self.id,
            )
        self._touch()
        self.game_clock_timestamp = game_clock_timestamp
        for event in self.pending_events:
            event.game_clock_timestamp = game_clock_timestamp

    def cancel(self) -> None:
        """Discard everything. Nothing is persisted."""
        if self.state == SessionState.COMMITTED:
            raise InvalidTransitionError(
                "Session is already committed",
                session_id=self.id,
            )
        self.state = SessionState.CANCELLED
        self.current_step_id = None
        self._in_flight = None
        self.answers.clear()
        self.pending_events.clear()

    def mark_committed(self) -> None:
        self._require_state(SessionState.COMPLETED, "commit")
        self.state = SessionState.COMMITTED

    def _after_participant(self) -> SessionState:
        # Participant always resolves before coordinate for the same option
        if self._in_flight.collect_coordinate:
            self.state = SessionState.AWAITING_COORDINATE
            return self.state
        return self._finish_option()

    def _finish_option(self) -> SessionState:
        option = self._in_flight
        answer = self.answers[-1]

        if option.event_type_id is not None:
            metadata: dict[str, Any] = {}
            if answer.coordinate is not None:
                metadata["coordinate"] = answer.coordinate.to_metadata()
            self.pending_events.append(
                PendingEvent(
                    event_type_id=option.event_type_id,
                    video_timestamp=self.video_timestamp,
                    game_clock_timestamp=self.game_clock_timestamp,
                    participant=answer.participant,
                    metadata=metadata,
                    answer_index=len(self.answers) - 1,
                )
            )

        self._in_flight = None
        if option.next_step_id is None:
            self.current_step_id = None
            self.state = SessionState.COMPLETED
        else:
            self.current_step_id = option.next_step_id
            self.state = SessionState.AWAITING_SELECTION
        return self.state

    def _copied_participant(self, step: StepNode, option: OptionNode) -> ParticipantRef:
        source_id = option.participant_copy_step_id
        for answer in reversed(self.answers):
            if answer.step_id != source_id:
                continue
            if answer.participant is None or answer.participant.is_empty:
                raise MissingCopySource(
                    f"Step {source_id} was answered without a participant",
                    session_id=self.id,
                    step_id=step.id,
                    option_id=option.id,
                )
            return answer.participant
        raise MissingCopySource(
            f"Step {source_id} has not been answered in this session",
            session_id=self.id,
            step_id=step.id,
            option_id=option.id,
        )

    def _require_state(self, expected: SessionState, action: str) -> None:
        if self.state != expected:
            raise InvalidTransitionError(
                f"Cannot {action} while {self.state.value}",
                session_id=self.id,
                step_id=self.current_step_id,
                option_id=self._in_flight.id if self._in_flight else None,
            )

    def _require_in_flight(self, expected: SessionState) -> OptionNode:
        self._require_state(expected, f"answer {expected.value.removeprefix('awaiting_')}")
        return self._in_flight

    def _touch(self) -> None:
        self.last_activity = _utcnow()
