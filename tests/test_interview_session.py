"""Tests for the interview session state machine."""

from datetime import timedelta

import pytest

from stattaker.workflow.clock import PlaybackClock
from stattaker.workflow.collector import Coordinate, ParticipantRef
from stattaker.workflow.errors import (
    GraphIntegrityError,
    InvalidTransitionError,
    MissingCopySource,
    StepHasNoOptions,
    UnknownOptionError,
)
from stattaker.workflow.graph import OptionNode, StepNode, WorkflowGraph
from stattaker.workflow.session import InterviewSession, SessionState

BREAKDOWN_ID = "bd-1"


def _start(graph: WorkflowGraph, clock: PlaybackClock, **kwargs) -> InterviewSession:
    return InterviewSession.start(graph, breakdown_id=BREAKDOWN_ID, clock=clock, **kwargs)


def test_start_reads_clock(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test a new session waits on the first step at the clock's position."""
    session = _start(shot_graph, clock, game_clock_timestamp=300.0)

    assert session.state == SessionState.AWAITING_SELECTION
    assert session.current_step.id == "shot"
    assert session.video_timestamp == 12.5
    assert session.game_clock_timestamp == 300.0
    assert session.answers == []
    assert session.pending_events == []


def test_start_on_empty_first_step(clock: PlaybackClock):
    """Test a workflow whose first step has no options cannot start."""
    graph = WorkflowGraph("wf", "s", [StepNode(id="s", workflow_id="wf", prompt="Empty")])

    with pytest.raises(StepHasNoOptions) as exc_info:
        _start(graph, clock)
    assert exc_info.value.session_id is not None


def test_make(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test a terminal option with an event completes in one call."""
    session = _start(shot_graph, clock)

    state = session.select_option("make")

    assert state == SessionState.COMPLETED
    assert session.current_step is None
    assert len(session.pending_events) == 1
    event = session.pending_events[0]
    assert event.event_type_id == "FGM"
    assert event.participant is None
    assert event.video_timestamp == 12.5


def test_miss_then_rebound(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test Miss -> Rebound(player-7) accumulates FGA and REB."""
    session = _start(shot_graph, clock)

    assert session.select_option("miss") == SessionState.AWAITING_SELECTION
    assert session.current_step.id == "rebound"
    assert [e.event_type_id for e in session.pending_events] == ["FGA"]

    assert session.select_option("rebound-player") == SessionState.AWAITING_PARTICIPANT
    assert session.participant_request().prompt == "Who rebounded?"
    # No event until the participant is known
    assert len(session.pending_events) == 1

    clock.tick(40.0)
    assert session.supply_participant(ParticipantRef(player_id="player-7")) == SessionState.COMPLETED

    fga, reb = session.pending_events
    assert fga.event_type_id == "FGA"
    assert fga.breakdown_player_id is None
    assert reb.event_type_id == "REB"
    assert reb.breakdown_player_id == "player-7"
    assert reb.breakdown_team_id is None
    # Anchored at session start, not at the latest tick
    assert fga.video_timestamp == reb.video_timestamp == 12.5


def test_unknown_option_records_nothing(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test selecting an option of another step."""
    session = _start(shot_graph, clock)

    with pytest.raises(UnknownOptionError) as exc_info:
        session.select_option("rebound-player")

    assert exc_info.value.step_id == "shot"
    assert session.state == SessionState.AWAITING_SELECTION
    assert session.answers == []


def test_wrong_state_calls(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test supply calls outside their awaiting state leave the session untouched."""
    session = _start(shot_graph, clock)

    with pytest.raises(InvalidTransitionError):
        session.supply_participant(ParticipantRef(player_id="player-7"))
    with pytest.raises(InvalidTransitionError):
        session.supply_coordinate(Coordinate(0.5, 0.5))

    session.select_option("miss")
    session.select_option("rebound-player")
    with pytest.raises(InvalidTransitionError):
        session.select_option("make")

    assert session.state == SessionState.AWAITING_PARTICIPANT
    assert len(session.answers) == 2


def test_next_step_without_options(clock: PlaybackClock):
    """Test navigating into an empty step fails before anything is recorded."""
    graph = WorkflowGraph(
        "wf",
        "start",
        [
            StepNode(
                id="start",
                workflow_id="wf",
                prompt="Start",
                options=(
                    OptionNode(id="go", step_id="start", label="Go", event_type_id="X", next_step_id="dead"),
                ),
            ),
            StepNode(id="dead", workflow_id="wf", prompt="Nothing"),
        ],
    )
    session = _start(graph, clock)

    with pytest.raises(StepHasNoOptions):
        session.select_option("go")

    assert session.answers == []
    assert session.pending_events == []


def test_next_step_outside_workflow(clock: PlaybackClock):
    """Test a dangling next step is a graph integrity error at selection."""
    graph = WorkflowGraph(
        "wf",
        "start",
        [
            StepNode(
                id="start",
                workflow_id="wf",
                prompt="Start",
                options=(OptionNode(id="go", step_id="start", label="Go", next_step_id="missing"),),
            ),
        ],
    )
    session = _start(graph, clock)

    with pytest.raises(GraphIntegrityError) as exc_info:
        session.select_option("go")

    assert exc_info.value.option_id == "go"
    assert exc_info.value.session_id == session.id
    assert session.answers == []


def test_coordinate_scenario(shot_chart_graph: WorkflowGraph, clock: PlaybackClock):
    """Test participant then coordinate, stored under the event metadata."""
    session = _start(shot_chart_graph, clock)

    assert session.select_option("jumper") == SessionState.AWAITING_PARTICIPANT
    assert session.supply_participant(ParticipantRef(player_id="player-23")) == SessionState.AWAITING_COORDINATE

    request = session.coordinate_request()
    assert request.image_id == "court-half"
    assert request.prompt == "Where was the shot taken?"
    # Still waiting on the coordinate
    assert session.state == SessionState.AWAITING_COORDINATE
    assert session.pending_events == []

    state = session.supply_coordinate(Coordinate(x=0.3, y=0.7, image_id="court-half"))

    assert state == SessionState.COMPLETED
    event = session.pending_events[0]
    assert event.breakdown_player_id == "player-23"
    assert event.metadata == {"coordinate": {"image_id": "court-half", "x": 0.3, "y": 0.7}}


def test_copy_participant(and_one_graph: WorkflowGraph, clock: PlaybackClock):
    """Test an option reusing the participant of an earlier step."""
    session = _start(and_one_graph, clock)

    session.select_option("to-shot")
    session.select_option("made-shot")
    session.supply_participant(ParticipantRef(player_id="player-7"))
    state = session.select_option("and-one-yes")

    assert state == SessionState.COMPLETED
    fgm, fta = session.pending_events
    assert fgm.breakdown_player_id == "player-7"
    assert fta.event_type_id == "FTA"
    assert fta.breakdown_player_id == "player-7"
    assert session.answers[-1].participant_collected


def test_copy_source_not_answered(and_one_graph: WorkflowGraph, clock: PlaybackClock):
    """Test copying from an unanswered step records nothing."""
    session = _start(and_one_graph, clock)
    session.select_option("skip")

    with pytest.raises(MissingCopySource) as exc_info:
        session.select_option("and-one-yes")

    assert exc_info.value.option_id == "and-one-yes"
    assert session.state == SessionState.AWAITING_SELECTION
    assert session.current_step.id == "and-one"
    assert len(session.answers) == 1
    assert session.pending_events == []

    # The other option is still selectable
    assert session.select_option("and-one-no") == SessionState.COMPLETED


def test_copy_source_without_attribution(and_one_graph: WorkflowGraph, clock: PlaybackClock):
    """Test an unattributed source step cannot be copied."""
    session = _start(and_one_graph, clock)
    session.select_option("to-shot")
    session.select_option("made-shot")
    session.supply_participant(ParticipantRef())

    with pytest.raises(MissingCopySource) as exc_info:
        session.select_option("and-one-yes")

    assert "without a participant" in str(exc_info.value)
    assert session.state == SessionState.AWAITING_SELECTION
    assert [e.event_type_id for e in session.pending_events] == ["FGM"]
    assert session.select_option("and-one-no") == SessionState.COMPLETED


def test_no_attribution(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test an explicitly unattributed participant."""
    session = _start(shot_graph, clock)
    session.select_option("miss")
    session.select_option("rebound-player")

    session.supply_participant(ParticipantRef())

    reb = session.pending_events[-1]
    assert reb.breakdown_player_id is None
    assert reb.breakdown_team_id is None
    assert session.answers[-1].participant_collected


def test_one_transition_per_call(loop_graph: WorkflowGraph, clock: PlaybackClock):
    """Test a cycle only advances when the caller selects again."""
    session = _start(loop_graph, clock)

    for expected in range(1, 4):
        assert session.select_option("again") == SessionState.AWAITING_SELECTION
        assert session.current_step.id == "tally"
        assert len(session.pending_events) == expected

    assert session.select_option("done") == SessionState.COMPLETED
    assert len(session.answers) == 4
    assert len(session.pending_events) == 3


def test_smallest_option_walk(shot_graph: WorkflowGraph, loop_graph: WorkflowGraph, clock: PlaybackClock):
    """Test always picking the first option: one step per call, one event per emitting option."""
    for graph in (shot_graph, loop_graph):
        session = _start(graph, clock)
        for _ in range(5):
            if session.is_completed:
                break
            option = session.current_step.options[0]
            before = len(session.pending_events)
            session.select_option(option.id)
            emitted = len(session.pending_events) - before
            assert emitted == (1 if option.event_type_id else 0)
            assert len(session.answers) <= 5


def test_go_back(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test undoing answers drops their events."""
    session = _start(shot_graph, clock)
    session.select_option("miss")
    session.select_option("rebound-player")

    # Abandon the option in flight
    assert session.go_back() == SessionState.AWAITING_SELECTION
    assert session.current_step.id == "rebound"
    assert len(session.answers) == 1
    assert len(session.pending_events) == 1

    # Undo "Miss"
    assert session.go_back() == SessionState.AWAITING_SELECTION
    assert session.current_step.id == "shot"
    assert session.answers == []
    assert session.pending_events == []

    with pytest.raises(InvalidTransitionError):
        session.go_back()


def test_go_back_from_completed(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test a completed (uncommitted) session can be reopened."""
    session = _start(shot_graph, clock)
    session.select_option("make")

    session.go_back()

    assert session.state == SessionState.AWAITING_SELECTION
    assert session.pending_events == []
    assert session.select_option("miss") == SessionState.AWAITING_SELECTION


def test_set_game_clock(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test the game clock applies to the session and every pending event."""
    session = _start(shot_graph, clock)
    session.select_option("miss")

    session.set_game_clock(512.0)
    session.select_option("rebound-player")
    session.supply_participant(ParticipantRef(team_id="team-home"))

    assert [e.game_clock_timestamp for e in session.pending_events] == [512.0, 512.0]

    session.set_game_clock(None)
    assert all(e.game_clock_timestamp is None for e in session.pending_events)


def test_cancel(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test cancelling discards everything and closes the session."""
    session = _start(shot_graph, clock)
    session.select_option("miss")

    session.cancel()

    assert session.state == SessionState.CANCELLED
    assert session.is_closed
    assert session.pending_events == []
    with pytest.raises(InvalidTransitionError):
        session.select_option("make")
    with pytest.raises(InvalidTransitionError):
        session.go_back()


def test_mark_committed_requires_completed(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test only a completed session can be committed."""
    session = _start(shot_graph, clock)

    with pytest.raises(InvalidTransitionError):
        session.mark_committed()

    session.select_option("make")
    session.mark_committed()
    assert session.state == SessionState.COMMITTED
    with pytest.raises(InvalidTransitionError):
        session.cancel()


def test_is_idle(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test idleness is measured from the last call."""
    session = _start(shot_graph, clock)
    later = session.last_activity + timedelta(minutes=31)

    assert session.is_idle(timedelta(minutes=30), now=later)
    assert not session.is_idle(timedelta(minutes=30))
