"""Tests for the idle session reaper."""

from datetime import timedelta

import pytest

from stattaker.workers.session_reaper import SessionReaperWorker
from stattaker.workflow.clock import ClockRegistry, PlaybackClock
from stattaker.workflow.errors import SessionNotFoundError
from stattaker.workflow.graph import WorkflowGraph
from stattaker.workflow.registry import SessionRegistry
from stattaker.workflow.session import InterviewSession, SessionState


@pytest.mark.asyncio
async def test_reaper_drops_idle_sessions(shot_graph: WorkflowGraph, clock: PlaybackClock):
    """Test only sessions idle past the window are cancelled."""
    registry = SessionRegistry()
    idle = registry.add(InterviewSession.start(shot_graph, breakdown_id="bd-1", clock=clock))
    active = registry.add(InterviewSession.start(shot_graph, breakdown_id="bd-1", clock=clock))
    idle.select_option("miss")
    idle.last_activity -= timedelta(minutes=45)

    reaped = await SessionReaperWorker(registry, idle_minutes=30).run()

    assert reaped == [idle.id]
    assert idle.state == SessionState.CANCELLED
    assert idle.pending_events == []
    assert idle.id not in registry
    assert active.id in registry


@pytest.mark.asyncio
async def test_reaper_empty_registry():
    """Test a run with nothing to do."""
    assert await SessionReaperWorker(SessionRegistry(), idle_minutes=1).run() == []


def test_registry_get_unknown():
    """Test looking up a session that is gone."""
    with pytest.raises(SessionNotFoundError) as exc_info:
        SessionRegistry().get("missing")
    assert exc_info.value.session_id == "missing"


@pytest.mark.asyncio
async def test_reaper_drops_idle_clocks():
    """Test the reaper also prunes clocks that stopped reporting."""
    clocks = ClockRegistry()
    clocks.get("bd-stale").updated_at -= timedelta(minutes=45)
    clocks.get("bd-live").tick(8.0)

    reaped = await SessionReaperWorker(SessionRegistry(), idle_minutes=30, clocks=clocks).run()

    assert reaped == []
    assert clocks.find("bd-stale") is None
    assert clocks.find("bd-live") is not None
