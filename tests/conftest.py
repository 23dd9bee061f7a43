"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stattaker.core.deps import get_clock_registry, get_db, get_session_registry
from stattaker.db.base import Base
from stattaker.db import models_registry  # noqa: F401 - Import to register models
from stattaker.main import app
from stattaker.models.participant import BreakdownPlayer, BreakdownTeam
from stattaker.models.workflow import CollectionWorkflow
from stattaker.schemas.workflow import WorkflowSeedFile
from stattaker.workflow.clock import ClockRegistry, PlaybackClock
from stattaker.workflow.graph import OptionNode, StepNode, WorkflowGraph
from stattaker.workflow.loader import build_workflow, load_seed_file
from stattaker.workflow.registry import SessionRegistry

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BREAKDOWN_ID = "bd-1"
SEED_FILE = Path(__file__).parent / "workflows.yaml"


def _graph(workflow_id: str, first_step_id: str | None, steps: dict[str, list[dict]]) -> WorkflowGraph:
    """Build a graph from ``{step_id: [option kwargs, ...]}``."""
    nodes = []
    for step_id, options in steps.items():
        nodes.append(
            StepNode(
                id=step_id,
                workflow_id=workflow_id,
                prompt=f"Prompt {step_id}",
                options=tuple(
                    OptionNode(step_id=step_id, display_order=i, **option)
                    for i, option in enumerate(options)
                ),
            )
        )
    return WorkflowGraph(workflow_id=workflow_id, first_step_id=first_step_id, steps=nodes)


# =============================================================================
# Workflow graphs (no database)
# =============================================================================


@pytest.fixture
def shot_graph() -> WorkflowGraph:
    """Shot -> Make (FGM) | Miss (FGA) -> Rebound (REB, participant)."""
    return _graph(
        "wf-shot",
        "shot",
        {
            "shot": [
                {"id": "make", "label": "Make", "event_type_id": "FGM"},
                {"id": "miss", "label": "Miss", "event_type_id": "FGA", "next_step_id": "rebound"},
            ],
            "rebound": [
                {
                    "id": "rebound-player",
                    "label": "Rebound",
                    "event_type_id": "REB",
                    "collect_participant": True,
                    "participant_prompt": "Who rebounded?",
                },
            ],
        },
    )


@pytest.fixture
def shot_chart_graph() -> WorkflowGraph:
    """One step whose option collects a shooter and a court coordinate."""
    return _graph(
        "wf-chart",
        "location",
        {
            "location": [
                {
                    "id": "jumper",
                    "label": "Jumper",
                    "event_type_id": "FGA",
                    "collect_participant": True,
                    "collect_coordinate": True,
                    "coordinate_prompt": "Where was the shot taken?",
                    "coordinate_image_id": "court-half",
                },
                {
                    "id": "spot",
                    "label": "Spot",
                    "event_type_id": "SPOT",
                    "collect_coordinate": True,
                    "coordinate_image_id": "court-half",
                },
            ],
        },
    )


@pytest.fixture
def and_one_graph() -> WorkflowGraph:
    """Made shot (shooter) -> and-one copies the shooter; "Skip" bypasses the shot."""
    return _graph(
        "wf-and-one",
        "start",
        {
            "start": [
                {"id": "to-shot", "label": "Shot", "next_step_id": "made"},
                {"id": "skip", "label": "Skip", "next_step_id": "and-one"},
            ],
            "made": [
                {
                    "id": "made-shot",
                    "label": "Made shot",
                    "event_type_id": "FGM",
                    "collect_participant": True,
                    "next_step_id": "and-one",
                },
            ],
            "and-one": [
                {
                    "id": "and-one-yes",
                    "label": "And one",
                    "event_type_id": "FTA",
                    "collect_participant": True,
                    "participant_copy_step_id": "made",
                },
                {"id": "and-one-no", "label": "No"},
            ],
        },
    )


@pytest.fixture
def loop_graph() -> WorkflowGraph:
    """A step that can select itself again (cycles are legal)."""
    return _graph(
        "wf-loop",
        "tally",
        {
            "tally": [
                {"id": "again", "label": "Again", "event_type_id": "TALLY", "next_step_id": "tally"},
                {"id": "done", "label": "Done"},
            ],
        },
    )


@pytest.fixture
def clock() -> PlaybackClock:
    """Playback clock parked at 12.5s."""
    return PlaybackClock(BREAKDOWN_ID, timestamp=12.5)


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def sessions() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def clocks() -> ClockRegistry:
    return ClockRegistry()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    sessions: SessionRegistry,
    clocks: ClockRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: sessions
    app.dependency_overrides[get_clock_registry] = lambda: clocks

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def seed_file() -> WorkflowSeedFile:
    """Workflow definitions from tests/workflows.yaml."""
    return load_seed_file(SEED_FILE)


@pytest_asyncio.fixture(scope="function")
async def sample_workflows(
    db_session: AsyncSession, seed_file: WorkflowSeedFile
) -> dict[str, CollectionWorkflow]:
    """Store the seeded workflows, keyed by name."""
    workflows = {}
    for seed in seed_file.workflows:
        workflow = build_workflow(seed)
        db_session.add(workflow)
        workflows[workflow.name] = workflow
    await db_session.commit()
    return workflows


@pytest_asyncio.fixture(scope="function")
async def lineup_workflow(db_session: AsyncSession) -> CollectionWorkflow:
    """Store the system-reserved lineup workflow of the basketball collection."""
    workflow = CollectionWorkflow(
        id="wf-lineup",
        collection_id="basketball",
        name="Lineup",
        display_order=99,
        system_reserved=True,
        steps=[],
    )
    db_session.add(workflow)
    await db_session.commit()
    return workflow


@pytest_asyncio.fixture(scope="function")
async def sample_participants(db_session: AsyncSession) -> dict[str, object]:
    """Create players and teams for BREAKDOWN_ID (and one on another breakdown)."""
    participants = {
        "home": BreakdownTeam(
            id="team-home",
            breakdown_id=BREAKDOWN_ID,
            team_name="Home",
            team_abbreviation="HOM",
        ),
        "player-7": BreakdownPlayer(
            id="player-7",
            breakdown_id=BREAKDOWN_ID,
            player_name="Seven",
            jersey_number="7",
            breakdown_team_id="team-home",
        ),
        "player-23": BreakdownPlayer(
            id="player-23",
            breakdown_id=BREAKDOWN_ID,
            player_name="Twenty-Three",
            jersey_number="23",
            breakdown_team_id="team-home",
        ),
        "other": BreakdownPlayer(
            id="player-other",
            breakdown_id="bd-other",
            player_name="Elsewhere",
            jersey_number="1",
        ),
    }

    for participant in participants.values():
        db_session.add(participant)
    await db_session.commit()

    return participants
