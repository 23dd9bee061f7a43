"""API v1 router initialization."""

from fastapi import APIRouter

from stattaker.api.v1.clock import router as clock_router
from stattaker.api.v1.event_groups import router as event_groups_router
from stattaker.api.v1.lineups import router as lineups_router
from stattaker.api.v1.sessions import router as sessions_router
from stattaker.api.v1.workflows import router as workflows_router

router = APIRouter()

router.include_router(workflows_router, tags=["Workflows"])
router.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])
router.include_router(
    event_groups_router,
    prefix="/breakdowns/{breakdown_id}/event-groups",
    tags=["Event Groups"],
)
router.include_router(
    lineups_router,
    prefix="/breakdowns/{breakdown_id}/lineups",
    tags=["Lineups"],
)
router.include_router(
    clock_router,
    prefix="/breakdowns/{breakdown_id}/clock",
    tags=["Clock"],
)
