"""
Stat Taker API - FastAPI Application

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from stattaker.api import router as api_router
from stattaker.core.config import get_settings
from stattaker.core.deps import get_clock_registry, get_session_registry
from stattaker.db.base import Base
from stattaker.db import models_registry  # noqa: F401 - Import to register models
from stattaker.db.session import async_session_maker, engine
from stattaker.services.workflow_service import WorkflowService
from stattaker.workflow.errors import InterviewError
from stattaker.workflow.loader import WorkflowSeedError
from stattaker.workers.session_reaper import SessionReaperWorker

settings = get_settings()

# Global instances
scheduler: AsyncIOScheduler | None = None


async def init_database() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def init_workflows() -> None:
    """Load workflow definitions from the configured seed file."""
    if not settings.workflow_seed_path:
        return

    async with async_session_maker() as db:
        workflow_service = WorkflowService(db)
        try:
            await workflow_service.seed_from_file(settings.workflow_seed_path)
        except WorkflowSeedError as e:
            await db.rollback()
            logger.error(f"Workflow seeding failed: {e}")


async def start_background_services() -> None:
    """Start background services."""
    global scheduler

    if not settings.enable_session_reaper:
        logger.info("Session reaper disabled")
        return

    scheduler = AsyncIOScheduler()

    # Idle interview cleanup
    session_reaper = SessionReaperWorker(
        get_session_registry(),
        clocks=get_clock_registry(),
    )
    scheduler.add_job(
        session_reaper.run,
        "interval",
        seconds=settings.session_reaper_interval_seconds,
        id="session_reaper",
    )

    scheduler.start()
    logger.info("Scheduler started")


async def stop_background_services() -> None:
    """Stop background services."""
    global scheduler

    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Stat Taker API...")

    # Ensure data directory exists
    data_path = Path(settings.data_save_folder)
    data_path.mkdir(parents=True, exist_ok=True)

    await init_database()
    await init_workflows()
    await start_background_services()

    logger.info(f"Stat Taker API started on port {settings.port}")

    yield

    # Shutdown
    logger.info("Shutting down Stat Taker API...")
    await stop_background_services()
    logger.info("Stat Taker API stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Stat Taker API - Workflow-driven video stat tagging",
    lifespan=lifespan,
    docs_url="/swagger" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(InterviewError)
async def interview_exception_handler(request: Request, exc: InterviewError) -> JSONResponse:
    """Interview and event group errors in the house error shape."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    else:
        logger.warning(f"{exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"Code": 500, "Message": str(exc)},
    )


# Include API router
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stattaker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers,
    )
