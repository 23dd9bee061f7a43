"""Background workers for scheduled tasks."""

from stattaker.workers.session_reaper import SessionReaperWorker

__all__ = ["SessionReaperWorker"]
