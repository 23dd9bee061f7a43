"""In-memory registry of live interview sessions."""

from datetime import datetime, timedelta

from loguru import logger

from stattaker.workflow.errors import SessionNotFoundError
from stattaker.workflow.session import InterviewSession


class SessionRegistry:
    """Live sessions keyed by id. Sessions are never persisted."""

    def __init__(self):
        self._sessions: dict[str, InterviewSession] = {}

    def add(self, session: InterviewSession) -> InterviewSession:
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> InterviewSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(
                f"Session {session_id} not found",
                session_id=session_id,
            )
        return session

    def remove(self, session_id: str) -> InterviewSession | None:
        return self._sessions.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def reap_idle(
        self,
        max_idle: timedelta,
        now: datetime | None = None,
    ) -> list[str]:
        """Cancel and drop sessions idle longer than ``max_idle``."""
        idle = [s for s in self._sessions.values() if s.is_idle(max_idle, now)]
        for session in idle:
            if not session.is_closed:
                session.cancel()
            self._sessions.pop(session.id, None)
            logger.info(
                f"Reaped idle session {session.id} "
                f"(breakdown {session.breakdown_id}, workflow {session.workflow_id})"
            )
        return [s.id for s in idle]
