"""Interview error taxonomy.

Every error carries the session, step and option it concerns (when known)
plus a stable machine-readable code, so callers can decide whether to
re-prompt, retry or abandon.
"""

from typing import Any


class InterviewError(Exception):
    """Base class for workflow interpretation and commit errors."""

    code = "E_INTERVIEW"
    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        session_id: str | None = None,
        step_id: str | None = None,
        option_id: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.session_id = session_id
        self.step_id = step_id
        self.option_id = option_id

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe error body."""
        return {
            "Code": self.status_code,
            "Message": self.message,
            "Error": self.code,
            "SessionId": self.session_id,
            "StepId": self.step_id,
            "OptionId": self.option_id,
        }


class GraphIntegrityError(InterviewError):
    """Malformed workflow graph. Fatal to the session."""

    code = "E_GRAPH_INTEGRITY"
    status_code = 409


class MissingCopySource(GraphIntegrityError):
    """Participant copy source has not been answered in this session."""

    code = "E_MISSING_COPY_SOURCE"


class StepHasNoOptions(GraphIntegrityError):
    """A step was reached that offers nothing to select."""

    code = "E_STEP_HAS_NO_OPTIONS"


class ParticipantResolutionError(InterviewError):
    """Supplied participant is missing, ambiguous or unknown. Re-prompt."""

    code = "E_PARTICIPANT_RESOLUTION"
    status_code = 422


class CoordinateValidationError(InterviewError):
    """Supplied coordinate is outside the image space. Re-prompt."""

    code = "E_COORDINATE_VALIDATION"
    status_code = 422


class InvalidTransitionError(InterviewError):
    """Operation is not legal in the session's current state."""

    code = "E_INVALID_TRANSITION"
    status_code = 409


class UnknownOptionError(InterviewError):
    """Option is not offered by the current step."""

    code = "E_UNKNOWN_OPTION"
    status_code = 400


class SessionNotFoundError(InterviewError):
    """No live session with this id."""

    code = "E_SESSION_NOT_FOUND"
    status_code = 404


class WorkflowNotFoundError(InterviewError):
    """No workflow with this id."""

    code = "E_WORKFLOW_NOT_FOUND"
    status_code = 404


class CommitFailure(InterviewError):
    """Persisting the event group failed; nothing was written. Retryable."""

    code = "E_COMMIT_FAILURE"
    status_code = 503


class EventGroupError(InterviewError):
    """Illegal edit of a committed event group."""

    code = "E_EVENT_GROUP"
    status_code = 409


class LineupError(InterviewError):
    """Lineup recorded against a workflow that is not the lineup workflow."""

    code = "E_LINEUP"
    status_code = 400
