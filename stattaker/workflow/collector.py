"""Participant and coordinate collection.

Pure request/response helpers: the session says what it needs, the caller
answers, and the collectors validate the answer into a value the session can
record. Nothing here touches storage except through the lookup protocol.
"""

import math
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from stattaker.schemas.interview import CoordinateAnswer, ParticipantAnswer
from stattaker.workflow.errors import CoordinateValidationError, ParticipantResolutionError


@dataclass(frozen=True)
class ParticipantRef:
    """Resolved participant. Both ids empty means "no attribution"."""

    player_id: str | None = None
    team_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.player_id is None and self.team_id is None


@dataclass(frozen=True)
class Coordinate:
    """Point on a reference image, in that image's normalized space."""

    x: float
    y: float
    image_id: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        return {"image_id": self.image_id, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class ParticipantRequest:
    """What the session needs to know about a participant."""

    prompt: str | None = None
    allow_both: bool = False


@dataclass(frozen=True)
class CoordinateRequest:
    """What the session needs to know about a coordinate."""

    prompt: str | None = None
    image_id: str | None = None


class ParticipantLookup(Protocol):
    """Resolves participant ids within a breakdown."""

    async def player_exists(self, breakdown_id: str, player_id: str) -> bool:
        ...

    async def team_exists(self, breakdown_id: str, team_id: str) -> bool:
        ...


class ParticipantCollector:
    """Validates participant answers against a lookup."""

    def __init__(self, lookup: ParticipantLookup):
        self.lookup = lookup

    async def resolve(
        self,
        request: ParticipantRequest,
        answer: ParticipantAnswer,
        *,
        breakdown_id: str,
        session_id: str | None = None,
        step_id: str | None = None,
        option_id: str | None = None,
    ) -> ParticipantRef:
        """Turn a caller's answer into a participant reference."""
        context = {"session_id": session_id, "step_id": step_id, "option_id": option_id}

        if answer.no_attribution:
            if answer.player_id or answer.team_id:
                raise ParticipantResolutionError(
                    "no_attribution cannot be combined with a player or team",
                    **context,
                )
            return ParticipantRef()

        if not answer.player_id and not answer.team_id:
            raise ParticipantResolutionError(
                "A player or team is required",
                **context,
            )
        if answer.player_id and answer.team_id and not request.allow_both:
            raise ParticipantResolutionError(
                "Exactly one of player or team is expected",
                **context,
            )

        if answer.player_id and not await self.lookup.player_exists(
            breakdown_id, answer.player_id
        ):
            logger.warning(
                f"Session {session_id}: unknown player {answer.player_id} "
                f"in breakdown {breakdown_id}"
            )
            raise ParticipantResolutionError(
                f"Player {answer.player_id} not found in breakdown {breakdown_id}",
                **context,
            )
        if answer.team_id and not await self.lookup.team_exists(
            breakdown_id, answer.team_id
        ):
            logger.warning(
                f"Session {session_id}: unknown team {answer.team_id} "
                f"in breakdown {breakdown_id}"
            )
            raise ParticipantResolutionError(
                f"Team {answer.team_id} not found in breakdown {breakdown_id}",
                **context,
            )

        return ParticipantRef(player_id=answer.player_id, team_id=answer.team_id)


class CoordinateCollector:
    """Validates coordinate answers against the image space bounds."""

    def __init__(self, minimum: float = 0.0, maximum: float = 1.0):
        self.minimum = minimum
        self.maximum = maximum

    def resolve(
        self,
        request: CoordinateRequest,
        answer: CoordinateAnswer,
        *,
        session_id: str | None = None,
        step_id: str | None = None,
        option_id: str | None = None,
    ) -> Coordinate:
        """Turn a caller's answer into a coordinate on the reference image."""
        context = {"session_id": session_id, "step_id": step_id, "option_id": option_id}

        for axis, value in (("x", answer.x), ("y", answer.y)):
            if not math.isfinite(value):
                raise CoordinateValidationError(
                    f"Coordinate {axis} must be a finite number",
                    **context,
                )
            if not self.minimum <= value <= self.maximum:
                raise CoordinateValidationError(
                    f"Coordinate {axis}={value} is outside "
                    f"[{self.minimum}, {self.maximum}]",
                    **context,
                )

        return Coordinate(
            x=answer.x,
            y=answer.y,
            image_id=answer.image_id or request.image_id,
        )
