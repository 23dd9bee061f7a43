"""Participant models - players and teams attached to a breakdown."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from stattaker.db.base import Base


class BreakdownPlayer(Base):
    """Player available for attribution within a breakdown."""

    __tablename__ = "breakdown_players"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    breakdown_id: Mapped[str] = mapped_column(String(255), index=True)
    player_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    jersey_number: Mapped[str | None] = mapped_column(String(16), nullable=True)
    breakdown_team_id: Mapped[str | None] = mapped_column(String(255), nullable=True)


class BreakdownTeam(Base):
    """Team available for attribution within a breakdown."""

    __tablename__ = "breakdown_teams"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    breakdown_id: Mapped[str] = mapped_column(String(255), index=True)
    team_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    team_abbreviation: Mapped[str | None] = mapped_column(String(16), nullable=True)
