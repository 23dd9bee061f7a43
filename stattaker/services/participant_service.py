"""Participant service - players and teams of a breakdown."""

from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.models.participant import BreakdownPlayer, BreakdownTeam


class ParticipantService:
    """Participant lookup backed by the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def player_exists(self, breakdown_id: str, player_id: str) -> bool:
        player = await self.db.get(BreakdownPlayer, player_id)
        return player is not None and player.breakdown_id == breakdown_id

    async def team_exists(self, breakdown_id: str, team_id: str) -> bool:
        team = await self.db.get(BreakdownTeam, team_id)
        return team is not None and team.breakdown_id == breakdown_id
