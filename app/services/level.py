from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.constants import MAX_LEVELS_PER_GUILD
from app.core.db import get_db
from app.core.exceptions import UserFacingError
from app.models.level import Level


class LevelService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_levels(self, guild_id: int) -> Sequence[Level]:
        result = await self.db.exec(
            select(Level).where(Level.guild_id == guild_id).order_by(col(Level.name))
        )
        return result.all()

    async def get_level(self, level_id: int) -> Level | None:
        return await self.db.get(Level, level_id)

    async def get_level_by_name(self, guild_id: int, name: str) -> Level | None:
        result = await self.db.exec(
            select(Level).where(Level.guild_id == guild_id, Level.name == name)
        )
        return result.first()

    async def create_level(self, *, guild_id: int, name: str, role_id: int) -> Level:
        """Create a level.

        Raises:
            UserFacingError: If the level exists or the guild has too many levels.
        """
        if await self.get_level_by_name(guild_id, name) is not None:
            msg = f"The level `{name}` already exists."
            raise UserFacingError(msg)

        count = (
            await self.db.exec(
                select(func.count()).select_from(Level).where(Level.guild_id == guild_id)
            )
        ).one()
        if count >= MAX_LEVELS_PER_GUILD:
            msg = f"A server cannot have more than {MAX_LEVELS_PER_GUILD} levels."
            raise UserFacingError(msg)

        level = Level(guild_id=guild_id, name=name, role_id=role_id)
        self.db.add(level)
        await self.db.commit()
        await self.db.refresh(level)
        return level

    async def delete_level(self, level_id: int) -> bool:
        level = await self.get_level(level_id)
        if level is None:
            return False

        await self.db.delete(level)
        await self.db.commit()
        return True
