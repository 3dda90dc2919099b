from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.exceptions import UserFacingError
from app.models.guild import Guild


class GuildService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_guild(self, guild_id: int) -> Guild | None:
        return await self.db.get(Guild, guild_id)

    async def create_guild(self, *, guild_id: int, name: str, owner_id: int) -> Guild:
        """Create the guild row, or return the existing one."""
        guild = await self.get_guild(guild_id)
        if guild is not None:
            logger.warning(f"Guild {name!r} ({guild_id}) already exists in the database")
            return guild

        guild = Guild(id=guild_id, name=name, owner_id=owner_id)
        self.db.add(guild)
        await self.db.commit()
        await self.db.refresh(guild)
        logger.info(f"Added guild {name!r} ({guild_id}) to database")
        return guild

    async def delete_guild(self, guild_id: int) -> bool:
        guild = await self.get_guild(guild_id)
        if guild is None:
            return False

        await self.db.delete(guild)
        await self.db.commit()
        logger.info(f"Deleted guild {guild_id}")
        return True

    async def _update(self, guild_id: int, **values: object) -> Guild | None:
        guild = await self.get_guild(guild_id)
        if guild is None:
            return None

        guild.sqlmodel_update(values)
        self.db.add(guild)
        await self.db.commit()
        await self.db.refresh(guild)
        return guild

    async def set_verified_role(self, guild_id: int, role_id: int | None) -> Guild | None:
        return await self._update(guild_id, verified_role_id=role_id)

    async def set_email_domain(self, guild_id: int, domain: str) -> Guild | None:
        domain = domain.strip().removeprefix("@").strip().lower()
        if not domain:
            msg = "Please give a valid email domain, e.g. `school.edu`."
            raise UserFacingError(msg)
        return await self._update(guild_id, verification_email_domain=domain)

    async def set_login_message(self, guild_id: int, message_id: int) -> Guild | None:
        return await self._update(guild_id, login_message_id=message_id)
