from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.models.member import Member
from app.models.verified_member import VerifiedMember


class MemberService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_member(self, *, guild_id: int, discord_id: int) -> Member | None:
        result = await self.db.exec(
            select(Member).where(Member.guild_id == guild_id, Member.discord_id == discord_id)
        )
        return result.first()

    async def create_member(self, *, guild_id: int, discord_id: int, username: str) -> Member:
        """Create the member row, or return the existing one."""
        member = await self.get_member(guild_id=guild_id, discord_id=discord_id)
        if member is not None:
            logger.warning(f"Member {username!r} ({discord_id}) already exists in guild {guild_id}")
            return member

        member = Member(guild_id=guild_id, discord_id=discord_id, username=username)
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        logger.info(f"Added member {username!r} ({discord_id}) to guild {guild_id}")
        return member

    async def delete_member(self, *, guild_id: int, discord_id: int) -> bool:
        member = await self.get_member(guild_id=guild_id, discord_id=discord_id)
        if member is None:
            return False

        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"Deleted member {discord_id} from guild {guild_id}")
        return True

    async def get_verified_member(self, *, guild_id: int, discord_id: int) -> VerifiedMember | None:
        result = await self.db.exec(
            select(VerifiedMember)
            .join(Member)
            .where(Member.guild_id == guild_id, Member.discord_id == discord_id)
        )
        return result.first()

    async def is_verified(self, *, guild_id: int, discord_id: int) -> bool:
        return await self.get_verified_member(guild_id=guild_id, discord_id=discord_id) is not None
