import discord
from discord.ext import commands
from loguru import logger

from app.core.db import get_session
from app.services.guild import GuildService
from app.services.member import MemberService
from bot.main import SMPBot


class EventsCog(commands.Cog):
    """Keep the guild and member rows in sync with Discord."""

    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        # Guilds joined while the bot was offline
        async with get_session() as session:
            service = GuildService(session)
            for guild in self.bot.guilds:
                if await service.get_guild(guild.id) is None:
                    await service.create_guild(
                        guild_id=guild.id, name=guild.name, owner_id=guild.owner_id or 0
                    )

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild) -> None:
        async with get_session() as session:
            await GuildService(session).create_guild(
                guild_id=guild.id, name=guild.name, owner_id=guild.owner_id or 0
            )

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.warning(f"Removed from guild {guild.name!r} ({guild.id})")
        async with get_session() as session:
            await GuildService(session).delete_guild(guild.id)

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        if member.bot:
            return

        async with get_session() as session:
            await MemberService(session).create_member(
                guild_id=member.guild.id, discord_id=member.id, username=member.name
            )

    @commands.Cog.listener()
    async def on_member_remove(self, member: discord.Member) -> None:
        async with get_session() as session:
            await MemberService(session).delete_member(
                guild_id=member.guild.id, discord_id=member.id
            )


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(EventsCog(bot))
