import discord
from discord import app_commands
from loguru import logger

from app.core.db import get_session
from app.services.guild import GuildService
from app.services.member import MemberService
from bot.utils.error_handler import error_handler


class CommandTree(app_commands.CommandTree):
    async def on_error(self, i: discord.Interaction, error: app_commands.AppCommandError) -> None:
        return await error_handler(i, error)

    async def interaction_check(self, i: discord.Interaction) -> bool:
        logger.debug(f"{i.user.name} ({i.user.id}) used {i.command.name if i.command else i.type}")
        if i.guild is None or i.type is not discord.InteractionType.application_command:
            return True

        # Guilds and members added while the bot was offline are registered lazily
        async with get_session() as session:
            if await GuildService(session).get_guild(i.guild.id) is None:
                await GuildService(session).create_guild(
                    guild_id=i.guild.id, name=i.guild.name, owner_id=i.guild.owner_id or 0
                )
            members = MemberService(session)
            if await members.get_member(guild_id=i.guild.id, discord_id=i.user.id) is None:
                await members.create_member(
                    guild_id=i.guild.id, discord_id=i.user.id, username=i.user.name
                )
        return True
