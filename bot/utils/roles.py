import discord
from discord import app_commands

from app.core.db import get_session
from app.services.level import LevelService
from bot.types import Interaction


async def level_autocomplete(i: Interaction, current: str) -> list[app_commands.Choice[str]]:
    if i.guild_id is None:
        return []

    async with get_session() as session:
        levels = await LevelService(session).get_levels(i.guild_id)
    return [
        app_commands.Choice(name=level.name, value=level.name)
        for level in levels
        if current.lower() in level.name.lower()
    ][:25]


async def create_role_if_missing(
    i: Interaction, name: str, role: discord.Role | None
) -> discord.Role:
    if role is not None:
        return role

    assert i.guild is not None
    return await i.guild.create_role(
        name=name,
        permissions=discord.Permissions.none(),
        mentionable=True,
        reason=f"Created by {i.user.name}",
    )
