import itertools

import discord
from discord import app_commands
from discord.ext import commands

from app.core.db import get_session
from app.core.exceptions import UserFacingError
from app.models.level import Level
from app.services.level import LevelService
from app.services.school_class import ClassService
from bot.main import SMPBot
from bot.types import Interaction
from bot.utils.roles import create_role_if_missing, level_autocomplete


async def _get_level(guild_id: int, name: str) -> Level:
    async with get_session() as session:
        level = await LevelService(session).get_level_by_name(guild_id, name)
    if level is None:
        msg = f"There is no level named `{name}`."
        raise UserFacingError(msg)
    return level


@app_commands.guild_only()
@app_commands.default_permissions(manage_roles=True)
class ClassesCog(commands.GroupCog, group_name="classes", group_description="Manage classes"):
    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot

    @app_commands.command(name="add", description="Configure a new class role")
    @app_commands.checks.bot_has_permissions(manage_roles=True)
    @app_commands.autocomplete(level=level_autocomplete)
    @app_commands.describe(role="An existing role, a new one is created if omitted")
    async def classes_add(
        self, i: Interaction, name: str, level: str, role: discord.Role | None = None
    ) -> None:
        assert i.guild_id is not None
        await i.response.defer(ephemeral=True)
        db_level = await _get_level(i.guild_id, level)

        new_role = await create_role_if_missing(i, name, role)
        async with get_session() as session:
            try:
                await ClassService(session).create_class(
                    level=db_level, name=name, role_id=new_role.id
                )
            except UserFacingError:
                if role is None:
                    await new_role.delete(reason="Class creation failed")
                raise

        await i.followup.send(
            f"Added the class `{name}` to `{level}` with {new_role.mention}.", ephemeral=True
        )

    @app_commands.command(name="remove", description="Remove a class")
    @app_commands.autocomplete(level=level_autocomplete)
    async def classes_remove(self, i: Interaction, level: str, name: str) -> None:
        assert i.guild_id is not None
        db_level = await _get_level(i.guild_id, level)

        async with get_session() as session:
            service = ClassService(session)
            school_class = await service.get_class_by_name(db_level.id, name)
            if school_class is None:
                msg = f"There is no class named `{name}` in `{level}`."
                raise UserFacingError(msg)
            await service.delete_class(school_class.id)

        await i.response.send_message(f"Removed the class `{name}` from `{level}`.", ephemeral=True)

    @app_commands.command(name="list", description="List the classes of this server")
    async def classes_list(self, i: Interaction) -> None:
        assert i.guild_id is not None
        async with get_session() as session:
            rows = await ClassService(session).get_guild_classes(i.guild_id)

        embed = discord.Embed(title="Classes")
        for level, group in itertools.groupby(rows, key=lambda row: row[1].name):
            embed.add_field(
                name=level,
                value="\n".join(f"- {cls.name}: <@&{cls.role_id}>" for cls, _ in group),
                inline=False,
            )
        if not rows:
            embed.description = "No classes yet, add one with `/classes add`."
        await i.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(ClassesCog(bot))
