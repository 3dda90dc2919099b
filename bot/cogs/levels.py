import discord
from discord import app_commands
from discord.ext import commands

from app.core.db import get_session
from app.core.exceptions import UserFacingError
from app.services.level import LevelService
from bot.main import SMPBot
from bot.types import Interaction
from bot.utils.roles import create_role_if_missing, level_autocomplete


@app_commands.guild_only()
@app_commands.default_permissions(manage_roles=True)
class LevelsCog(commands.GroupCog, group_name="levels", group_description="Manage levels"):
    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot

    @app_commands.command(name="add", description="Configure a new level role")
    @app_commands.checks.bot_has_permissions(manage_roles=True)
    @app_commands.describe(role="An existing role, a new one is created if omitted")
    async def levels_add(self, i: Interaction, name: str, role: discord.Role | None = None) -> None:
        assert i.guild_id is not None
        await i.response.defer(ephemeral=True)

        new_role = await create_role_if_missing(i, name, role)
        async with get_session() as session:
            try:
                await LevelService(session).create_level(
                    guild_id=i.guild_id, name=name, role_id=new_role.id
                )
            except UserFacingError:
                if role is None:
                    await new_role.delete(reason="Level creation failed")
                raise

        await i.followup.send(f"Added the level `{name}` with {new_role.mention}.", ephemeral=True)

    @app_commands.command(name="remove", description="Remove a level and all its classes")
    @app_commands.autocomplete(name=level_autocomplete)
    async def levels_remove(self, i: Interaction, name: str) -> None:
        assert i.guild_id is not None
        async with get_session() as session:
            service = LevelService(session)
            level = await service.get_level_by_name(i.guild_id, name)
            if level is None:
                msg = f"There is no level named `{name}`."
                raise UserFacingError(msg)
            await service.delete_level(level.id)

        await i.response.send_message(f"Removed the level `{name}`.", ephemeral=True)

    @app_commands.command(name="list", description="List the levels of this server")
    async def levels_list(self, i: Interaction) -> None:
        assert i.guild_id is not None
        async with get_session() as session:
            levels = await LevelService(session).get_levels(i.guild_id)

        embed = discord.Embed(
            title="Levels",
            description="\n".join(f"- {level.name}: <@&{level.role_id}>" for level in levels)
            or "No levels yet, add one with `/levels add`.",
        )
        await i.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(LevelsCog(bot))
