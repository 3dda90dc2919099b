from typing import TYPE_CHECKING, cast

import discord
from discord import app_commands
from discord.ext import commands

from app.core.db import get_session
from app.core.exceptions import UserFacingError
from app.services.guild import GuildService
from bot.main import SMPBot
from bot.types import Interaction
from bot.ui.verification import VerificationPanel

if TYPE_CHECKING:
    from bot.cogs.verification import VerificationCog


@app_commands.guild_only()
@app_commands.default_permissions(administrator=True)
class SetupCog(commands.GroupCog, group_name="setup", group_description="Configure the bot"):
    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot

    @app_commands.command(name="role", description="Set the role given to verified members")
    async def setup_role(self, i: Interaction, role: discord.Role) -> None:
        assert i.guild_id is not None
        if role.permissions.administrator:
            msg = "The verified role cannot have the Administrator permission."
            raise UserFacingError(msg)

        async with get_session() as session:
            await GuildService(session).set_verified_role(i.guild_id, role.id)
        await i.response.send_message(f"Verified members will get {role.mention}.", ephemeral=True)

    @app_commands.command(name="pattern", description="Set the email domain members must use")
    @app_commands.describe(pattern="The allowed email domain, e.g. school.edu")
    async def setup_pattern(self, i: Interaction, pattern: str) -> None:
        assert i.guild_id is not None
        async with get_session() as session:
            guild = await GuildService(session).set_email_domain(i.guild_id, pattern)
        assert guild is not None and guild.verification_email_domain is not None
        await i.response.send_message(
            f"Only `@{guild.verification_email_domain}` accounts can now be verified.",
            ephemeral=True,
        )

    @app_commands.command(name="message", description="Post the login and logout buttons")
    async def setup_message(
        self, i: Interaction, channel: discord.TextChannel | None = None
    ) -> None:
        assert i.guild_id is not None
        target = channel or i.channel
        if not isinstance(target, discord.TextChannel):
            msg = "Please choose a text channel."
            raise UserFacingError(msg)

        cog = self.bot.get_cog("VerificationCog")
        if cog is None:
            msg = "The verification cog is not loaded"
            raise RuntimeError(msg)

        embed = discord.Embed(
            title="Verify your identity",
            description=(
                "Link your Google account with your Discord account to get access to the server."
            ),
        )
        view = VerificationPanel(cast("VerificationCog", cog))
        message = await target.send(embed=embed, view=view)

        async with get_session() as session:
            await GuildService(session).set_login_message(i.guild_id, message.id)
        await i.response.send_message(f"Done, see {message.jump_url}", ephemeral=True)


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(SetupCog(bot))
