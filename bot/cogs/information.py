import discord
from discord import app_commands
from discord.ext import commands

from app.core.db import get_session
from app.services.verification import VerificationService, VerifiedProfile
from bot.main import SMPBot
from bot.types import Interaction


def profile_embed(profile: VerifiedProfile, user: discord.User | discord.Member) -> discord.Embed:
    verified = profile.verified
    embed = discord.Embed(title=f"{verified.first_name} {verified.last_name}")
    embed.add_field(name="Email", value=verified.mail, inline=False)
    embed.add_field(name="Level", value=profile.level.name)
    embed.add_field(name="Class", value=profile.school_class.name)
    embed.set_thumbnail(url=user.display_avatar.url)
    return embed


class InformationCog(commands.Cog):
    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot
        # Context menus cannot be defined inside a cog class
        self.ctx_menu = app_commands.ContextMenu(
            name="Informations", callback=self.member_informations
        )

    async def cog_load(self) -> None:
        self.bot.tree.add_command(self.ctx_menu)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(self.ctx_menu.name, type=self.ctx_menu.type)

    @staticmethod
    async def _get_profile(guild_id: int, discord_id: int) -> VerifiedProfile | None:
        async with get_session() as session:
            return await VerificationService(session).get_profile(
                guild_id=guild_id, discord_id=discord_id
            )

    @app_commands.command(name="information", description="Show your verified profile")
    @app_commands.guild_only()
    async def information(self, i: Interaction) -> None:
        assert i.guild_id is not None
        profile = await self._get_profile(i.guild_id, i.user.id)
        if profile is None:
            await i.response.send_message(
                "Your account is not linked yet, use the login button to verify yourself.",
                ephemeral=True,
            )
            return

        await i.response.send_message(embed=profile_embed(profile, i.user), ephemeral=True)

    @app_commands.guild_only()
    async def member_informations(self, i: Interaction, target: discord.Member) -> None:
        assert i.guild_id is not None
        profile = await self._get_profile(i.guild_id, target.id)
        if profile is None:
            await i.response.send_message(f"{target.mention} is not verified.", ephemeral=True)
            return

        await i.response.send_message(embed=profile_embed(profile, target), ephemeral=True)


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(InformationCog(bot))
