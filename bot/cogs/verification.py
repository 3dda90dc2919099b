from collections.abc import Sequence

import discord
from discord.ext import commands
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from app.auth.errors import AuthTimeoutError, SenderDroppedError
from app.core.config import settings
from app.core.db import get_session
from app.core.exceptions import EmailDomainNotAllowedError, RoleDeletedError
from app.models.guild import Guild
from app.schemas.auth import GoogleUserMetadata
from app.services.guild import GuildService
from app.services.level import LevelService
from app.services.member import MemberService
from app.services.school_class import ClassService
from app.services.verification import LoginComponents, VerificationService
from bot.main import SMPBot
from bot.types import Interaction
from bot.ui.verification import ChoiceView, ConfirmView, LinkView, VerificationPanel

type Message = discord.WebhookMessage


class VerificationCog(commands.Cog):
    """Link Discord members with their Google accounts."""

    def __init__(self, bot: SMPBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        # Buttons of panels posted before a restart keep working
        self.bot.add_view(VerificationPanel(self))

    async def _ask(
        self,
        message: Message,
        *,
        author_id: int,
        placeholder: str,
        options: Sequence[tuple[str, str]],
    ) -> int | None:
        view = ChoiceView(
            author_id=author_id,
            placeholder=placeholder,
            options=options,
            timeout=settings.component_timeout_seconds,
        )
        view.message = await message.edit(content=None, view=view)
        await view.wait()
        return None if view.choice is None else int(view.choice)

    @staticmethod
    def _resolve_role(guild: discord.Guild, role_id: int, *, name: str) -> discord.Role:
        role = guild.get_role(role_id)
        if role is None:
            msg = f"The {name} role was deleted, please contact an administrator."
            raise RoleDeletedError(msg)
        return role

    async def login(self, i: Interaction) -> None:
        assert i.guild is not None and isinstance(i.user, discord.Member)
        guild, member = i.guild, i.user
        await i.response.defer(ephemeral=True, thinking=True)

        async with get_session() as session:
            if await MemberService(session).is_verified(guild_id=guild.id, discord_id=member.id):
                await i.followup.send("You are already verified.", ephemeral=True)
                return
            components = await VerificationService(session).check_login_components(guild.id)

        guild_image_source = guild.icon.with_size(2048).url if guild.icon else ""
        url, process = await self.bot.auth.start(member.name, guild_image_source)
        message = await i.followup.send(
            "Use your Google account to login.",
            view=LinkView(label="Continue", url=url),
            ephemeral=True,
            wait=True,
        )

        try:
            token = await process
        except AuthTimeoutError:
            await message.edit(
                content=(
                    "You didn't finish the authentication process in "
                    f"{settings.auth_timeout_seconds // 60:.0f} minutes."
                ),
                view=None,
            )
            return
        except SenderDroppedError:
            await message.edit(content="The authentication failed, please try again.", view=None)
            return

        metadata = await self.bot.auth.query_user_metadata(token)
        # The token is only needed for this single lookup
        await self.bot.auth.revoke(token)

        try:
            VerificationService.ensure_email_domain(metadata, components.email_domain)
        except EmailDomainNotAllowedError as e:
            await message.edit(content=e.message, view=None)
            return

        level_id = await self._ask(
            message,
            author_id=member.id,
            placeholder="Select your level",
            options=[(level.name, str(level.id)) for level in components.levels],
        )
        if level_id is None:
            await message.edit(content="You did not answer in time.", view=None)
            return

        async with get_session() as session:
            classes = await ClassService(session).get_classes(level_id)
        if not classes:
            await message.edit(content="There are no classes in this level yet.", view=None)
            return

        class_id = await self._ask(
            message,
            author_id=member.id,
            placeholder="Select your class",
            options=[(school_class.name, str(school_class.id)) for school_class in classes],
        )
        if class_id is None:
            await message.edit(content="You did not answer in time.", view=None)
            return

        await self._apply_login(
            guild,
            member,
            components=components,
            metadata=metadata,
            level_id=level_id,
            class_id=class_id,
        )
        await message.edit(content="Authentication successful!", view=None)

    async def _apply_login(
        self,
        guild: discord.Guild,
        member: discord.Member,
        *,
        components: LoginComponents,
        metadata: GoogleUserMetadata,
        level_id: int,
        class_id: int,
    ) -> None:
        async with get_session() as session:
            roles = await self._collect_login_roles(
                session, guild, components.verified_role_id, level_id, class_id
            )

        # The member is only saved as verified once every role is given
        await member.add_roles(*roles, reason="Google account verified")

        async with get_session() as session:
            await VerificationService(session).link_member(
                guild_id=guild.id,
                discord_id=member.id,
                metadata=metadata,
                email_domain=components.email_domain,
                class_id=class_id,
            )

    async def _collect_login_roles(
        self,
        session: AsyncSession,
        guild: discord.Guild,
        verified_role_id: int,
        level_id: int,
        class_id: int,
    ) -> list[discord.Role]:
        """Resolve the roles to give, dropping settings whose role was deleted."""
        level = await LevelService(session).get_level(level_id)
        school_class = await ClassService(session).get_class(class_id)
        if level is None or school_class is None:
            msg = "This level or class was just deleted, please login again."
            raise RoleDeletedError(msg)

        try:
            verified_role = self._resolve_role(guild, verified_role_id, name="verified")
        except RoleDeletedError:
            await GuildService(session).set_verified_role(guild.id, None)
            raise
        try:
            level_role = self._resolve_role(guild, level.role_id, name=f"{level.name} level")
        except RoleDeletedError:
            await LevelService(session).delete_level(level.id)
            raise
        try:
            class_role = self._resolve_role(
                guild, school_class.role_id, name=f"{school_class.name} class"
            )
        except RoleDeletedError:
            await ClassService(session).delete_class(school_class.id)
            raise

        return [verified_role, level_role, class_role]

    async def logout(self, i: Interaction) -> None:
        assert i.guild is not None and isinstance(i.user, discord.Member)
        guild, member = i.guild, i.user
        await i.response.defer(ephemeral=True, thinking=True)

        async with get_session() as session:
            service = VerificationService(session)
            if await service.get_profile(guild_id=guild.id, discord_id=member.id) is None:
                await i.followup.send("Your account is not linked.", ephemeral=True)
                return

        view = ConfirmView(
            author_id=member.id,
            label="Disconnect your account",
            timeout=settings.component_timeout_seconds,
        )
        message = await i.followup.send(
            "After you disconnected your accounts, you will have to login again.",
            view=view,
            ephemeral=True,
            wait=True,
        )
        view.message = message
        await view.wait()
        if not view.confirmed:
            await message.edit(content="You did not answer in time.", view=None)
            return

        async with get_session() as session:
            profile = await VerificationService(session).unlink_member(
                guild_id=guild.id, discord_id=member.id
            )
            db_guild: Guild | None = await GuildService(session).get_guild(guild.id)

        if profile is not None:
            role_ids = [profile.level.role_id, profile.school_class.role_id]
            if db_guild is not None and db_guild.verified_role_id is not None:
                role_ids.append(db_guild.verified_role_id)
            roles = [role for role_id in role_ids if (role := guild.get_role(role_id)) is not None]
            await member.remove_roles(*roles, reason="Google account unlinked")
            logger.info(f"{member.name} ({member.id}) logged out of {guild.name}")

        await message.edit(content="Your accounts are no longer linked.", view=None)


async def setup(bot: SMPBot) -> None:
    await bot.add_cog(VerificationCog(bot))
