from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.exceptions import EmailDomainNotAllowedError, LoginSetupError, UserFacingError
from app.models.level import Level
from app.models.member import Member
from app.models.school_class import Class
from app.models.verified_member import VerifiedMember
from app.schemas.auth import GoogleUserMetadata
from app.services.guild import GuildService
from app.services.level import LevelService
from app.services.member import MemberService
from app.utils.misc import email_domain_allowed


@dataclass(frozen=True, kw_only=True)
class LoginComponents:
    """Everything a guild must have configured before members can log in."""

    verified_role_id: int
    email_domain: str
    levels: Sequence[Level]


@dataclass(frozen=True, kw_only=True)
class VerifiedProfile:
    verified: VerifiedMember
    school_class: Class
    level: Level


class VerificationService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def check_login_components(self, guild_id: int) -> LoginComponents:
        """Raises LoginSetupError if the guild is not ready for logins."""
        guild = await GuildService(self.db).get_guild(guild_id)
        if guild is None:
            msg = "This server is not registered yet, please contact an administrator."
            raise LoginSetupError(msg)
        if guild.verified_role_id is None:
            msg = "Verified role has not been setup yet"
            raise LoginSetupError(msg)
        if guild.verification_email_domain is None:
            msg = "Email pattern has not been setup yet"
            raise LoginSetupError(msg)

        levels = await LevelService(self.db).get_levels(guild_id)
        if not levels:
            msg = "No levels found in this guild"
            raise LoginSetupError(msg)

        return LoginComponents(
            verified_role_id=guild.verified_role_id,
            email_domain=guild.verification_email_domain,
            levels=levels,
        )

    @staticmethod
    def ensure_email_domain(metadata: GoogleUserMetadata, domain: str) -> None:
        if not email_domain_allowed(metadata.mail, domain):
            logger.info(f"Rejected {metadata.mail}, not in domain {domain}")
            raise EmailDomainNotAllowedError(domain)

    async def link_member(
        self,
        *,
        guild_id: int,
        discord_id: int,
        metadata: GoogleUserMetadata,
        email_domain: str,
        class_id: int,
    ) -> VerifiedMember:
        """Save the Google identity of a member.

        Raises:
            EmailDomainNotAllowedError: Before touching the database if the mail is
                outside of `email_domain`.
            UserFacingError: If the member is unknown or already verified.
        """
        self.ensure_email_domain(metadata, email_domain)

        members = MemberService(self.db)
        member = await members.get_member(guild_id=guild_id, discord_id=discord_id)
        if member is None:
            msg = (
                f"<@{discord_id}> is not registered in this server, "
                "please contact an administrator."
            )
            raise UserFacingError(msg)
        if await members.is_verified(guild_id=guild_id, discord_id=discord_id):
            msg = "You are already verified."
            raise UserFacingError(msg)

        verified = VerifiedMember(
            member_id=member.id,
            first_name=metadata.first_name,
            last_name=metadata.last_name,
            mail=metadata.mail,
            class_id=class_id,
        )
        self.db.add(verified)
        await self.db.commit()
        await self.db.refresh(verified)
        logger.info(f"Verified member {discord_id} of guild {guild_id} as {metadata.mail}")
        return verified

    async def get_profile(self, *, guild_id: int, discord_id: int) -> VerifiedProfile | None:
        result = await self.db.exec(
            select(VerifiedMember, Class, Level)
            .join(Member, col(VerifiedMember.member_id) == Member.id)
            .join(Class, col(VerifiedMember.class_id) == Class.id)
            .join(Level, col(Class.level_id) == Level.id)
            .where(Member.guild_id == guild_id, Member.discord_id == discord_id)
        )
        row = result.first()
        if row is None:
            return None

        verified, school_class, level = row
        return VerifiedProfile(verified=verified, school_class=school_class, level=level)

    async def unlink_member(self, *, guild_id: int, discord_id: int) -> VerifiedProfile | None:
        """Forget the Google identity of a member, returning what was removed."""
        profile = await self.get_profile(guild_id=guild_id, discord_id=discord_id)
        if profile is None:
            return None

        await self.db.delete(profile.verified)
        await self.db.commit()
        logger.info(f"Unlinked member {discord_id} of guild {guild_id}")
        return profile
