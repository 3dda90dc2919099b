from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RoleDeletedError
from app.schemas.auth import GoogleUserMetadata
from app.services.guild import GuildService
from app.services.level import LevelService
from app.services.member import MemberService
from app.services.school_class import ClassService
from app.services.verification import LoginComponents, VerificationService
from bot.cogs.verification import VerificationCog

GUILD_ID = 1_100_000_000_000_000_001
DISCORD_ID = 2_200_000_000_000_000_002
METADATA = GoogleUserMetadata(mail="jane.doe@school.example", first_name="Jane", last_name="Doe")


@pytest_asyncio.fixture
async def login(
    db_session: AsyncSession, db_engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch
) -> tuple[LoginComponents, int]:
    guilds = GuildService(db_session)
    await guilds.create_guild(guild_id=GUILD_ID, name="School", owner_id=1)
    await guilds.set_verified_role(GUILD_ID, 10)
    await guilds.set_email_domain(GUILD_ID, "school.example")
    await MemberService(db_session).create_member(
        guild_id=GUILD_ID, discord_id=DISCORD_ID, username="jane"
    )
    level = await LevelService(db_session).create_level(guild_id=GUILD_ID, name="First", role_id=20)
    school_class = await ClassService(db_session).create_class(level=level, name="B2", role_id=30)
    components = await VerificationService(db_session).check_login_components(GUILD_ID)
    # The cog opens its own sessions, sqlite only allows one writer
    await db_session.close()

    monkeypatch.setattr(
        "bot.cogs.verification.get_session",
        lambda: AsyncSession(db_engine, expire_on_commit=False),
    )
    return components, school_class.id


def _guild(*role_ids: int) -> SimpleNamespace:
    roles = {role_id: discord.Object(role_id) for role_id in role_ids}
    return SimpleNamespace(id=GUILD_ID, get_role=roles.get)


async def _apply_login(
    login: tuple[LoginComponents, int], guild: SimpleNamespace, member: SimpleNamespace
) -> None:
    components, class_id = login
    cog = VerificationCog(SimpleNamespace())
    await cog._apply_login(
        guild,
        member,
        components=components,
        metadata=METADATA,
        level_id=components.levels[0].id,
        class_id=class_id,
    )


@pytest.mark.asyncio
async def test_login_gives_roles_then_saves_the_member(
    login: tuple[LoginComponents, int], db_session: AsyncSession
) -> None:
    member = SimpleNamespace(id=DISCORD_ID, add_roles=AsyncMock())

    await _apply_login(login, _guild(10, 20, 30), member)

    roles = member.add_roles.await_args.args
    assert [role.id for role in roles] == [10, 20, 30]
    assert await MemberService(db_session).is_verified(guild_id=GUILD_ID, discord_id=DISCORD_ID)


@pytest.mark.asyncio
async def test_member_is_not_saved_when_roles_cannot_be_given(
    login: tuple[LoginComponents, int], db_session: AsyncSession
) -> None:
    forbidden = discord.Forbidden(
        SimpleNamespace(status=403, reason="Forbidden"), "Missing Permissions"
    )
    member = SimpleNamespace(id=DISCORD_ID, add_roles=AsyncMock(side_effect=forbidden))

    with pytest.raises(discord.Forbidden):
        await _apply_login(login, _guild(10, 20, 30), member)

    assert not await MemberService(db_session).is_verified(
        guild_id=GUILD_ID, discord_id=DISCORD_ID
    )


@pytest.mark.asyncio
async def test_deleted_verified_role_clears_the_setting(
    login: tuple[LoginComponents, int], db_session: AsyncSession
) -> None:
    member = SimpleNamespace(id=DISCORD_ID, add_roles=AsyncMock())

    with pytest.raises(RoleDeletedError, match="verified role was deleted"):
        await _apply_login(login, _guild(20, 30), member)

    member.add_roles.assert_not_awaited()
    guild = await GuildService(db_session).get_guild(GUILD_ID)
    assert guild is not None
    assert guild.verified_role_id is None
    assert not await MemberService(db_session).is_verified(
        guild_id=GUILD_ID, discord_id=DISCORD_ID
    )
