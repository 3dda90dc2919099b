import pytest
import pytest_asyncio
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.constants import MAX_LEVELS_PER_GUILD
from app.core.exceptions import EmailDomainNotAllowedError, LoginSetupError, UserFacingError
from app.models.level import Level
from app.models.school_class import Class
from app.models.verified_member import VerifiedMember
from app.schemas.auth import GoogleUserMetadata
from app.services.guild import GuildService
from app.services.level import LevelService
from app.services.member import MemberService
from app.services.school_class import ClassService
from app.services.verification import VerificationService
from app.utils.misc import email_domain_allowed

GUILD_ID = 1_100_000_000_000_000_001
DISCORD_ID = 2_200_000_000_000_000_002
METADATA = GoogleUserMetadata(mail="jane.doe@school.example", first_name="Jane", last_name="Doe")


@pytest_asyncio.fixture
async def school(db_session: AsyncSession) -> tuple[Level, Class]:
    guilds = GuildService(db_session)
    await guilds.create_guild(guild_id=GUILD_ID, name="School", owner_id=1)
    await guilds.set_verified_role(GUILD_ID, 10)
    await guilds.set_email_domain(GUILD_ID, "@School.Example")
    await MemberService(db_session).create_member(
        guild_id=GUILD_ID, discord_id=DISCORD_ID, username="jane"
    )

    level = await LevelService(db_session).create_level(guild_id=GUILD_ID, name="First", role_id=20)
    school_class = await ClassService(db_session).create_class(level=level, name="B2", role_id=30)
    return level, school_class


async def _verified_count(db: AsyncSession) -> int:
    return (await db.exec(select(func.count()).select_from(VerifiedMember))).one()


@pytest.mark.parametrize(
    ("mail", "domain", "expected"),
    [
        ("jane@school.example", "school.example", True),
        ("jane@School.EXAMPLE", "@school.example", True),
        ("jane@evil.example", "school.example", False),
        ("jane@school.example.evil", "school.example", False),
        ("jane@sub.school.example", "school.example", False),
        ("school.example", "school.example", False),
        ("a@b@school.example", "school.example", True),
    ],
)
def test_email_domain_allowed(mail: str, domain: str, expected: bool) -> None:
    assert email_domain_allowed(mail, domain) is expected


@pytest.mark.asyncio
async def test_unknown_guild_cannot_login(db_session: AsyncSession) -> None:
    with pytest.raises(LoginSetupError, match="not registered"):
        await VerificationService(db_session).check_login_components(GUILD_ID)


@pytest.mark.asyncio
async def test_login_components_are_checked_in_order(db_session: AsyncSession) -> None:
    guilds = GuildService(db_session)
    service = VerificationService(db_session)
    await guilds.create_guild(guild_id=GUILD_ID, name="School", owner_id=1)

    with pytest.raises(LoginSetupError, match="Verified role"):
        await service.check_login_components(GUILD_ID)

    await guilds.set_verified_role(GUILD_ID, 10)
    with pytest.raises(LoginSetupError, match="Email pattern"):
        await service.check_login_components(GUILD_ID)

    await guilds.set_email_domain(GUILD_ID, "school.example")
    with pytest.raises(LoginSetupError, match="No levels"):
        await service.check_login_components(GUILD_ID)


@pytest.mark.asyncio
@pytest.mark.parametrize("domain", ["@", "", "  @ "])
async def test_empty_email_domain_is_rejected(db_session: AsyncSession, domain: str) -> None:
    guilds = GuildService(db_session)
    await guilds.create_guild(guild_id=GUILD_ID, name="School", owner_id=1)

    with pytest.raises(UserFacingError, match="valid email domain"):
        await guilds.set_email_domain(GUILD_ID, domain)

    guild = await guilds.get_guild(GUILD_ID)
    assert guild is not None
    assert guild.verification_email_domain is None


@pytest.mark.asyncio
async def test_login_components(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    components = await VerificationService(db_session).check_login_components(GUILD_ID)

    assert components.verified_role_id == 10
    assert components.email_domain == "school.example"
    assert [level.name for level in components.levels] == ["First"]


@pytest.mark.asyncio
async def test_link_member(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    level, school_class = school
    service = VerificationService(db_session)

    verified = await service.link_member(
        guild_id=GUILD_ID,
        discord_id=DISCORD_ID,
        metadata=METADATA,
        email_domain="school.example",
        class_id=school_class.id,
    )

    assert verified.mail == "jane.doe@school.example"
    assert await MemberService(db_session).is_verified(guild_id=GUILD_ID, discord_id=DISCORD_ID)
    profile = await service.get_profile(guild_id=GUILD_ID, discord_id=DISCORD_ID)
    assert profile is not None
    assert profile.level.id == level.id
    assert profile.school_class.name == "B2"


@pytest.mark.asyncio
async def test_link_member_outside_the_domain(
    db_session: AsyncSession, school: tuple[Level, Class]
) -> None:
    _, school_class = school
    metadata = METADATA.model_copy(update={"mail": "jane@gmail.com"})

    with pytest.raises(EmailDomainNotAllowedError, match="@school.example"):
        await VerificationService(db_session).link_member(
            guild_id=GUILD_ID,
            discord_id=DISCORD_ID,
            metadata=metadata,
            email_domain="school.example",
            class_id=school_class.id,
        )

    assert await _verified_count(db_session) == 0


@pytest.mark.asyncio
async def test_link_member_twice(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    _, school_class = school
    service = VerificationService(db_session)
    kwargs = {
        "guild_id": GUILD_ID,
        "discord_id": DISCORD_ID,
        "metadata": METADATA,
        "email_domain": "school.example",
        "class_id": school_class.id,
    }
    await service.link_member(**kwargs)

    with pytest.raises(UserFacingError, match="already verified"):
        await service.link_member(**kwargs)
    assert await _verified_count(db_session) == 1


@pytest.mark.asyncio
async def test_link_unknown_member(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    _, school_class = school

    with pytest.raises(UserFacingError, match="not registered"):
        await VerificationService(db_session).link_member(
            guild_id=GUILD_ID,
            discord_id=42,
            metadata=METADATA,
            email_domain="school.example",
            class_id=school_class.id,
        )


@pytest.mark.asyncio
async def test_unlink_member(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    _, school_class = school
    service = VerificationService(db_session)
    await service.link_member(
        guild_id=GUILD_ID,
        discord_id=DISCORD_ID,
        metadata=METADATA,
        email_domain="school.example",
        class_id=school_class.id,
    )

    profile = await service.unlink_member(guild_id=GUILD_ID, discord_id=DISCORD_ID)

    assert profile is not None
    assert profile.school_class.role_id == 30
    assert await service.unlink_member(guild_id=GUILD_ID, discord_id=DISCORD_ID) is None
    assert await _verified_count(db_session) == 0


@pytest.mark.asyncio
async def test_duplicate_level_is_rejected(
    db_session: AsyncSession, school: tuple[Level, Class]
) -> None:
    with pytest.raises(UserFacingError, match="already exists"):
        await LevelService(db_session).create_level(guild_id=GUILD_ID, name="First", role_id=21)


@pytest.mark.asyncio
async def test_level_limit(db_session: AsyncSession, school: tuple[Level, Class]) -> None:
    levels = LevelService(db_session)
    for n in range(1, MAX_LEVELS_PER_GUILD):
        await levels.create_level(guild_id=GUILD_ID, name=f"Level {n}", role_id=100 + n)

    with pytest.raises(UserFacingError, match="more than"):
        await levels.create_level(guild_id=GUILD_ID, name="One too many", role_id=999)


@pytest.mark.asyncio
async def test_guild_classes_are_grouped_by_level(
    db_session: AsyncSession, school: tuple[Level, Class]
) -> None:
    level, _ = school
    classes = ClassService(db_session)
    await classes.create_class(level=level, name="A1", role_id=31)

    rows = await classes.get_guild_classes(GUILD_ID)

    assert [(c.name, lvl.name) for c, lvl in rows] == [("A1", "First"), ("B2", "First")]
