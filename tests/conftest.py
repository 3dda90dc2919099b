import os

# Settings are read when `app.core.config` is first imported
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DISCORD_BOT_TOKEN", "discord-token")
os.environ.setdefault("SERVER_URL", "smp-link.example.com")
os.environ.setdefault("GOOGLE_CLIENT_ID", "client-id.apps.googleusercontent.com")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "client-secret")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from app.auth.google import GoogleAuth  # noqa: E402
from app.auth.registry import PendingRegistry  # noqa: E402
from app.models import guild, level, member, school_class, verified_member  # noqa: E402, F401
from tests.auth_helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> PendingRegistry:
    return PendingRegistry(clock=clock)


@pytest.fixture
def auth(registry: PendingRegistry, clock: FakeClock) -> GoogleAuth:
    return GoogleAuth(
        client_id="client-id.apps.googleusercontent.com",
        client_secret="client-secret",
        server_url="smp-link.example.com",
        registry=registry,
        clock=clock,
    )


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session
