from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homelab.errors import UpstreamStatusError
from homelab.models import Base
from homelab.services.fetcher import FetchResponse

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubFetcher:
    """Stands in for BoundedFetcher: replays canned outcomes and records every URL."""

    def __init__(self):
        self.outcomes: dict[str, FetchResponse | Exception] = {}
        self.calls: list[str] = []

    def respond(self, url, content=b"", content_type="", status_code=200):
        headers = {"content-type": content_type} if content_type else {}
        self.outcomes[url] = FetchResponse(
            url=url, status_code=status_code, content=content, headers=headers
        )

    def fail(self, url, exc):
        self.outcomes[url] = exc

    async def get(self, url):
        self.calls.append(url)
        outcome = self.outcomes.get(url)
        if outcome is None:
            raise UpstreamStatusError(url, 404)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_fetcher():
    return StubFetcher()
