import itertools
import os
from datetime import date
from unittest.mock import AsyncMock

# Settings are read at import time
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NOTIFIER_URL", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from userservice import models  # noqa: F401
from userservice.core.database import Base, enable_sqlite_foreign_keys, get_db
from userservice.core.notifier import NotifierService, get_notifier
from userservice.main import app
from userservice.schemas.user import Gender, UserCreate
from userservice.services.user import UserService


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database for every test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    mock = AsyncMock(spec=NotifierService)
    mock.notify_friend_request.return_value = True
    return mock


@pytest.fixture
def make_user(db):
    """Register users with unique uid/email unless given explicitly"""
    counter = itertools.count(1)

    async def _make(uid=None, nickname=None, email=None):
        n = next(counter)
        return await UserService(db).register(
            UserCreate(
                uid=uid or f"U{n}",
                nickname=nickname or f"user{n}",
                email=email or f"user{n}@x.com",
                gender=Gender.FEMALE,
                date_of_birth=date(1995, 5, 17),
            )
        )

    return _make


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_notifier():
        return notifier

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = override_get_notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
