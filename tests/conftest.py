# tests/conftest.py

import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ALEMBIC_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("JWT_EXPIRATION_MINUTES", "60")

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from src.auth.tokens import create_access_token
from src.common.database.database import get_db_session
from src.common.utils import global_functions
from src.main import app
from src.models.models import Base, Doctor, SystemSetting, User, UserRole
from src.modules.queue import events


class FakeClock:
    """Strictly increasing naive UTC clock, one second per reading."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    fake = FakeClock(datetime(2026, 3, 2, 9, 0, 0))
    monkeypatch.setattr(global_functions, "utcnow", fake)
    return fake


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'queue.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    async def _make_user(role: UserRole = UserRole.PATIENT, full_name: str = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"{role.value}{n}@clinic.test",
            username=f"{role.value}{n}",
            full_name=full_name or f"{role.value.title()} {n}",
            role=role,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_doctor(session, make_user):
    async def _make_doctor(approved: bool = True, active: bool = True, full_name: str = None) -> User:
        user = await make_user(UserRole.DOCTOR, full_name=full_name)
        session.add(Doctor(user_id=user.id, specialty="Family Medicine", is_approved=approved, is_active=active))
        await session.commit()
        return user

    return _make_doctor


@pytest.fixture
def set_flags(session):
    async def _set_flags(**values):
        for key, value in values.items():
            existing = await session.get(SystemSetting, key)
            if existing is None:
                session.add(SystemSetting(key=key, value=value))
            else:
                existing.value = value
        await session.commit()

    return _set_flags


@pytest.fixture
def captured_events():
    received = []
    listener = events.subscribe(received.append)
    yield received
    events.unsubscribe(listener)


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _auth_headers
