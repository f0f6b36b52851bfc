"""
Pytest configuration.

Every test gets its own SQLite file (aiosqlite) with the full schema,
and the app's `get_db` dependency is pointed at it. Env vars are set before
anything under `app` is imported, since settings are read at import time.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database import Base, get_db
from app.core.security import hash_password
from app.main import app
from app.models import AuthSession, Role, Student, User, VisualPasswordType


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ── Factories ─────────────────────────────────────────────────────────

@pytest.fixture
def make_user(session_factory):
    async def _make_user(
        *,
        role: Role = Role.TEACHER,
        email: str | None = "teacher@example.com",
        password: str | None = "secret123",
        active: bool = True,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        async with session_factory() as s:
            user = User(
                email=email,
                password_hash=hash_password(password) if password else None,
                role=role,
                active=active,
                first_name=first_name,
                last_name=last_name,
            )
            s.add(user)
            await s.commit()
            return user

    return _make_user


@pytest.fixture
def make_student(session_factory):
    async def _make_student(
        *,
        password_type: VisualPasswordType | None = VisualPasswordType.ANIMAL,
        data: dict | None = None,
        active: bool = True,
        first_name: str = "Sam",
    ) -> Student:
        async with session_factory() as s:
            user = User(
                email=None,
                password_hash=None,
                role=Role.STUDENT,
                active=active,
                first_name=first_name,
                last_name="Student",
            )
            s.add(user)
            await s.flush()
            student = Student(
                id=user.id,
                visual_password_type=password_type,
                visual_password_data={"animal": "cat"} if data is None else data,
            )
            s.add(student)
            await s.commit()
            return student

    return _make_student


@pytest.fixture
def insert_session(session_factory):
    """Insert a session row directly, e.g. one that expired yesterday."""
    async def _insert(user_id, *, token: str = "tok-" + "x" * 40, expires_in: timedelta = timedelta(days=7)):
        now = datetime.now(timezone.utc)
        async with session_factory() as s:
            s.add(AuthSession(id=token, user_id=user_id, expires_at=now + expires_in, created_at=now, updated_at=now))
            await s.commit()
        return token

    return _insert


@pytest.fixture
def session_row(session_factory):
    async def _row(token: str):
        async with session_factory() as s:
            return await s.get(AuthSession, token)

    return _row


@pytest.fixture
def login_as(client, make_user):
    """Create a staff user, log in through the API, return (user, token)."""
    async def _login_as(role: Role = Role.TEACHER, email: str | None = None):
        email = email or f"{role.value}@example.com"
        user = await make_user(role=role, email=email, password="pw-" + role.value)
        resp = await client.post("/api/auth/login", json={"email": email, "password": "pw-" + role.value})
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return user, session_cookie(resp)

    return _login_as


# ── Helpers ───────────────────────────────────────────────────────────

def session_cookie(resp: httpx.Response) -> str | None:
    """Value of the session-id Set-Cookie on a response ("" when cleared)."""
    for header in resp.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == "session-id":
            return rest.split(";", 1)[0].strip().strip('"')
    return None


def auth_headers(token: str) -> dict:
    return {"Cookie": f"session-id={token}"}
