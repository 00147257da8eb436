"""Test fixtures and configuration."""

import os
import re
from datetime import timezone

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.core.deps import get_notifier  # noqa: E402
from app.core.exceptions import NotifierError  # noqa: E402
from app.main import app  # noqa: E402
from app.services.notifier import Notifier  # noqa: E402
from app import models  # noqa: E402,F401

OTP_PATTERN = re.compile(r"OTP\) is: (\d+)")


class RecordingNotifier(Notifier):
    """Notifier double that keeps every message instead of sending it."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to_email, subject, body, html=None):
        if self.fail:
            raise NotifierError()
        self.sent.append({"to": to_email, "subject": subject, "body": body, "html": html})

    def last_otp(self, email: str) -> str:
        for message in reversed(self.sent):
            if message["to"] == email:
                return OTP_PATTERN.search(message["body"]).group(1)
        raise AssertionError(f"no OTP sent to {email}")


def as_utc(value):
    """SQLite hands timestamps back without tzinfo; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    """HTTP client against the app with the test database and notifier."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def sign_in(client, notifier, email="alice@example.com", name="Alice") -> dict:
    """Run the OTP flow and return the verify response body."""
    response = await client.post("/api/v1/otp", json={"name": name, "email": email})
    assert response.status_code == 200, response.text
    otp = notifier.last_otp(email.strip().lower())
    response = await client.post("/api/v1/otp/verify", json={"email": email, "otp": otp})
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token_body: dict) -> dict:
    return {"Authorization": f"Bearer {token_body['access_token']}"}


@pytest_asyncio.fixture
async def alice(client, notifier):
    return auth_headers(await sign_in(client, notifier, "alice@example.com", "Alice"))


@pytest_asyncio.fixture
async def bob(client, notifier):
    return auth_headers(await sign_in(client, notifier, "bob@example.com", "Bob"))
