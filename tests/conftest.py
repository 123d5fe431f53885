import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from services.media import MediaUploadError, get_media_uploader

PASSWORD = "correct-horse-battery"


class FakeUploader:
    def __init__(self):
        self.uploads = []
        self.fail = False

    async def upload(self, content, folder, filename=None, content_type=None):
        if self.fail:
            raise MediaUploadError("bucket unavailable")
        self.uploads.append((folder, filename, content_type, content))
        return f"https://media.test/{folder}/{len(self.uploads)}-{filename}"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
async def client(session_factory, uploader):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_uploader] = lambda: uploader
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns (user_id, auth headers)."""
    async def _make(username: str):
        email = f"{username}@example.com"
        r = await client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": PASSWORD},
        )
        assert r.status_code == 201, r.text
        r = await client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        body = r.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _make
