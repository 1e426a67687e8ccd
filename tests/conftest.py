import pytest
from fastapi.testclient import TestClient

from roomchat.config import Settings
from roomchat.database import build_engine, build_session_factory, create_tables
from roomchat.main import create_app
from roomchat.models import User


@pytest.fixture
def settings(tmp_path):
    test_settings = Settings()
    test_settings.DATABASE_URL = f"sqlite+aiosqlite:///{tmp_path / 'roomchat.db'}"
    test_settings.ALLOWED_ORIGINS = ["*"]
    return test_settings


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
async def db(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def make_user(db):
    """Insert a user row directly, skipping password hashing. Returns the id."""

    async def _make_user(username: str) -> int:
        user = User(username=username, password_hash="not-a-real-hash")
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user.id

    return _make_user


def register_and_login(client, username, password="password1", user_agent="pytest"):
    response = client.post("/api/v1/account/register", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    response = client.post(
        "/api/v1/account/login",
        json={"username": username, "password": password},
        headers={"User-Agent": user_agent},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return data["user_id"], {"Authorization": f"Bearer {data['token']}"}
