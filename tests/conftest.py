"""Shared fixtures: an in-memory database, an HTTP test client and helpers."""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before anything imports worktime.core.config.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing")

import httpx  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from worktime.client import build_client  # noqa: E402
from worktime.client.storage import MemoryStore  # noqa: E402
from worktime.db.session import Base, SessionLocal, engine, init_db  # noqa: E402
from worktime.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    init_db()
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture
def anyio_backend():
    return "asyncio"


def register(client, email="a@b.com", password="secret1", name="Ada"):
    response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def token(client):
    return register(client)["token"]


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def redirects():
    return []


@pytest.fixture()
async def wired(store, redirects):
    """``(api, auth)`` talking to the real app in-process."""
    api, auth = build_client(
        "http://testserver",
        store=store,
        transport=httpx.ASGITransport(app=app),
        on_login_required=redirects.append,
    )
    try:
        yield api, auth
    finally:
        await api.aclose()


USER_JSON = {"id": "u-1", "email": "a@b.com", "name": "Ada", "createdAt": "2024-01-01T00:00:00.000Z"}


def session_json(**overrides):
    payload = {
        "id": "s-1",
        "name": "Write spec",
        "workType": "Deep Work",
        "startTime": "2024-05-01T09:35:00.000Z",
        "endTime": "2024-05-01T10:00:00.000Z",
        "durationSeconds": 1500,
        "projectId": None,
        "notes": None,
        "createdAt": "2024-05-01T10:00:00.100Z",
    }
    payload.update(overrides)
    return payload


def scripted_client(handler, store, redirects=None):
    """``(api, auth, seen)`` where every request is answered by ``handler``.

    ``seen`` collects the requests so tests can assert what went on the wire.
    """
    seen = []

    async def record(request):
        seen.append(request)
        result = handler(request)
        if not isinstance(result, httpx.Response):
            result = await result
        return result

    api, auth = build_client(
        "http://testserver",
        store=store,
        transport=httpx.MockTransport(record),
        on_login_required=(redirects.append if redirects is not None else None),
    )
    return api, auth, seen
