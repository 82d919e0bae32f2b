import pytest
from fastapi.testclient import TestClient

from playlist_api.api.main import create_app
from playlist_api.core.config import Settings, get_settings


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATA_DIR=tmp_path / "data",
        UPLOADS_DIR=tmp_path / "uploads",
        DATABASE_URL=f"sqlite:///{(tmp_path / 'db' / 'test.sqlite3').as_posix()}",
        SESSION_SECRET="test-secret",
        YOUTUBE_API_KEY="",
        REQUEST_LOGGING_ENABLED=True,
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer env vars and the cached settings out of tests."""
    for name in ("STORAGE_BACKEND", "DATABASE_URL", "YOUTUBE_API_KEY", "API_PREFIX", "SESSION_SECRET"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(params=["json", "database"])
def settings(request, tmp_path):
    return make_settings(tmp_path, STORAGE_BACKEND=request.param)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def register(client, username="alice", password="s3cret!", first_name="Alice", image_url="https://img.example/a.png"):
    return client.post(
        "/api/register",
        json={"username": username, "password": password, "firstName": first_name, "imageUrl": image_url},
    )


def login(client, username="alice", password="s3cret!"):
    return client.post("/api/login", json={"username": username, "password": password})


@pytest.fixture
def user_client(client):
    """A client holding a session cookie for user "alice"."""
    assert register(client).status_code == 201
    assert login(client).status_code == 200
    return client


@pytest.fixture
def playlist(user_client):
    r = user_client.post("/api/playlists", json={"name": "Road trip"})
    assert r.status_code == 201
    return r.json()["playlist"]
