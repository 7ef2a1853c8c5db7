import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from woldecks.app import create_app
from woldecks.auth.engine import AuthorizationEngine
from woldecks.auth.passwords import MIN_ITERATIONS, hash_admin_password
from woldecks.auth.store import MemoryTokenStore
from woldecks.config import Settings

ADMIN_PASSWORD = "correct horse battery staple"
PEPPER = "test-pepper"


class FakeClock:
    """Manually advanced stand-in for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock) -> MemoryTokenStore:
    return MemoryTokenStore(clock=clock)


@pytest.fixture()
def engine(store, clock) -> AuthorizationEngine:
    return AuthorizationEngine(
        store, PEPPER, admin_ttl=86400, view_ttl=3600, pbkdf2_iterations=MIN_ITERATIONS, clock=clock
    )


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    return Settings(
        posts_path=data_dir / "posts.json",
        admin_password_hash=hash_admin_password(ADMIN_PASSWORD),
        secret_key="test-secret-key",
        token_pepper=PEPPER,
        admin_ttl=86400,
        view_ttl=3600,
        pbkdf2_iterations=MIN_ITERATIONS,
    )


@pytest.fixture()
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_post(client):
    def _make(password: str = "swordfish", title: str = "Hello", content: str = "First post") -> str:
        r = client.post(
            "/api/posts",
            json={"title": title, "author": "anon", "content": content, "password": password},
        )
        assert r.status_code == 201, r.text
        return r.json()["id"]

    return _make
