import os, sys
import tempfile
import pytest
from fastapi.testclient import TestClient

# Ensure app import path
backend_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_root not in sys.path:
    sys.path.insert(0, backend_root)

# Point the app at a throwaway SQLite file before anything imports config
_db_dir = tempfile.mkdtemp(prefix="familyhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{os.path.join(_db_dir, 'test.db')}"

from familyhub.main import app  # noqa: E402
from familyhub.db.session import engine, Base, SessionLocal  # noqa: E402
from familyhub.services.calendar_service import get_event_cache  # noqa: E402


@pytest.fixture(autouse=True)
def reset_event_cache():
    get_event_cache().invalidate()
    yield
    get_event_cache().invalidate()


@pytest.fixture(scope="function")  # fresh DB per test
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestClient(app)


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _login(client, email: str, password: str = "pass123") -> dict:
    """Obtain a bearer token (auto-registers the user); returns auth headers."""
    r = client.post('/auth/token', data={'username': email, 'password': password}, headers={'Content-Type': 'application/x-www-form-urlencoded'})
    assert r.status_code == 200, r.text
    return {'Authorization': f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def login(client):
    return lambda email, password="pass123": _login(client, email, password)


@pytest.fixture
def real_headers(login):
    return login('real-user@example.com')
