import os
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data" / "test"))
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_JSON", "false")

from staffdesk.client.http import ApiClient
from staffdesk.client.storage import MemoryStorage
from staffdesk.core.config import settings
from staffdesk.crud.users import create_user
from staffdesk.db.session import make_engine, make_session_factory
from staffdesk.main import create_app

BASE_URL = "http://testserver"
ADMIN_PASSWORD = "admin-pass"
EMPLOYEE_PASSWORD = "secret1"


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path)
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")
    return tmp_path


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def app(engine, session_factory):
    return create_app(bind=engine, session_factory=session_factory, instrument=False)


@pytest.fixture()
def db_session(app, session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin_user(db_session):
    return create_user(
        db_session,
        {
            "name": "Ada Admin",
            "email": "ada@staffdesk.io",
            "password": ADMIN_PASSWORD,
            "role": "admin",
            "department": "Operations",
            "position": "Manager",
        },
    )


@pytest.fixture()
def employee_user(db_session):
    return create_user(
        db_session,
        {
            "name": "Eli Employee",
            "email": "eli@staffdesk.io",
            "password": EMPLOYEE_PASSWORD,
            "role": "employee",
            "department": "Field",
            "position": "Technician",
        },
    )


@pytest.fixture()
def make_client(app):
    """Build an ``ApiClient`` wired to the in-process app.

    Call it inside the coroutine under test so the underlying transport lives
    on the running loop.
    """

    def _make(storage=None):
        return ApiClient(
            storage if storage is not None else MemoryStorage(),
            base_url=BASE_URL,
            transport=httpx.ASGITransport(app=app),
        )

    return _make
