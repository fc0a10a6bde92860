# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import create_db_engine, create_session_factory, init_db
from app.main import create_app


@pytest.fixture
def make_app():
    def _make(**overrides):
        # in-memory store, ignore any local .env
        settings = Settings(_env_file=None, DATABASE_URL="sqlite://", **overrides)
        return create_app(settings)

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    db = create_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
