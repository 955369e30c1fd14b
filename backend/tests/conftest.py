import pytest

from backend.cfo_helper import create_app
from backend.cfo_helper.config import TestingConfig
from backend.cfo_helper.database import db
from backend.cfo_helper.services.kv_store import KVStore
from backend.cfo_helper.services.usage import UsageTracker


@pytest.fixture
def in_memory_app():
    """Create a throw-away Flask application backed by an in-memory SQLite DB."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        # Clean up — remove the session/engine to not leak state between tests
        db.session.remove()


@pytest.fixture
def client(in_memory_app):
    return in_memory_app.test_client()


@pytest.fixture
def store(in_memory_app):
    return KVStore()


@pytest.fixture
def usage(store):
    return UsageTracker(store)
