"""
Shared pytest fixtures.
Every test gets its own SQLite database file.
"""

import pytest
from fastapi.testclient import TestClient

from backend.config import ConfigManager, Settings
from backend.database import ConfigDAO, Database
from backend.main import app, get_config_manager, get_db, study_sessions


@pytest.fixture
def test_db(tmp_path):
    """Provide a clean Database instance for tests."""
    db = Database(f"sqlite:///{tmp_path / 'study_cards_test.db'}")
    yield db
    db.engine.dispose()


@pytest.fixture
def db(test_db):
    """Alias for test_db."""
    return test_db


@pytest.fixture
def config_manager(test_db):
    """Config manager backed by the test database, algorithm enabled by default."""
    return ConfigManager(config_dao=ConfigDAO(test_db), settings=Settings(algorithm_enabled=True))


@pytest.fixture
def test_client(test_db, config_manager):
    """Create a test client using the test database."""
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_config_manager] = lambda: config_manager

    with TestClient(app) as client:
        yield client

    # Cleanup
    app.dependency_overrides.clear()
    study_sessions.clear()
