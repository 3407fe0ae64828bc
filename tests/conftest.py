"""
Shared test fixtures and configuration for mockshop tests.
"""
import base64
import json
import shutil
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from mockshop import create_app
from mockshop.config import BASE_DIR, TestConfig
from mockshop.storage import DataContext, JsonStore


# Fixture data shipped with the app
MOCK_DATA_DIR = BASE_DIR / "mock_data"

USERNAME = "tester"
PASSWORD = "s3cret"


def basic_auth(username: str = USERNAME, password: str = PASSWORD) -> dict:
    """Build an Authorization header for HTTP basic auth."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def write_fixture(fixtures_dir: Path, collection: str, content) -> Path:
    """Write a JSON fixture file for one collection."""
    fixtures_dir.mkdir(parents=True, exist_ok=True)
    path = fixtures_dir / f"{collection}.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


@pytest.fixture
def fixture_writer():
    """The write_fixture helper, for tests that build their own fixture directories."""
    return write_fixture


@pytest.fixture
def fixtures_dir(tmp_path: Path) -> Path:
    """A private copy of mock_data/ so tests can't touch the shipped fixtures."""
    target = tmp_path / "mock_data"
    shutil.copytree(MOCK_DATA_DIR, target)
    return target


@pytest.fixture
def db_dir(tmp_path: Path) -> Path:
    return tmp_path / "db"


@pytest.fixture
def context(fixtures_dir: Path, db_dir: Path) -> DataContext:
    """A data context in document store mode over the copied fixtures."""
    return DataContext(fixtures_dir, db_dir, use_document_store=True)


@pytest.fixture
def snapshot_context(fixtures_dir: Path, db_dir: Path) -> DataContext:
    return DataContext(fixtures_dir, db_dir, use_document_store=False)


@pytest.fixture
def json_store(db_dir: Path) -> JsonStore:
    """Create a JsonStore instance with temporary directory."""
    return JsonStore(db_dir)


@pytest.fixture
def app_config(fixtures_dir: Path, db_dir: Path, tmp_path: Path):
    """Test config pointed at temporary fixture, database and env-file locations."""

    class _Config(TestConfig):
        FIXTURES_DIR = fixtures_dir
        DB_DIR = db_dir
        ENV_FILE = tmp_path / ".env.local"
        USE_DOCUMENT_STORE = True
        AUTH_ENABLED = True
        API_USERNAME = USERNAME
        API_PASSWORD = PASSWORD
        ADMIN_KEY = "admin-key"

    return _Config


@pytest.fixture
def app(app_config) -> Flask:
    """Create and configure a test Flask application instance."""
    app = create_app(app_config)
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """A Flask test client that sends valid basic-auth credentials."""
    client = app.test_client()
    client.environ_base["HTTP_AUTHORIZATION"] = basic_auth()["Authorization"]
    return client


@pytest.fixture
def anon_client(app: Flask) -> FlaskClient:
    """A Flask test client without credentials."""
    return app.test_client()


@pytest.fixture
def snapshot_client(app: Flask, client: FlaskClient) -> FlaskClient:
    """Authenticated client with the app switched to static snapshot mode."""
    app.extensions["mockshop_data"].set_mode(False)
    return client
