"""
Pytest configuration and fixtures for PodcastHub tests.

This module runs before any test imports, setting up the test environment.
Environment variables are explicitly set to ensure deterministic test behavior
regardless of external environment configuration.
"""

import os
import tempfile
from unittest.mock import Mock

import pytest

# Minimum length for JWT secret key (32 bytes for HS256)
_MIN_JWT_SECRET_LENGTH = 32

# Test JWT secret that meets minimum length requirements
_TEST_JWT_SECRET = "test-jwt-secret-key-for-pytest-minimum-32-chars"

# Force DEV_MODE for tests - ensures consistent behavior
os.environ["DEV_MODE"] = "true"

# Force JWT_SECRET_KEY to a compliant test value
# Overwrite if missing or shorter than required minimum
current_secret = os.environ.get("JWT_SECRET_KEY", "")
if len(current_secret) < _MIN_JWT_SECRET_LENGTH:
    os.environ["JWT_SECRET_KEY"] = _TEST_JWT_SECRET

# The shared limiter reads this at import time
os.environ["RATE_LIMIT_ENABLED"] = "false"

# src.web.app builds its repository at import time; keep it out of the checkout
_APP_DB_DIR = tempfile.mkdtemp(prefix="podcasthub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_APP_DB_DIR, 'app.db')}"
os.environ["DB_CREATE_TABLES"] = "true"
os.environ["COOKIE_SECURE"] = "false"
os.environ.pop("ADMIN_PASSWORD", None)

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.db.factory import create_repository  # noqa: E402
from src.web.auth import SESSION_COOKIE, create_access_token  # noqa: E402
from src.web.errors import register_error_handlers  # noqa: E402
from src.web.rate_limit import limiter  # noqa: E402


@pytest.fixture
def repository(tmp_path):
    """
    Create a temporary SQLite-backed repository for tests.

    Yields a repository using a SQLite file under the temporary path and
    closes it when the fixture is torn down.
    """
    db_path = tmp_path / "test.db"
    repo = create_repository(f"sqlite:///{db_path}", create_tables=True)
    yield repo
    repo.close()


@pytest.fixture
def mock_config():
    """Create mock config with the settings routes read."""
    config = Mock()
    config.JWT_SECRET_KEY = _TEST_JWT_SECRET
    config.JWT_ALGORITHM = "HS256"
    config.JWT_EXPIRATION_DAYS = 7
    config.COOKIE_SECURE = False
    config.COOKIE_DOMAIN = None
    config.WEB_BASE_URL = ""
    config.HTTP_TIMEOUT_SECONDS = 5.0
    config.ADMIN_USERNAME = "admin"
    config.ADMIN_EMAIL = "admin@podcasthub.local"
    config.ADMIN_PASSWORD = ""
    return config


@pytest.fixture
def make_user(repository):
    """
    Factory creating users directly in the repository.

    The stored hash is not a valid bcrypt hash, so these users cannot log
    in with a password; tests authenticate them with `auth_headers`.
    """
    counter = {"n": 0}

    def _make_user(role="CREATOR", **kwargs):
        counter["n"] += 1
        n = counter["n"]
        kwargs.setdefault("username", f"user{n}")
        kwargs.setdefault("email", f"user{n}@example.com")
        kwargs.setdefault("password_hash", "not-a-bcrypt-hash")
        return repository.create_user(role=role, **kwargs)

    return _make_user


@pytest.fixture
def auth_headers(mock_config):
    """Build request headers carrying a session cookie for a user."""
    def _auth_headers(user):
        token = create_access_token(
            {"sub": user.id, "username": user.username, "role": user.role}, mock_config
        )
        return {"Cookie": f"{SESSION_COOKIE}={token}"}

    return _auth_headers


@pytest.fixture
def make_client(repository, mock_config):
    """Build a TestClient for an app containing the given routers."""
    def _make_client(*routers):
        app = FastAPI()
        register_error_handlers(app)
        for router in routers:
            app.include_router(router)
        app.state.config = mock_config
        app.state.repository = repository
        app.state.limiter = limiter
        return TestClient(app, raise_server_exceptions=False)

    return _make_client


@pytest.fixture
def make_podcast(repository):
    """Factory creating approved public podcasts unless told otherwise."""
    def _make_podcast(owner, **kwargs):
        kwargs.setdefault("title", "Test Podcast")
        kwargs.setdefault("description", "A test podcast")
        kwargs.setdefault("status", "APPROVED")
        kwargs.setdefault("visibility", "PUBLIC")
        return repository.create_podcast(owner_id=owner.id, **kwargs)

    return _make_podcast


@pytest.fixture
def make_episode(repository):
    """Factory creating approved public episodes with an audio URL unless told otherwise."""
    def _make_episode(podcast, **kwargs):
        kwargs.setdefault("title", "Episode")
        kwargs.setdefault("notes", "Show notes")
        kwargs.setdefault("audio_url", "https://cdn.example.com/audio.mp3")
        kwargs.setdefault("audio_file_size", 1234)
        kwargs.setdefault("status", "APPROVED")
        kwargs.setdefault("visibility", "PUBLIC")
        return repository.create_episode(podcast_id=podcast.id, **kwargs)

    return _make_episode
