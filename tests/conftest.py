"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``portfolio_api`` import so the
module-level settings instance picks them up.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_AUTH_JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("APP_AUTH_ADMIN_SUBJECTS", "owner-uid,owner@example.com")
os.environ.setdefault("APP_CORS_ALLOWED_ORIGINS", "https://portfolio.example.com")
os.environ.setdefault("APP_STORE_BACKEND", "memory")
os.environ.setdefault("APP_TRUST_FORWARDED_FOR", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from portfolio_api.adapters.media.local import LocalMediaStorage
from portfolio_api.adapters.store.in_memory import InMemoryDocumentStore
from portfolio_api.core.app_factory import create_app
from portfolio_api.core.auth import issue_admin_token

NOW = 1_760_000_000.0
SITE_ORIGIN = "https://portfolio.example.com"


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX-time clock shared by the store and the rate limiter."""
    return Mock(return_value=NOW)


@pytest.fixture
def store(clock: Mock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def media(tmp_path, clock: Mock) -> LocalMediaStorage:
    return LocalMediaStorage(tmp_path / "media", base_url="https://cdn.example.com/media", clock=clock)


@pytest.fixture
def app(store, media, clock):
    return create_app(store=store, media=media, clock=clock, configure_logs=False)


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers carrying a valid admin bearer token."""
    return {"Authorization": f"Bearer {issue_admin_token('owner-uid', email='owner@example.com')}"}


@pytest.fixture
def project_payload() -> dict:
    return {
        "title": "Weather Station",
        "description": "Solar powered weather station.",
        "fullDescription": "An ESP32 based station streaming readings to a dashboard.",
        "thumbnail": "https://cdn.example.com/media/projects/station.jpg",
        "images": ["https://cdn.example.com/media/projects/station-2.jpg"],
        "technologies": ["Python", "FastAPI"],
        "category": "IoT",
        "liveUrl": "https://weather.example.com",
        "githubUrl": "https://github.com/example/weather",
        "featured": True,
        "published": True,
        "order": 1,
    }


@pytest.fixture
def contact_payload() -> dict:
    return {
        "name": "Ada",
        "email": "ada@example.com",
        "subject": "Hi",
        "message": "This message is long enough to pass validation.",
    }
