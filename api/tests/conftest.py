"""
Pytest configuration and fixtures for API tests.

Builds the app with an explicit config (temp downloads/profile dirs, no static
UI) and an in-memory session manager; the pause registry dependency is
overridden per test.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.routes.capture import get_registry
from shared.config import AppConfig


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        environment="local",
        log_level="WARNING",
        log_file=None,
        log_stdout=True,
        host="127.0.0.1",
        port=0,
        static_dir=None,
        downloads_dir=str(tmp_path / "Downloads"),
        stealth_profile_dir=str(tmp_path / "profile"),
        navigation_timeout_ms=30_000,
        network_idle_timeout_ms=15_000,
    )


@pytest.fixture
def app(app_config, fake_session_manager, registry):
    app = create_app(config=app_config, session_manager=fake_session_manager)
    app.dependency_overrides[get_registry] = lambda: registry
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
