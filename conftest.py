"""
Shared pytest fixtures: an in-memory browser session and session manager.

No browser or network is used; pages are AsyncMocks whose goto can be made to
fail per URL.
"""

from __future__ import annotations

from typing import Optional
from unittest.mock import AsyncMock

import pytest

from worker.capture import StealthLauncher
from worker.pause_registry import PauseRegistry


class FakeSession:
    """Records page lifecycle so tests can check ordering and cleanup."""

    kind = "fake"

    def __init__(self, goto_errors: Optional[dict] = None):
        self.goto_errors = goto_errors or {}
        self.pages: list = []
        self.released: list = []
        self.close_calls = 0
        self.active = 0
        self.max_active = 0
        self.timeline: list = []

    async def new_page_for(self, mode):
        self.active += 1
        self.max_active = max(self.max_active, self.active)

        page = AsyncMock()
        page.viewport_mode = mode

        def goto(url, **kwargs):
            self.timeline.append(("goto", url, mode.name))
            if url in self.goto_errors:
                raise self.goto_errors[url]

        page.goto = AsyncMock(side_effect=goto)
        self.pages.append(page)
        return page

    async def release_page(self, page):
        self.active -= 1
        self.released.append(page)
        self.timeline.append(("release", page.viewport_mode.name))

    async def close(self):
        self.close_calls += 1


class FakeSessionManager:
    def __init__(self, session: Optional[FakeSession] = None, open_error: Optional[Exception] = None):
        self.session = session or FakeSession()
        self.open_error = open_error
        self.opened: list[bool] = []
        self.launcher = StealthLauncher(capable=False, degraded_reason="test")

    async def open(self, stealth: bool):
        self.opened.append(stealth)
        if self.open_error is not None:
            raise self.open_error
        return self.session


@pytest.fixture
def make_session_manager():
    """Build a FakeSessionManager; kwargs go to FakeSession unless open_error is given."""

    def _make(open_error: Optional[Exception] = None, **session_kwargs) -> FakeSessionManager:
        return FakeSessionManager(FakeSession(**session_kwargs), open_error=open_error)

    return _make


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_session_manager(fake_session) -> FakeSessionManager:
    return FakeSessionManager(fake_session)


@pytest.fixture
def registry() -> PauseRegistry:
    return PauseRegistry()


@pytest.fixture(autouse=True)
def fast_capture(monkeypatch):
    """Skip the scroll and settle delay in runner-level tests."""
    prepare = AsyncMock()
    monkeypatch.setattr("worker.runner.prepare_for_capture", prepare)
    return prepare


@pytest.fixture
def downloads_dir(tmp_path):
    path = tmp_path / "Downloads"
    return str(path)


@pytest.fixture
def mock_page():
    page = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    return page

