"""
Playwright-driven capture helpers: viewport modes, browser sessions, page preparation.

Public API: re-exports the symbols used by the runner and tests so that
`from worker.capture import ...` stays the single import point.
"""

from __future__ import annotations

from worker.capture.browser import (
    BrowserSession,
    EphemeralSession,
    PersistentSession,
    SessionManager,
    StealthLauncher,
    build_stealth_launcher,
)
from worker.capture.constants import (
    NAVIGATION_TIMEOUT_MS,
    NETWORK_IDLE_TIMEOUT_MS,
    VIEWPORT_CONFIGS,
    ViewportName,
)
from worker.capture.modes import (
    VIEWPORT_MODES,
    Job,
    ViewportMode,
    build_jobs,
    make_job_id,
    resolve_modes,
)
from worker.capture.readiness import (
    auto_scroll,
    disable_animations,
    prepare_for_capture,
    wait_for_network_idle,
)

__all__ = [
    # constants
    "ViewportName",
    "VIEWPORT_CONFIGS",
    "NAVIGATION_TIMEOUT_MS",
    "NETWORK_IDLE_TIMEOUT_MS",
    # modes
    "ViewportMode",
    "VIEWPORT_MODES",
    "Job",
    "make_job_id",
    "resolve_modes",
    "build_jobs",
    # browser
    "StealthLauncher",
    "build_stealth_launcher",
    "BrowserSession",
    "EphemeralSession",
    "PersistentSession",
    "SessionManager",
    # readiness
    "wait_for_network_idle",
    "disable_animations",
    "auto_scroll",
    "prepare_for_capture",
]
