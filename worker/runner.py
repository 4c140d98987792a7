"""
Capture runner: drives one browser session through a batch of screenshot jobs.

run_capture() is an async generator of StreamEvents. Jobs run strictly one at
a time on a single session. Per job:

    pending -> processing -> [waiting -> processing] -> success | error

`waiting` only happens on stealth runs: after navigation the job parks on the
pause registry until someone continues it. There is no timeout on that wait.

A failing job emits `error` and the batch moves on. Failing to open the
session (or anything escaping a job) emits one `fatal` and stops the batch.
The session is closed in every case and `done` is always the last event.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Optional
from urllib.parse import urlparse

from playwright.async_api import Page

from shared.logging import bind_request_context, clear_request_context, get_logger
from worker.capture import (
    NAVIGATION_TIMEOUT_MS,
    NETWORK_IDLE_TIMEOUT_MS,
    BrowserSession,
    Job,
    SessionManager,
    build_jobs,
    prepare_for_capture,
    resolve_modes,
    wait_for_network_idle,
)
from worker.events import (
    StreamEvent,
    done_event,
    error_event,
    fatal_event,
    progress_event,
    start_event,
    success_event,
    waiting_event,
)
from worker.pause_registry import PauseRegistry, get_pause_registry
from worker.storage import build_screenshot_path

logger = get_logger(__name__)

_JOB_CONTEXT_KEYS = ("job_id", "url", "viewport", "domain")


class JobState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    WAITING = "waiting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CaptureRequest:
    """A validated batch: URLs already normalized and de-duplicated."""

    urls: list[str] = field(default_factory=list)
    desktop: bool = True
    mobile: bool = False
    stealth: bool = False


@dataclass
class CaptureSummary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0


class JobRunner:
    """Runs single jobs against an open session."""

    def __init__(
        self,
        session: BrowserSession,
        registry: PauseRegistry,
        *,
        stealth: bool,
        downloads_dir: Optional[str] = None,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        network_idle_timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS,
    ):
        self.session = session
        self.registry = registry
        self.stealth = stealth
        self.downloads_dir = downloads_dir
        self.navigation_timeout_ms = navigation_timeout_ms
        self.network_idle_timeout_ms = network_idle_timeout_ms
        self.states: dict[str, JobState] = {}

    def _transition(self, job: Job, state: JobState, **fields) -> None:
        previous = self.states.get(job.job_id, JobState.PENDING)
        self.states[job.job_id] = state
        log = logger.warning if state is JobState.ERROR else logger.info
        log("capture_job_state", from_state=previous.value, to_state=state.value, **fields)

    async def run(self, job: Job) -> AsyncIterator[StreamEvent]:
        """Run one job; yields its events ending in exactly one success or error."""
        bind_request_context(
            job_id=job.job_id,
            url=job.url,
            viewport=job.mode.name,
            domain=urlparse(job.url).hostname,
        )
        self.states[job.job_id] = JobState.PENDING
        page: Optional[Page] = None
        continuation: Optional[asyncio.Future] = None
        try:
            self._transition(job, JobState.PROCESSING)
            yield progress_event(job)

            try:
                page = await self.session.new_page_for(job.mode)
                await page.goto(
                    job.url,
                    wait_until="domcontentloaded",
                    timeout=self.navigation_timeout_ms,
                )

                if self.stealth:
                    # Registered before the event goes out so an immediate continue finds it.
                    continuation = self.registry.register(job.job_id)
                    self._transition(job, JobState.WAITING)
                    yield waiting_event(job)
                    await continuation
                    self._transition(job, JobState.PROCESSING)
                    yield progress_event(job)
                else:
                    await wait_for_network_idle(page, self.network_idle_timeout_ms)

                filepath = await self._capture(page, job)
                captured, page = page, None
                await self.session.release_page(captured)
            except Exception as e:
                if continuation is not None:
                    self.registry.cancel(job.job_id, continuation)
                if page is not None:
                    await self._release_quietly(page)
                    page = None
                message = str(e) or "Unknown error"
                self._transition(
                    job, JobState.ERROR, error=message, error_type=type(e).__name__
                )
                yield error_event(message, job)
                return

            self._transition(job, JobState.SUCCESS, filepath=filepath)
            yield success_event(job, filepath)
        finally:
            # Abandoned mid-wait (stream closed or cancelled): a late continue must not find it.
            if continuation is not None and not continuation.done():
                self.registry.cancel(job.job_id, continuation)
            clear_request_context(*_JOB_CONTEXT_KEYS)

    async def _capture(self, page: Page, job: Job) -> str:
        await prepare_for_capture(page)
        path = build_screenshot_path(job.url, job.mode.name, self.downloads_dir)
        # Full-page capture can leave the viewport resized; pin it back first.
        await page.set_viewport_size(job.mode.size)
        await page.screenshot(path=str(path), full_page=True, type="png")
        return str(path)

    async def _release_quietly(self, page: Page) -> None:
        try:
            await self.session.release_page(page)
        except Exception as e:
            logger.debug("page_release_failed", error=str(e), error_type=type(e).__name__)


async def run_capture(
    request: CaptureRequest,
    *,
    session_manager: SessionManager,
    registry: Optional[PauseRegistry] = None,
    downloads_dir: Optional[str] = None,
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    network_idle_timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS,
) -> AsyncIterator[StreamEvent]:
    """
    Run a capture batch and yield its event stream.

    Exactly one `start` (unless the request is rejected), one terminal event
    per started job, and a final `done`.
    """
    registry = registry if registry is not None else get_pause_registry()

    if not request.urls:
        logger.warning("capture_rejected", reason="no_urls")
        yield error_event("No URLs provided")
        yield done_event()
        return

    modes = resolve_modes(request.desktop, request.mobile)
    if not modes:
        logger.warning("capture_rejected", reason="no_modes", url_count=len(request.urls))
        yield error_event("No modes selected")
        yield done_event()
        return

    jobs = build_jobs(request.urls, modes)
    summary = CaptureSummary(total=len(jobs))
    logger.info(
        "capture_started",
        total=summary.total,
        url_count=len(request.urls),
        modes=[m.name for m in modes],
        stealth=request.stealth,
    )
    yield start_event(summary.total)

    session: Optional[BrowserSession] = None
    try:
        session = await session_manager.open(request.stealth)
        runner = JobRunner(
            session,
            registry,
            stealth=request.stealth,
            downloads_dir=downloads_dir,
            navigation_timeout_ms=navigation_timeout_ms,
            network_idle_timeout_ms=network_idle_timeout_ms,
        )
        for job in jobs:
            async with aclosing(runner.run(job)) as job_events:
                async for event in job_events:
                    if event.type == "success":
                        summary.succeeded += 1
                    elif event.type == "error":
                        summary.failed += 1
                    yield event
    except Exception as e:
        message = str(e) or "Fatal browser error"
        logger.error("capture_fatal", error=message, error_type=type(e).__name__)
        yield fatal_event(message)
    finally:
        if session is not None:
            # Shielded so a cancelled stream still tears the browser down.
            await asyncio.shield(session.close())

    logger.info(
        "capture_finished",
        total=summary.total,
        succeeded=summary.succeeded,
        failed=summary.failed,
    )
    yield done_event()
