"""
Browser sessions for capture: one per capture request.

Two kinds:
- ephemeral: one headless Chromium process, a fresh isolated context per job.
- persistent: one visible, profile-backed context reused by every job of the
  request. The profile directory outlives the request so cookies and CAPTCHA
  clearance carry over to later stealth runs.

Stealth evasions come from playwright-stealth. The evasion set is built once at
startup by build_stealth_launcher(); when that fails the launcher is marked
degraded and stealth requests run on vanilla Chromium instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from shared.logging import get_logger
from worker.capture.constants import (
    FORCE_WIDTH_INIT_SCRIPT_TEMPLATE,
    HEADLESS_WINDOW_ARGS,
    STEALTH_LAUNCH_ARGS,
)
from worker.capture.modes import ViewportMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class StealthLauncher:
    """Result of the startup capability check for stealth evasions."""

    capable: bool
    stealth: Optional[Any] = None
    degraded_reason: Optional[str] = None

    async def apply(self, context: BrowserContext) -> None:
        """Apply evasions to the context; no-op when degraded."""
        if self.stealth is not None:
            await self.stealth.apply_stealth_async(context)


def build_stealth_launcher() -> StealthLauncher:
    """
    Build the stealth evasion set once.

    Never raises: a missing or broken playwright-stealth install, or a failure
    constructing the evasions, yields a degraded launcher, logged here.
    """
    try:
        from playwright_stealth import Stealth

        stealth = Stealth(
            navigator_webdriver=True,
            chrome_runtime=True,
            navigator_plugins=True,
            navigator_permissions=True,
            webgl_vendor=True,
        )
    except Exception as e:
        logger.warning(
            "stealth_launcher_degraded",
            error=str(e),
            error_type=type(e).__name__,
            fallback="vanilla_chromium",
        )
        return StealthLauncher(capable=False, degraded_reason=str(e))

    logger.info("stealth_launcher_ready")
    return StealthLauncher(capable=True, stealth=stealth)


class BrowserSession:
    """Common lifecycle for both session kinds."""

    kind = "base"

    def __init__(self, playwright: Playwright):
        self._playwright = playwright
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def new_page_for(self, mode: ViewportMode) -> Page:
        raise NotImplementedError

    async def release_page(self, page: Page) -> None:
        raise NotImplementedError

    async def _close_target(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        """Close the browser (or context) and stop Playwright. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._close_target()
        except Exception as e:
            logger.warning(
                "browser_session_close_failed",
                kind=self.kind,
                error=str(e),
                error_type=type(e).__name__,
            )
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(
                "playwright_stop_failed",
                kind=self.kind,
                error=str(e),
                error_type=type(e).__name__,
            )
        logger.info("browser_session_closed", kind=self.kind)


class EphemeralSession(BrowserSession):
    """Headless browser; every job gets its own context."""

    kind = "ephemeral"

    def __init__(self, playwright: Playwright, browser: Browser):
        super().__init__(playwright)
        self.browser = browser

    async def new_page_for(self, mode: ViewportMode) -> Page:
        context = await self.browser.new_context(
            viewport=mode.size,
            device_scale_factor=1,
        )
        try:
            await context.add_init_script(script=FORCE_WIDTH_INIT_SCRIPT_TEMPLATE % mode.width)
            return await context.new_page()
        except Exception:
            await context.close()
            raise

    async def release_page(self, page: Page) -> None:
        await page.context.close()

    async def _close_target(self) -> None:
        await self.browser.close()


class PersistentSession(BrowserSession):
    """Visible profile-backed context; only pages are opened and closed per job."""

    kind = "persistent"

    def __init__(self, playwright: Playwright, context: BrowserContext):
        super().__init__(playwright)
        self.context = context

    async def new_page_for(self, mode: ViewportMode) -> Page:
        page = await self.context.new_page()
        try:
            await page.set_viewport_size(mode.size)
        except Exception:
            await page.close()
            raise
        return page

    async def release_page(self, page: Page) -> None:
        await page.close()

    async def _close_target(self) -> None:
        await self.context.close()


class SessionManager:
    """
    Opens the one session a capture request runs on.

    `playwright_factory` defaults to async_playwright and is swappable in tests.
    """

    def __init__(
        self,
        launcher: StealthLauncher,
        profile_dir: str,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.launcher = launcher
        self.profile_dir = profile_dir
        self._playwright_factory = playwright_factory

    async def open(self, stealth: bool) -> BrowserSession:
        playwright = await self._playwright_factory().start()
        try:
            if stealth:
                session: BrowserSession = await self._open_persistent(playwright)
            else:
                browser = await playwright.chromium.launch(
                    headless=True,
                    args=HEADLESS_WINDOW_ARGS,
                )
                session = EphemeralSession(playwright, browser)
        except Exception:
            await playwright.stop()
            raise

        logger.info("browser_session_opened", kind=session.kind)
        return session

    async def _open_persistent(self, playwright: Playwright) -> PersistentSession:
        profile = Path(self.profile_dir)
        profile.mkdir(parents=True, exist_ok=True)

        context = await playwright.chromium.launch_persistent_context(
            str(profile),
            headless=False,
            no_viewport=True,
            args=STEALTH_LAUNCH_ARGS,
        )
        if self.launcher.capable:
            try:
                await self.launcher.apply(context)
            except Exception:
                await context.close()
                raise
        else:
            logger.info(
                "stealth_fallback_vanilla",
                reason=self.launcher.degraded_reason,
            )
        return PersistentSession(playwright, context)
