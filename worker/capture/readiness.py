"""
Page preparation between navigation and capture.

Network idle is best-effort (headless path only); animation freezing and the
lazy-load scroll run on every job right before the screenshot.
"""

from __future__ import annotations

import asyncio

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from shared.logging import get_logger
from worker.capture.constants import (
    AUTO_SCROLL_JS,
    DISABLE_ANIMATIONS_CSS,
    NETWORK_IDLE_TIMEOUT_MS,
    SCROLL_INTERVAL_MS,
    SCROLL_STEP_PX,
    SETTLE_AFTER_SCROLL_MS,
)

logger = get_logger(__name__)


async def wait_for_network_idle(page: Page, timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS) -> bool:
    """
    Wait for network idle, up to timeout_ms.

    Returns True if the page went idle, False on soft timeout. Other errors propagate.
    """
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        logger.info("network_idle_soft_timeout", timeout_ms=timeout_ms)
        return False
    return True


async def disable_animations(page: Page) -> None:
    await page.add_style_tag(content=DISABLE_ANIMATIONS_CSS)


async def auto_scroll(
    page: Page,
    step_px: int = SCROLL_STEP_PX,
    interval_ms: int = SCROLL_INTERVAL_MS,
) -> None:
    """
    Scroll to the bottom in fixed increments to trigger lazy loading, then back to top.

    Runs in the page; the bound is the scroll height observed at each tick.
    """
    await page.evaluate(AUTO_SCROLL_JS, [step_px, interval_ms])


async def settle(delay_ms: int = SETTLE_AFTER_SCROLL_MS) -> None:
    await asyncio.sleep(delay_ms / 1000)


async def prepare_for_capture(page: Page) -> None:
    """Freeze animations, scroll for lazy content, then settle."""
    await disable_animations(page)
    await auto_scroll(page)
    await settle()
