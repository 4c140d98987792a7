"""
Capture constants: viewport modes, timeouts, scroll cadence, injected page scripts.
"""

from __future__ import annotations

from typing import Literal

ViewportName = Literal["desktop", "mobile"]

# Viewport configurations, in the fixed order modes are resolved
VIEWPORT_CONFIGS = {
    "desktop": {"width": 1440, "height": 900},
    "mobile": {"width": 390, "height": 844},
}
MODE_ORDER: tuple[ViewportName, ...] = ("desktop", "mobile")

# Timeout constants (in milliseconds)
NAVIGATION_TIMEOUT_MS = 30_000  # Hard: exceeding it fails the job
NETWORK_IDLE_TIMEOUT_MS = 15_000  # Soft: headless path only, timeout is ignored
SETTLE_AFTER_SCROLL_MS = 1000

# Auto-scroll cadence
SCROLL_STEP_PX = 400
SCROLL_INTERVAL_MS = 100

# Headless browser window; contexts override the viewport per job
HEADLESS_WINDOW_ARGS = ["--window-size=1920,1080"]
# Persistent (visible) context; hides navigator.webdriver from the page
STEALTH_LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled"]

# Injected on DOMContentLoaded in headless contexts. Headless Chromium lays out
# some responsive pages against the window width rather than the viewport, so
# the document is pinned to the target width.
FORCE_WIDTH_INIT_SCRIPT_TEMPLATE = """
((targetWidth) => {
    const style = document.createElement('style');
    style.textContent = `html, body { min-width: ${targetWidth}px !important; max-width: none !important; overflow-x: visible !important; width: ${targetWidth}px !important; }`;
    document.addEventListener('DOMContentLoaded', () => { document.head.appendChild(style); }, { once: true });
})(%d);
"""

DISABLE_ANIMATIONS_CSS = (
    "* { animation: none !important; transition: none !important; "
    "scroll-behavior: auto !important; }"
)

# Scroll height is re-read on every tick; growth during the scroll only extends
# the bound as far as each tick observes it.
AUTO_SCROLL_JS = """
async ([distance, intervalMs]) => {
    await new Promise((resolve) => {
        let totalHeight = 0;
        const timer = setInterval(() => {
            const scrollHeight = document.body.scrollHeight;
            window.scrollBy(0, distance);
            totalHeight += distance;
            if (totalHeight >= scrollHeight) {
                clearInterval(timer);
                window.scrollTo(0, 0);
                resolve();
            }
        }, intervalMs);
    });
}
"""
