"""
Mode resolution: expand a capture request into (URL, viewport mode) jobs.

URLs keep request order; modes are always desktop before mobile. Job ids are
derived from the URL and mode name only, so they are stable for a given pair
and unique across one request as long as the URLs are de-duplicated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from worker.capture.constants import MODE_ORDER, VIEWPORT_CONFIGS, ViewportName


@dataclass(frozen=True)
class ViewportMode:
    """A named viewport size."""

    name: ViewportName
    width: int
    height: int

    @property
    def size(self) -> dict:
        """Viewport dict in the shape Playwright expects."""
        return {"width": self.width, "height": self.height}


VIEWPORT_MODES: dict[str, ViewportMode] = {
    name: ViewportMode(name=name, **VIEWPORT_CONFIGS[name]) for name in MODE_ORDER
}


@dataclass(frozen=True)
class Job:
    """One (URL, viewport mode) capture unit."""

    url: str
    mode: ViewportMode
    job_id: str


def make_job_id(url: str, mode_name: str) -> str:
    return f"{url}-{mode_name}"


def resolve_modes(desktop: bool, mobile: bool) -> list[ViewportMode]:
    """Return the selected viewport modes in fixed order (possibly empty)."""
    selected = {"desktop": desktop, "mobile": mobile}
    return [VIEWPORT_MODES[name] for name in MODE_ORDER if selected[name]]


def build_jobs(urls: Iterable[str], modes: list[ViewportMode]) -> list[Job]:
    """Cross-product of URLs (request order) and modes (desktop first)."""
    return [
        Job(url=url, mode=mode, job_id=make_job_id(url, mode.name))
        for url in urls
        for mode in modes
    ]
