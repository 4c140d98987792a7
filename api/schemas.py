"""
Pydantic schemas for API request/response contracts.

The capture endpoint streams NDJSON, so only its request body and the small
JSON responses (continue, health) are modelled here. Event payloads live in
worker.events.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from worker.runner import CaptureRequest


def normalize_capture_url(value: str) -> str:
    """Strip whitespace and default to https:// when no http(s) scheme is given."""
    trimmed = value.strip()
    if not trimmed:
        return ""
    if not trimmed.startswith(("http://", "https://")):
        trimmed = "https://" + trimmed
    return trimmed


# Request schemas
class CaptureRequestBody(BaseModel):
    """Request schema for POST /api/capture."""

    urls: list[str] = Field(default_factory=list, description="URLs to capture, in order")
    desktop: bool = Field(default=True, description="Capture at 1440x900")
    mobile: bool = Field(default=False, description="Capture at 390x844")
    stealth: bool = Field(
        default=False,
        description="Use the visible, profile-backed browser and pause each job for a human",
    )

    @field_validator("urls")
    @classmethod
    def normalize_urls(cls, v: list[str]) -> list[str]:
        """Normalize, drop blanks and de-duplicate while keeping first-seen order."""
        seen: dict[str, None] = {}
        for raw in v:
            url = normalize_capture_url(raw)
            if url:
                seen.setdefault(url, None)
        return list(seen)

    def to_capture_request(self) -> CaptureRequest:
        return CaptureRequest(
            urls=list(self.urls),
            desktop=self.desktop,
            mobile=self.mobile,
            stealth=self.stealth,
        )


# Response schemas
class ContinueResponse(BaseModel):
    """Response schema for POST /api/continue/{job_id}."""

    ok: bool


class HealthResponse(BaseModel):
    status: str
    stealth_capable: bool
