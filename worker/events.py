"""
Capture stream events and their newline-delimited JSON encoding.

Wire shape: {"type": <tag>, "data": {...}} per line; "done" carries no data.
Field names inside data match what the browser UI reads (jobId, filepath).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Literal, Optional

from worker.capture.modes import Job

EventType = Literal["start", "progress", "waiting", "success", "error", "fatal", "done"]

STATUS_PROCESSING = "processing"


@dataclass(frozen=True)
class StreamEvent:
    """One event on the capture stream."""

    type: EventType
    data: Optional[dict[str, Any]] = field(default=None)

    @property
    def job_id(self) -> Optional[str]:
        return (self.data or {}).get("jobId")

    def to_dict(self) -> dict[str, Any]:
        if self.data is None:
            return {"type": self.type}
        return {"type": self.type, "data": self.data}


def _job_data(job: Job, **extra: Any) -> dict[str, Any]:
    return {"url": job.url, "mode": job.mode.name, **extra, "jobId": job.job_id}


def start_event(total: int) -> StreamEvent:
    return StreamEvent("start", {"total": total})


def progress_event(job: Job) -> StreamEvent:
    return StreamEvent("progress", _job_data(job, status=STATUS_PROCESSING))


def waiting_event(job: Job) -> StreamEvent:
    return StreamEvent("waiting", _job_data(job))


def success_event(job: Job, filepath: str) -> StreamEvent:
    return StreamEvent("success", _job_data(job, filepath=filepath))


def error_event(message: str, job: Optional[Job] = None) -> StreamEvent:
    """Per-job error, or a request-level error when job is None."""
    if job is None:
        return StreamEvent("error", {"error": message})
    return StreamEvent("error", _job_data(job, error=message))


def fatal_event(message: str) -> StreamEvent:
    return StreamEvent("fatal", {"error": message})


def done_event() -> StreamEvent:
    return StreamEvent("done")


def encode_event(event: StreamEvent) -> str:
    """Render one event as a compact JSON line."""
    return json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":")) + "\n"


async def ndjson_stream(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    """Encode events one chunk per event, as they are produced."""
    try:
        async for event in events:
            yield encode_event(event)
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()
