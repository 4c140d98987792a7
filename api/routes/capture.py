"""
Route handlers for capture endpoints.

POST /api/capture streams the batch as NDJSON; POST /api/continue/{job_id}
resumes a stealth job that is waiting for a human.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from api.schemas import CaptureRequestBody, ContinueResponse
from shared.config import AppConfig
from shared.logging import bind_request_context, get_logger
from worker.capture import SessionManager
from worker.events import ndjson_stream
from worker.pause_registry import PauseRegistry, get_pause_registry
from worker.runner import run_capture

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["capture"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_app_config(request: Request) -> AppConfig:
    """Dependency to get the config the app was created with."""
    return request.app.state.config


def get_session_manager(request: Request) -> SessionManager:
    """Dependency to get the app's browser session manager."""
    return request.app.state.session_manager


def get_registry() -> PauseRegistry:
    """Dependency to get the process-wide pause registry."""
    return get_pause_registry()


@router.post(
    "/capture",
    response_class=StreamingResponse,
    summary="Capture screenshots for a batch of URLs",
)
async def capture(
    body: CaptureRequestBody,
    config: Annotated[AppConfig, Depends(get_app_config)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    registry: Annotated[PauseRegistry, Depends(get_registry)],
) -> StreamingResponse:
    """
    Start a capture batch.

    Returns 400 before streaming when no URLs remain after normalization.
    Otherwise responds with one JSON event per line until the `done` event.
    """
    if not body.urls:
        logger.warning("capture_request_rejected", reason="no_urls")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No URLs provided",
        )

    bind_request_context(stealth=body.stealth)
    logger.info(
        "capture_requested",
        url_count=len(body.urls),
        desktop=body.desktop,
        mobile=body.mobile,
    )

    events = run_capture(
        body.to_capture_request(),
        session_manager=session_manager,
        registry=registry,
        downloads_dir=config.downloads_dir,
        navigation_timeout_ms=config.navigation_timeout_ms,
        network_idle_timeout_ms=config.network_idle_timeout_ms,
    )
    return StreamingResponse(
        ndjson_stream(events),
        media_type=NDJSON_MEDIA_TYPE,
        headers=STREAM_HEADERS,
    )


@router.post(
    "/continue/{job_id:path}",
    response_model=ContinueResponse,
    summary="Resume a stealth job waiting for a human",
)
async def continue_job(
    job_id: str,
    registry: Annotated[PauseRegistry, Depends(get_registry)],
) -> ContinueResponse:
    """
    Resume the job waiting under job_id.

    Returns 404 if nothing is waiting under that id (unknown, or already continued).
    """
    if not registry.resolve(job_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found or already continued",
        )
    return ContinueResponse(ok=True)
