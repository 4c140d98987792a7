"""
Pause/resume registry for stealth jobs.

A stealth job registers its job id after navigation and awaits the returned
future; the continue endpoint resolves it. One process-wide table, keyed by
job id, with at most one pending continuation per id.

Check-and-remove happens under a lock so that two continue signals for the
same id resolve it once: the second one finds nothing and reports not-found.
Futures are completed on their own event loop via call_soon_threadsafe, which
keeps resolve() safe to call from a worker thread as well.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Optional

from shared.logging import get_logger

logger = get_logger(__name__)


def _complete(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class PauseRegistry:
    """Table of job id -> pending continuation future."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future] = {}
        self._lock = threading.Lock()

    def register(self, job_id: str) -> asyncio.Future:
        """
        Create a continuation for job_id and return the future to await.

        Must be called from a running event loop. Raises ValueError if the id
        is already waiting.
        """
        future = asyncio.get_running_loop().create_future()
        with self._lock:
            if job_id in self._pending:
                raise ValueError(f"Job already waiting: {job_id}")
            self._pending[job_id] = future
        logger.info("job_pause_registered", job_id=job_id)
        return future

    def _pop(self, job_id: str) -> Optional[asyncio.Future]:
        with self._lock:
            return self._pending.pop(job_id, None)

    def resolve(self, job_id: str) -> bool:
        """Resume the job. Returns False if nothing was waiting under job_id."""
        future = self._pop(job_id)
        if future is None:
            logger.warning("job_resume_not_found", job_id=job_id)
            return False
        future.get_loop().call_soon_threadsafe(_complete, future)
        logger.info("job_resumed", job_id=job_id)
        return True

    def cancel(self, job_id: str, future: Optional[asyncio.Future] = None) -> bool:
        """
        Drop the continuation without resuming. Returns False if none existed.

        When `future` is given, only that exact continuation is dropped.
        """
        with self._lock:
            current = self._pending.get(job_id)
            if current is None or (future is not None and current is not future):
                return False
            del self._pending[job_id]
        current.cancel()
        logger.info("job_pause_cancelled", job_id=job_id)
        return True

    # Diagnostics; the capture flow itself only uses register/resolve/cancel.
    def is_pending(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._pending

    def pending_ids(self) -> list[str]:
        with self._lock:
            return list(self._pending)


_registry = PauseRegistry()


def get_pause_registry() -> PauseRegistry:
    """Process-wide registry shared by the capture stream and the continue endpoint."""
    return _registry
