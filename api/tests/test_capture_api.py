"""
Tests for capture endpoints.

These tests cover:
- POST /api/capture rejects empty URL lists with 400 before streaming
- POST /api/capture streams NDJSON events ending in done
- URL normalization and de-duplication
- POST /api/continue returns 404 for unknown ids and resumes waiting jobs
"""

from __future__ import annotations

import asyncio
import json
import re

import pytest
from fastapi import status


def _events(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "stealth_capable": False}


def test_capture_single_url_stream(client, fake_session_manager):
    response = client.post(
        "/api/capture",
        json={"urls": ["example.com"], "desktop": True, "mobile": False, "stealth": False},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("application/x-ndjson")
    assert response.headers["cache-control"] == "no-cache"

    events = _events(response)
    assert [e["type"] for e in events] == ["start", "progress", "success", "done"]
    assert events[0]["data"] == {"total": 1}
    assert events[1]["data"]["jobId"] == "https://example.com-desktop"
    assert events[1]["data"]["mode"] == "desktop"

    filepath = events[2]["data"]["filepath"]
    assert "Downloads" in filepath
    assert re.search(r"example\.com-desktop-\d+\.png$", filepath)
    assert fake_session_manager.opened == [False]


def test_capture_total_is_urls_times_modes(client):
    response = client.post(
        "/api/capture",
        json={"urls": ["a.example", "b.example"], "desktop": True, "mobile": True},
    )
    events = _events(response)
    assert events[0]["data"]["total"] == 4
    assert len([e for e in events if e["type"] == "success"]) == 4
    assert events[-1] == {"type": "done"}


def test_capture_dedupes_normalized_urls(client):
    response = client.post(
        "/api/capture",
        json={"urls": ["example.com", " https://example.com ", "", "http://example.com"]},
    )
    events = _events(response)
    assert events[0]["data"]["total"] == 2
    job_ids = [e["data"]["jobId"] for e in events if e["type"] == "progress"]
    assert job_ids == ["https://example.com-desktop", "http://example.com-desktop"]


def test_capture_empty_urls_rejected_before_stream(client, fake_session_manager):
    response = client.post("/api/capture", json={"urls": [], "desktop": True})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"detail": "No URLs provided"}
    assert fake_session_manager.opened == []


def test_capture_blank_urls_rejected(client, fake_session_manager):
    response = client.post("/api/capture", json={"urls": ["  ", ""]})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert fake_session_manager.opened == []


def test_capture_missing_urls_rejected(client):
    response = client.post("/api/capture", json={"desktop": True})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_capture_malformed_urls_rejected(client):
    response = client.post("/api/capture", json={"urls": "example.com"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_capture_no_modes_streams_error_then_done(client, fake_session_manager):
    response = client.post(
        "/api/capture",
        json={"urls": ["example.com"], "desktop": False, "mobile": False},
    )

    assert response.status_code == status.HTTP_200_OK
    events = _events(response)
    assert events == [
        {"type": "error", "data": {"error": "No modes selected"}},
        {"type": "done"},
    ]
    assert fake_session_manager.opened == []


def test_capture_session_failure_streams_fatal(client, fake_session_manager):
    fake_session_manager.open_error = RuntimeError("browserType.launch: Executable doesn't exist")

    response = client.post("/api/capture", json={"urls": ["example.com"]})
    events = _events(response)

    assert [e["type"] for e in events] == ["start", "fatal", "done"]
    assert "Executable doesn't exist" in events[1]["data"]["error"]


def test_continue_unknown_job_not_found(client, registry):
    response = client.post("/api/continue/https%3A%2F%2Fexample.com-desktop")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert "not found" in response.json()["detail"].lower()
    assert registry.pending_ids() == []


@pytest.mark.asyncio
async def test_continue_resumes_waiting_job(client, registry):
    job_id = "https://example.com-desktop"
    other = registry.register("https://other.example-desktop")
    future = registry.register(job_id)

    response = client.post("/api/continue/https%3A%2F%2Fexample.com-desktop")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"ok": True}

    await asyncio.wait_for(future, timeout=1)
    assert not other.done()
    assert registry.pending_ids() == ["https://other.example-desktop"]

    again = client.post("/api/continue/https%3A%2F%2Fexample.com-desktop")
    assert again.status_code == status.HTTP_404_NOT_FOUND
