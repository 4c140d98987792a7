"""
Unit tests for mode resolution and job building.

Covers: fixed viewport sizes, desktop-before-mobile order, U x M cross-product,
deterministic and unique job ids.
"""

from __future__ import annotations

import pytest

from worker.capture.modes import VIEWPORT_MODES, build_jobs, make_job_id, resolve_modes


def test_viewport_sizes():
    assert VIEWPORT_MODES["desktop"].size == {"width": 1440, "height": 900}
    assert VIEWPORT_MODES["mobile"].size == {"width": 390, "height": 844}


@pytest.mark.parametrize(
    "desktop,mobile,expected",
    [
        (True, True, ["desktop", "mobile"]),
        (True, False, ["desktop"]),
        (False, True, ["mobile"]),
        (False, False, []),
    ],
)
def test_resolve_modes_order_and_subset(desktop, mobile, expected):
    assert [m.name for m in resolve_modes(desktop, mobile)] == expected


def test_build_jobs_cross_product_url_major_order():
    urls = ["https://a.example", "https://b.example", "https://c.example"]
    jobs = build_jobs(urls, resolve_modes(True, True))

    assert len(jobs) == len(urls) * 2
    assert [(j.url, j.mode.name) for j in jobs] == [
        ("https://a.example", "desktop"),
        ("https://a.example", "mobile"),
        ("https://b.example", "desktop"),
        ("https://b.example", "mobile"),
        ("https://c.example", "desktop"),
        ("https://c.example", "mobile"),
    ]


def test_build_jobs_empty_modes_yields_no_jobs():
    assert build_jobs(["https://a.example"], []) == []


def test_job_id_format():
    assert make_job_id("https://example.com", "desktop") == "https://example.com-desktop"


def test_job_ids_are_deterministic():
    modes = resolve_modes(True, True)
    first = [j.job_id for j in build_jobs(["https://a.example/x"], modes)]
    second = [j.job_id for j in build_jobs(["https://a.example/x"], modes)]
    assert first == second


def test_job_ids_unique_within_request():
    urls = ["https://example.com", "https://example.com/about", "http://example.com"]
    jobs = build_jobs(urls, resolve_modes(True, True))
    ids = [j.job_id for j in jobs]
    assert len(ids) == len(set(ids))
