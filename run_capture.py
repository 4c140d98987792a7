#!/usr/bin/env python3
"""
Command-line client for a running Batch Shot server.

Posts a capture batch, prints each event as it arrives and, for stealth runs,
asks on the terminal before continuing each job that is waiting.

    python run_capture.py example.com news.ycombinator.com --mobile
    python run_capture.py example.com --stealth
"""

from __future__ import annotations

import argparse
import json
import sys
from urllib.parse import quote

import requests
from dotenv import load_dotenv

from shared.config import get_config

load_dotenv()


def _default_server() -> str:
    config = get_config()
    return f"http://{config.host}:{config.port}"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Capture full-page screenshots of URLs.")
    parser.add_argument("urls", nargs="+", help="URLs (https:// is added when missing)")
    parser.add_argument("--server", default=None, help="Server base URL")
    parser.add_argument("--no-desktop", action="store_true", help="Skip the 1440x900 capture")
    parser.add_argument("--mobile", action="store_true", help="Also capture at 390x844")
    parser.add_argument("--stealth", action="store_true", help="Visible browser, pause per job")
    return parser.parse_args(argv)


def continue_job(server: str, job_id: str) -> bool:
    resp = requests.post(f"{server}/api/continue/{quote(job_id, safe='')}", timeout=10)
    return resp.status_code == 200


def print_event(event: dict) -> None:
    kind = event.get("type")
    data = event.get("data") or {}
    if kind == "start":
        print(f"Capturing {data.get('total')} screenshot(s)...")
    elif kind == "progress":
        print(f"  [{data.get('mode')}] {data.get('url')}: processing")
    elif kind == "waiting":
        print(f"  [{data.get('mode')}] {data.get('url')}: waiting in the browser window")
    elif kind == "success":
        print(f"  [{data.get('mode')}] {data.get('url')}: saved {data.get('filepath')}")
    elif kind == "error":
        label = f"  [{data['mode']}] {data['url']}" if "jobId" in data else "  request"
        print(f"{label}: ERROR {data.get('error')}", file=sys.stderr)
    elif kind == "fatal":
        print(f"FATAL: {data.get('error')}", file=sys.stderr)
    elif kind == "done":
        print("Done.")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    server = (args.server or _default_server()).rstrip("/")
    body = {
        "urls": args.urls,
        "desktop": not args.no_desktop,
        "mobile": args.mobile,
        "stealth": args.stealth,
    }

    failures = 0
    try:
        with requests.post(f"{server}/api/capture", json=body, stream=True, timeout=None) as resp:
            if resp.status_code != 200:
                print(f"HTTP Error {resp.status_code}", file=sys.stderr)
                print(resp.text, file=sys.stderr)
                return 1

            for line in resp.iter_lines(decode_unicode=True):
                if not line or not line.strip():
                    continue
                event = json.loads(line)
                print_event(event)
                if event.get("type") in ("error", "fatal"):
                    failures += 1
                if event.get("type") == "waiting":
                    job_id = event["data"]["jobId"]
                    input("    Press Enter when the page is ready to capture... ")
                    if not continue_job(server, job_id):
                        print(f"    Could not continue {job_id}", file=sys.stderr)
    except requests.RequestException as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
