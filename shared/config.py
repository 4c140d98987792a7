"""
Environment-based configuration for Batch Shot.

This module exposes a small, typed configuration surface shared by the API
and the capture worker. All values are sourced from environment variables
with defaults suitable for a single-user desktop install.

Paths default to locations under the user's home directory: screenshots go
to ~/Downloads and the stealth browser profile lives in a hidden directory
that is reused across runs so cookies and CAPTCHA clearance survive.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

Environment = Literal["local", "dev", "staging", "prod"]

DEFAULT_PROFILE_DIRNAME = ".stealth-batch-shot-v2"


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level application configuration.

    Timeouts are expressed in milliseconds to match Playwright's API.
    """

    environment: Environment
    log_level: str

    # Optional file path for structured JSON logs; when set, logs are written
    # to file (and stdout if log_stdout).
    log_file: Optional[str]
    # When True, logs go to stdout. When False, only file (if LOG_FILE set). Default True.
    log_stdout: bool

    # HTTP server
    host: str
    port: int
    static_dir: Optional[str]

    # Persisted state
    downloads_dir: str
    stealth_profile_dir: str

    # Per-job navigation
    navigation_timeout_ms: int
    network_idle_timeout_ms: int

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Construct configuration from environment variables.

        All fields have defaults; deployments override them via env vars.
        """

        environment = os.getenv("APP_ENV", "local")

        if environment not in {"local", "dev", "staging", "prod"}:
            raise ValueError(f"Unsupported APP_ENV value: {environment!r}")

        log_stdout_raw = (os.getenv("LOG_STDOUT") or "true").strip().lower()
        log_stdout = log_stdout_raw in ("true", "1", "yes")

        def _int_env(name: str, default: int) -> int:
            raw = (os.getenv(name) or "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                return default

        home = Path.home()

        return cls(
            environment=environment,  # type: ignore[arg-type]
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_stdout=log_stdout,
            host=os.getenv("HOST", "127.0.0.1"),
            port=_int_env("PORT", 3000),
            static_dir=os.getenv("STATIC_DIR", "./public") or None,
            downloads_dir=os.getenv("DOWNLOADS_DIR") or str(home / "Downloads"),
            stealth_profile_dir=(
                os.getenv("STEALTH_PROFILE_DIR") or str(home / DEFAULT_PROFILE_DIRNAME)
            ),
            navigation_timeout_ms=_int_env("NAVIGATION_TIMEOUT_MS", 30_000),
            network_idle_timeout_ms=_int_env("NETWORK_IDLE_TIMEOUT_MS", 15_000),
        )


def get_config() -> AppConfig:
    """
    Helper to obtain the current configuration.

    In simple scripts, calling this function directly is sufficient. In
    longer-lived processes, consider constructing a single `AppConfig`
    instance at startup and passing it explicitly through your code.
    """

    return AppConfig.from_env()
