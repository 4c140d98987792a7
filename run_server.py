#!/usr/bin/env python3
"""
Start the Batch Shot HTTP server (API + browser UI).

Host and port come from HOST / PORT (default 127.0.0.1:3000). A local .env
file is loaded first.
"""

from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from shared.config import get_config
from shared.logging import get_logger

load_dotenv()


def main() -> None:
    config = get_config()
    logger = get_logger(__name__)
    logger.info("server_starting", host=config.host, port=config.port)
    print(f"Batch Shot server running on http://{config.host}:{config.port}")

    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
