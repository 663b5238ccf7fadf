from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn

from ..config import Settings


ENV_PREFIX = "CHESS_RULES_"


def main(argv: Optional[List[str]] = None) -> None:
    settings = Settings()
    parser = argparse.ArgumentParser(description="Serve the chess rules HTTP API")
    parser.add_argument("--host", type=str, default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    parser.add_argument(
        "--log-level", type=str, default=settings.log_level, help=f"Log level (default: {settings.log_level})"
    )
    args = parser.parse_args(argv)

    # the app factory builds its own Settings; hand the overrides over via env
    os.environ[f"{ENV_PREFIX}HOST"] = args.host
    os.environ[f"{ENV_PREFIX}PORT"] = str(args.port)
    os.environ[f"{ENV_PREFIX}LOG_LEVEL"] = args.log_level.upper()

    uvicorn.run(
        "chess_rules.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
