"""Run the map API server: ``python -m gravemap.web [--host H] [--port P]``."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from gravemap.core.config import Settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the grave map API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "gravemap.web.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
