from __future__ import annotations

import argparse
import os

import uvicorn

from sample_app.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="DSLM sample app: logs, metrics and traces demo service")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Listening port (env PORT)")
    args = parser.parse_args()

    # With factory=True uvicorn imports and calls create_app itself, which reads get_settings();
    # the environment is the only channel for CLI overrides to reach it.
    os.environ["HOST"] = args.host
    os.environ["PORT"] = str(args.port)
    get_settings.cache_clear()

    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which flushes spans and logs.
    uvicorn.run(
        "sample_app.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        access_log=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
