"""Uvicorn entrypoint for running the API server."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from ytcomments.config.logging_config import setup_logging
from ytcomments.config.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the YouTube comment scraper API server.")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    parser.add_argument("--port", type=int, default=8000, help="Bind port.")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Overrides the configured log level.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(log_dir=settings.logs_dir, level=args.log_level, settings=settings.logging)
    logger = logging.getLogger(__name__)

    logger.info("Starting API server on %s:%d", args.host, args.port)
    uvicorn.run(
        "ytcomments.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=(args.log_level or settings.logging.level).lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
