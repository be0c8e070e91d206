#!/usr/bin/env python3
"""Run the gitslice API under uvicorn."""

import argparse

import uvicorn

from gitslice.logging_utils import configure_logging


def main():
    parser = argparse.ArgumentParser(description="Start gitslice API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level for gitslice and uvicorn (default: LOG_LEVEL or WARNING)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    uvicorn.run(
        "gitslice.api.app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower() if args.log_level else None,
    )


if __name__ == "__main__":
    main()
