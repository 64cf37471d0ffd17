"""
Runs the docgraph API server.

    python -m docgraph.main --port 3000
"""
import argparse
import logging
import sys
from typing import Optional

import uvicorn

from docgraph.app import create_app
from docgraph.settings import settings

LOGGER = logging.getLogger("docgraph")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the package wide logger: stdout, plus a file when one is given."""
    LOGGER.setLevel(getattr(logging, level.upper(), logging.INFO))
    if LOGGER.handlers:
        return
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        LOGGER.addHandler(handler)


def main() -> None:
    parser = argparse.ArgumentParser(description="Document to graph API server")
    parser.add_argument("--host", default=settings.server.host)
    parser.add_argument("--port", type=int, default=settings.server.port)
    parser.add_argument("--log-level", default=settings.server.log_level)
    parser.add_argument("--log-file", default=settings.server.log_file)
    args = parser.parse_args()

    configure_logging(args.log_level, args.log_file)
    LOGGER.info(f"Starting server on {args.host}:{args.port}")
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
