"""Process entry point for the Ecuro MCP server.

Usage:
    uv run python -m src.main                      # stdio (default)
    uv run python -m src.main --transport http     # Streamable HTTP + SSE
    uv run python -m src.main --debug              # log every upstream call

The transport and port fall back to the ``TRANSPORT`` and ``PORT``
environment variables.
"""

from __future__ import annotations

import argparse
import logging
import sys

import anyio
import uvicorn

from src.config import SERVER_HOST, SERVER_NAME, SERVER_PORT, SERVER_VERSION, TRANSPORT
from src.engine import create_registry, create_server
from src.services.ecuro_client import close_ecuro_client
from src.transport.stdio import run_stdio

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "http")


def _configure_logging(debug: bool = False) -> None:
    """Log to stderr: stdout belongs to the stdio protocol."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        stream=sys.stderr,
    )

    if not debug:
        # Silence chatty HTTP loggers
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _serve_stdio() -> None:
    server = create_server(create_registry())
    try:
        await run_stdio(server)
    finally:
        await close_ecuro_client()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=f"{SERVER_NAME} {SERVER_VERSION}")
    parser.add_argument(
        "--transport", choices=TRANSPORTS, default=None,
        help="stdio or http (default: $TRANSPORT, else stdio)",
    )
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT,
        help="HTTP port (default: $PORT, else 3000)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args(argv)

    _configure_logging(debug=args.debug)

    transport = args.transport or TRANSPORT
    if transport not in TRANSPORTS:
        parser.error(f"unknown transport {transport!r} (expected one of {', '.join(TRANSPORTS)})")

    if transport == "stdio":
        try:
            anyio.run(_serve_stdio)
        except KeyboardInterrupt:
            logger.info("Interrupted, exiting")
        return

    logger.info("Starting %s on %s:%d", SERVER_NAME, SERVER_HOST, args.port)
    uvicorn.run(
        "src.server:app",
        host=SERVER_HOST,
        port=args.port,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()
