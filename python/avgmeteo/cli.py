"""avgmeteo command-line tool."""

from __future__ import annotations

import argparse
import logging
import sys
from urllib.parse import urlsplit

from .commands import CommandDispatcher
from .config import SessionConfig, add_arguments
from .session import SessionController


def parse_endpoint(text: str) -> tuple[str, int]:
    """Parse ``host:port`` or a URL such as ``tcp://host:port``."""
    if "://" in text:
        parts = urlsplit(text)
        try:
            host, port = parts.hostname, parts.port
        except ValueError:
            host, port = None, None
    else:
        host, _, port_str = text.rpartition(":")
        port = int(port_str) if port_str.isdigit() else None
    if not host or port is None or not 0 < port <= 65535:
        raise argparse.ArgumentTypeError(
            f"expected host:port or tcp://host:port, got {text!r}")
    return host, port


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="avgmeteo",
        description="Rolling sensor averages from a telemetry emitter")
    parser.add_argument("endpoint", type=parse_endpoint,
                        help="Emitter address, host:port or tcp://host:port")
    add_arguments(parser)
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s: %(message)s")

    host, port = args.endpoint
    controller = SessionController(host, port, SessionConfig.from_args(args))
    dispatcher = CommandDispatcher(controller)
    try:
        dispatcher.run(sys.stdin)
    except KeyboardInterrupt:
        controller.exit()


if __name__ == "__main__":
    main()
