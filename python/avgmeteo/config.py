"""Session tuning knobs."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from .stats import WINDOW

BUFFER_SIZE = 1024
IDLE_DELAY = 2.0  # seconds to wait after an empty read


@dataclass
class SessionConfig:
    buffer_size: int = BUFFER_SIZE
    idle_delay: float = IDLE_DELAY
    window: int = WINDOW
    connect_timeout: float = 5.0
    read_timeout: float = 1.0

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> SessionConfig:
        return cls(
            buffer_size=args.buffer_size,
            idle_delay=args.idle_delay,
            connect_timeout=args.timeout,
            read_timeout=args.read_timeout,
        )


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the session options on *parser*."""
    parser.add_argument("--buffer-size", type=int, default=BUFFER_SIZE,
                        help="Bytes requested per read (default: %(default)s)")
    parser.add_argument("--idle-delay", type=float, default=IDLE_DELAY,
                        help="Seconds to wait after an empty read "
                             "(default: %(default)s)")
    parser.add_argument("--timeout", type=float, default=5.0,
                        help="Connect timeout in seconds (default: %(default)s)")
    parser.add_argument("--read-timeout", type=float, default=1.0,
                        help="Seconds a single read may block "
                             "(default: %(default)s)")
