"""Transport adapters for emitter streams."""

from __future__ import annotations

import logging
import socket
from typing import Protocol

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Abstract receive-only transport interface."""

    def read(self, n: int) -> bytes: ...
    def shutdown_read(self) -> None: ...
    def close(self) -> None: ...


class TCPTransport:
    """TCP stream transport (client mode).

    ``read`` returns ``b""`` when nothing arrives within *timeout*, the
    same result as an orderly close by the peer.
    """

    def __init__(self, host: str, port: int, timeout: float = 5.0,
                 read_timeout: float | None = None):
        self._sock: socket.socket | None = socket.create_connection(
            (host, port), timeout=timeout)
        self._sock.settimeout(timeout if read_timeout is None else read_timeout)
        self.peer = (host, port)

    def read(self, n: int) -> bytes:
        if self._sock is None:
            raise ConnectionError("transport is closed")
        try:
            return self._sock.recv(n)
        except socket.timeout:
            return b""

    def shutdown_read(self) -> None:
        """Half-close the receive direction."""
        if self._sock is None:
            return
        try:
            self._sock.shutdown(socket.SHUT_RD)
        except OSError as e:
            # peer may already have reset the connection
            logger.debug("shutdown(SHUT_RD) failed: %s", e)

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


def connect_tcp(host: str, port: int, *, timeout: float = 5.0,
                read_timeout: float | None = None) -> TCPTransport:
    return TCPTransport(host, port, timeout=timeout, read_timeout=read_timeout)
