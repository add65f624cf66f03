"""Session controller: connection lifecycle and the background receive loop.

One control thread drives ``start``/``stop``/``exit``; at most one
background thread reads from the transport.  The two threads share a
``SessionState`` whose fields are written individually, so a concurrent
reader may see a message count and averages from different messages.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, NamedTuple

from .config import SessionConfig
from .decoder import SENSOR_NAMES, DecodeError, SensorKind, TelemetryMessage, decode
from .stats import RollingStatistics
from .transport import Transport, connect_tcp

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """Raised for an event that is not legal in the current phase."""


class SessionPhase(enum.Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    EXITING = "exiting"
    EXITED = "exited"


_TRANSITIONS: dict[tuple[SessionPhase, str], SessionPhase] = {
    (SessionPhase.IDLE, "start"): SessionPhase.STARTING,
    (SessionPhase.STARTING, "connected"): SessionPhase.RUNNING,
    (SessionPhase.STARTING, "failed"): SessionPhase.IDLE,
    (SessionPhase.RUNNING, "stop"): SessionPhase.STOPPING,
    (SessionPhase.RUNNING, "exit"): SessionPhase.EXITING,
    (SessionPhase.IDLE, "exit"): SessionPhase.EXITED,
    # receive loop ended: connection fault, stop or exit
    (SessionPhase.RUNNING, "finished"): SessionPhase.IDLE,
    (SessionPhase.STOPPING, "finished"): SessionPhase.IDLE,
    (SessionPhase.EXITING, "finished"): SessionPhase.EXITED,
}


@dataclass
class SessionState:
    connected: bool = False
    stop_requested: bool = False
    exit_requested: bool = False
    message_count: int = 0
    averages: dict[SensorKind, float] = field(
        default_factory=lambda: dict.fromkeys(SensorKind, 0.0))

    def clear(self) -> None:
        """Reset the per-session fields; request flags are left alone."""
        self.connected = False
        self.message_count = 0
        # keys are fixed, so readers never see the dict resize
        for kind in SensorKind:
            self.averages[kind] = 0.0


class SessionStats(NamedTuple):
    connected: bool
    message_count: int


def format_message(msg: TelemetryMessage, last_values: dict[SensorKind, float]) -> str:
    """Render a received message the way it is echoed to the user."""
    lines = [
        "",
        "New message:",
        f"Size = {msg.declared_length} bytes;",
        f"Emitter id = {msg.emitter_id};",
        f"Sensor time = {timedelta(microseconds=msg.timestamp_ticks / 10)};",
    ]
    for kind, value in last_values.items():
        lines.append(f"{SENSOR_NAMES[kind]} => value = {round(value, 2)};")
    return "\n".join(lines)


ConnectFn = Callable[[str, int], Transport]


class SessionController:
    """Owns the transport and the receive loop for one emitter endpoint."""

    def __init__(self, host: str, port: int,
                 config: SessionConfig | None = None, *,
                 connect: ConnectFn | None = None,
                 echo: Callable[[str], None] = print) -> None:
        self.endpoint = (host, port)
        self.config = config or SessionConfig()
        self.state = SessionState()
        self._connect = connect or self._connect_tcp
        self._echo = echo
        self._stats = RollingStatistics(self.config.window)
        self._phase = SessionPhase.IDLE
        self._lock = threading.RLock()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Phase machine
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def transition(self, event: str) -> SessionPhase:
        """Apply *event* to the current phase and return the new phase."""
        with self._lock:
            try:
                new = _TRANSITIONS[(self._phase, event)]
            except KeyError:
                raise SessionError(
                    f"event {event!r} not allowed in phase "
                    f"{self._phase.value}") from None
            logger.debug("phase %s -> %s (%s)",
                         self._phase.value, new.value, event)
            self._phase = new
            return new

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Connect and launch the receive loop.  Returns False if not started."""
        with self._lock:
            if self._phase is SessionPhase.EXITED:
                self._echo("\nThe session has ended, 'start' is no longer available")
                return False
            if self._phase is not SessionPhase.IDLE:
                self._echo("\n'start' is already running; "
                           "use 'stop' to end the current session")
                return False
            self.transition("start")

        # a loop that ended on a connection fault is finished but not joined
        self._join()

        host, port = self.endpoint
        try:
            transport = self._connect(host, port)
        except (OSError, ValueError) as e:
            # ValueError covers hostnames the idna codec rejects
            logger.error("connect to %s failed: %s", self._endpoint_str, e)
            self._echo(f"\nCould not connect to {self._endpoint_str}: {e}")
            self.transition("failed")
            return False
        except BaseException:
            self.transition("failed")
            raise

        self._stats = RollingStatistics(self.config.window)
        self.state.connected = True
        self._echo(f"\nConnected to {self._endpoint_str}")
        self._echo("Reading messages")
        logger.info("connected to %s", self._endpoint_str)

        self.transition("connected")
        self._thread = threading.Thread(
            target=self._receive_loop, args=(transport,),
            name="avgmeteo-receive", daemon=True)
        self._thread.start()
        return True

    def stop(self) -> bool:
        """Ask the receive loop to finish and wait for it.  No-op unless running."""
        with self._lock:
            if self._phase is not SessionPhase.RUNNING:
                logger.debug("stop ignored in phase %s", self._phase.value)
                return False
            self.transition("stop")
            self.state.stop_requested = True

        self._join()
        self.state.stop_requested = False
        return True

    def exit(self) -> None:
        """Ask the receive loop to finish, wait for it, and end the session."""
        with self._lock:
            if self._phase is SessionPhase.EXITED:
                return
            self.state.exit_requested = True
            self.transition("exit")

        self._join()

    def info(self) -> dict[SensorKind, float]:
        """Snapshot of the current averages."""
        return dict(self.state.averages)

    def statistics(self) -> SessionStats:
        return SessionStats(self.state.connected, self.state.message_count)

    # ------------------------------------------------------------------
    # Receive loop
    # ------------------------------------------------------------------

    @property
    def _endpoint_str(self) -> str:
        return f"{self.endpoint[0]}:{self.endpoint[1]}"

    def _connect_tcp(self, host: str, port: int) -> Transport:
        return connect_tcp(host, port,
                           timeout=self.config.connect_timeout,
                           read_timeout=self.config.read_timeout)

    def _join(self) -> None:
        thread = self._thread
        if thread is not None:
            thread.join()
            self._thread = None

    def _should_run(self) -> bool:
        return not (self.state.stop_requested or self.state.exit_requested)

    def _receive_loop(self, transport: Transport) -> None:
        try:
            while self._should_run():
                data = transport.read(self.config.buffer_size)
                if not data:
                    logger.debug("no data, retrying in %.1fs",
                                 self.config.idle_delay)
                    time.sleep(self.config.idle_delay)
                    continue
                self._handle_chunk(data)
        except OSError:
            logger.exception("connection to %s failed", self._endpoint_str)
            self._echo(f"\nConnection to {self._endpoint_str} lost")
        finally:
            self._teardown(transport)

    def _handle_chunk(self, data: bytes) -> None:
        try:
            msg = decode(data)
        except DecodeError as e:
            logger.warning("dropping malformed message (%d bytes): %s",
                           len(data), e)
            return

        stats = self._stats
        stats.add_samples(msg.samples)

        self.state.message_count += 1
        stats.advance(self.state.message_count)
        for kind in SensorKind:
            self.state.averages[kind] = stats.average(kind)

        self._echo(format_message(msg, stats.last_values()))

    def _teardown(self, transport: Transport) -> None:
        self._echo(f"\nClosing session with {self._endpoint_str}...")
        try:
            transport.shutdown_read()
        finally:
            transport.close()
            self.state.clear()
            self._stats.reset()
            self.transition("finished")
        logger.info("disconnected from %s", self._endpoint_str)
        self._echo("Session closed")
