"""avgmeteo - Rolling sensor averages from a binary telemetry stream."""

from .decoder import (
    DecodeError, SensorKind, SensorSample, TelemetryMessage,
    decode, encode_message,
)
from .stats import RollingStatistics, average, advance_skip, record
from .config import SessionConfig
from .session import SessionController, SessionError, SessionPhase, SessionState
from .commands import CommandDispatcher

__all__ = [
    "DecodeError", "SensorKind", "SensorSample", "TelemetryMessage",
    "decode", "encode_message",
    "RollingStatistics", "average", "advance_skip", "record",
    "SessionConfig",
    "SessionController", "SessionError", "SessionPhase", "SessionState",
    "CommandDispatcher",
]
