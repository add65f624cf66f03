"""Decoder for emitter telemetry messages.

A message is one transport read:
  [header(14)][entry(9) × N]

Header: uint16 declared length, int64 timestamp (100 ns ticks),
int32 emitter id.  Entry: uint8 sensor tag, float64 value.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

# Wire format constants (little-endian, as the emitter writes them)
HEADER_FMT = "<Hqi"
HEADER_SIZE = struct.calcsize(HEADER_FMT)  # 14

ENTRY_FMT = "<Bd"
ENTRY_SIZE = struct.calcsize(ENTRY_FMT)  # 9


class DecodeError(ValueError):
    """Raised for a buffer that is not a well-formed message."""


class SensorKind(IntEnum):
    TEMPERATURE = 1
    HUMIDITY = 2
    PRESSURE = 3


SENSOR_NAMES = {
    SensorKind.TEMPERATURE: "Temperature sensor",
    SensorKind.HUMIDITY: "Humidity sensor",
    SensorKind.PRESSURE: "Pressure sensor",
}


@dataclass
class SensorSample:
    kind: SensorKind
    value: float


@dataclass
class TelemetryMessage:
    declared_length: int
    timestamp_ticks: int
    emitter_id: int
    samples: list[SensorSample] = field(default_factory=list)


def decode(data: bytes, received_length: int | None = None) -> TelemetryMessage:
    """Decode one message from the first *received_length* bytes of *data*.

    ``declared_length`` is only echoed back; entries are consumed until
    the received byte count is exhausted.  An unknown sensor tag rejects
    the whole message.
    """
    if received_length is None:
        received_length = len(data)
    if received_length > len(data):
        raise DecodeError(
            f"received length {received_length} exceeds buffer size {len(data)}")
    if received_length < HEADER_SIZE:
        raise DecodeError(
            f"message too short: {received_length} bytes, "
            f"header needs {HEADER_SIZE}")

    declared, ticks, emitter_id = struct.unpack_from(HEADER_FMT, data, 0)

    samples: list[SensorSample] = []
    offset = HEADER_SIZE
    while offset < received_length:
        if received_length - offset < ENTRY_SIZE:
            raise DecodeError(
                f"truncated sensor entry at offset {offset}: "
                f"{received_length - offset} of {ENTRY_SIZE} bytes")
        tag, value = struct.unpack_from(ENTRY_FMT, data, offset)
        try:
            kind = SensorKind(tag)
        except ValueError:
            raise DecodeError(
                f"unknown sensor tag {tag} at offset {offset}") from None
        samples.append(SensorSample(kind, value))
        offset += ENTRY_SIZE

    return TelemetryMessage(
        declared_length=declared,
        timestamp_ticks=ticks,
        emitter_id=emitter_id,
        samples=samples,
    )


def encode_message(emitter_id: int, timestamp_ticks: int,
                   samples: list[tuple[int, float]] | list[SensorSample],
                   declared_length: int | None = None) -> bytes:
    """Build a wire message from (kind, value) pairs or SensorSamples.

    *declared_length* defaults to the size of the encoded message.
    """
    body = bytearray()
    for s in samples:
        if isinstance(s, SensorSample):
            kind, value = s.kind, s.value
        else:
            kind, value = s
        body += struct.pack(ENTRY_FMT, int(kind), value)

    if declared_length is None:
        declared_length = HEADER_SIZE + len(body)
    header = struct.pack(HEADER_FMT, declared_length, timestamp_ticks, emitter_id)
    return header + bytes(body)
