#!/usr/bin/env python3
"""Generate synthetic sensor messages over TCP for manual testing.

Serves one message per interval on localhost:5000.

Usage:
    python examples/sensor_emulator.py

Then in another terminal:
    avgmeteo tcp://localhost:5000
"""

import math
import random
import socket
import time

from avgmeteo.decoder import SensorKind, encode_message

EMITTER_ID = 1
TICKS_PER_SECOND = 10_000_000  # 100 ns ticks


def make_message(t: float) -> bytes:
    """Build one message at time t (seconds)."""
    temp = 22.0 + 5.0 * math.sin(2 * math.pi * t / 60.0) + random.gauss(0, 0.3)
    hum = 50.0 + 15.0 * math.sin(2 * math.pi * t / 120.0) + random.gauss(0, 0.5)
    pres = 1013.0 + 20.0 * math.sin(2 * math.pi * t / 300.0) + random.gauss(0, 1.0)

    return encode_message(
        EMITTER_ID,
        int(t * TICKS_PER_SECOND),
        [
            (SensorKind.TEMPERATURE, temp),
            (SensorKind.HUMIDITY, hum),
            (SensorKind.PRESSURE, pres),
        ],
    )


def serve(host: str = "0.0.0.0", port: int = 5000, interval: float = 1.0):
    """Accept TCP connections and stream messages."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind((host, port))
    srv.listen(1)
    print(f"Listening on {host}:{port}, one message every {interval}s  (Ctrl-C to stop)")

    while True:
        print("Waiting for connection...")
        conn, addr = srv.accept()
        print(f"Client connected: {addr}")
        t0 = time.monotonic()
        seq = 0
        try:
            with conn:
                while True:
                    conn.sendall(make_message(time.monotonic() - t0))
                    seq += 1
                    if seq % 10 == 0:
                        print(f"  sent {seq} messages")
                    time.sleep(interval)
        except (BrokenPipeError, ConnectionResetError):
            print("Client disconnected.")
        except KeyboardInterrupt:
            print("\nShutting down.")
            srv.close()
            return


if __name__ == "__main__":
    serve()
