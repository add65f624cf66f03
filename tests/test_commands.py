"""Test the command dispatcher and CLI endpoint parsing.

Run from the repo root:
    python3 tests/test_commands.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import argparse
import time

from avgmeteo.cli import parse_endpoint
from avgmeteo.commands import CommandDispatcher, MENU
from avgmeteo.config import SessionConfig, add_arguments
from avgmeteo.decoder import SensorKind, encode_message
from avgmeteo.session import SessionController, SessionPhase


class QueueTransport:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def read(self, n):
        if self._chunks:
            return self._chunks.pop(0)
        time.sleep(0.005)
        return b""

    def shutdown_read(self):
        pass

    def close(self):
        self.closed = True


def make_dispatcher(chunks=()):
    out = []
    transport = QueueTransport(chunks)
    ctl = SessionController(
        "localhost", 5000, SessionConfig(idle_delay=0.01),
        connect=lambda host, port: transport, echo=out.append)
    return CommandDispatcher(ctl, echo=out.append), ctl, out


def wait_until(pred, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if pred():
            return True
        time.sleep(0.005)
    return False


def test_unknown_command():
    print("test_unknown_command...", end="")

    d, ctl, out = make_dispatcher()
    assert d.dispatch("hello") is True
    assert d.dispatch("Start") is True
    assert out == ["\nCommand hello not found...\n",
                   "\nCommand Start not found...\n"]
    assert ctl.phase is SessionPhase.IDLE

    print(" OK")


def test_info_and_statistics_idle():
    print("test_info_and_statistics_idle...", end="")

    d, _, out = make_dispatcher()
    d.dispatch("info")
    d.dispatch("statistics\n")
    assert out[0] == ("\nAverage temperature = 0.0\n"
                      "Average humidity = 0.0\n"
                      "Average pressure = 0.0\n")
    assert out[1] == "\nConnected = False, Messages received = 0"

    print(" OK")


def test_start_info_stop():
    print("test_start_info_stop...", end="")

    data = encode_message(1, 0, [(SensorKind.TEMPERATURE, 123.456),
                                 (SensorKind.HUMIDITY, 10.0)])
    d, ctl, out = make_dispatcher([data])

    assert d.dispatch("start") is True
    assert wait_until(lambda: ctl.statistics().message_count == 1)

    out.clear()
    d.dispatch("info")
    d.dispatch("statistics")
    assert out[0] == ("\nAverage temperature = 12.35\n"
                      "Average humidity = 1.0\n"
                      "Average pressure = 0.0\n")
    assert out[1] == "\nConnected = True, Messages received = 1"

    assert d.dispatch("stop") is True
    assert ctl.phase is SessionPhase.IDLE
    out.clear()
    d.dispatch("statistics")
    assert out == ["\nConnected = False, Messages received = 0"]

    print(" OK")


def test_exit_ends_run():
    print("test_exit_ends_run...", end="")

    d, ctl, out = make_dispatcher()
    d.run(iter(["statistics", "exit", "start"]))
    assert ctl.phase is SessionPhase.EXITED
    assert out[0] == MENU
    assert not any("Connected to" in line for line in out)

    print(" OK")


def test_eof_exits():
    print("test_eof_exits...", end="")

    d, ctl, _ = make_dispatcher()
    d.run(iter(["start\n"]))
    assert ctl.phase is SessionPhase.EXITED
    assert not ctl.is_running

    print(" OK")


def test_parse_endpoint():
    print("test_parse_endpoint...", end="")

    assert parse_endpoint("localhost:5000") == ("localhost", 5000)
    assert parse_endpoint("tcp://10.0.0.2:4040") == ("10.0.0.2", 4040)
    for bad in ("localhost", "tcp://localhost", ":5000", "host:port", "host:99999",
                "host:0", "tcp://host:0", "tcp://host:99999"):
        try:
            parse_endpoint(bad)
        except argparse.ArgumentTypeError:
            pass
        else:
            raise AssertionError(f"{bad!r} should be rejected")

    print(" OK")


def test_config_from_args():
    print("test_config_from_args...", end="")

    parser = argparse.ArgumentParser()
    add_arguments(parser)
    config = SessionConfig.from_args(parser.parse_args([]))
    assert config == SessionConfig()

    args = parser.parse_args(["--idle-delay", "0.5", "--buffer-size", "512"])
    config = SessionConfig.from_args(args)
    assert config.idle_delay == 0.5
    assert config.buffer_size == 512
    assert config.window == 10

    print(" OK")


if __name__ == "__main__":
    print("avgmeteo command tests")
    print("======================\n")

    test_unknown_command()
    test_info_and_statistics_idle()
    test_start_info_stop()
    test_exit_ends_run()
    test_eof_exits()
    test_parse_endpoint()
    test_config_from_args()

    print("\nAll tests passed.")
