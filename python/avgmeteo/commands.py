"""Maps command lines to session controller operations."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from .decoder import SensorKind
from .session import SessionController

logger = logging.getLogger(__name__)

MENU = """
1. start      - connect to the emitter and begin processing messages
2. stop       - stop processing messages and disconnect
3. info       - show the rolling average of every sensor
4. statistics - show connection state and number of messages received
5. exit       - quit

Enter a command"""


class CommandDispatcher:
    """Runs ``start``/``stop``/``info``/``statistics``/``exit`` on a controller."""

    def __init__(self, controller: SessionController,
                 echo: Callable[[str], None] = print) -> None:
        self.controller = controller
        self._echo = echo
        self._handlers: dict[str, Callable[[], bool]] = {
            "start": self._start,
            "stop": self._stop,
            "info": self._info,
            "statistics": self._statistics,
            "exit": self._exit,
        }

    def dispatch(self, line: str) -> bool:
        """Run one command line.  Returns False once ``exit`` has completed."""
        command = line.rstrip("\r\n")
        handler = self._handlers.get(command)
        if handler is None:
            self._echo(f"\nCommand {command} not found...\n")
            return True
        logger.debug("command %r", command)
        return handler()

    def run(self, source: Iterable[str]) -> None:
        """Dispatch lines from *source* until ``exit``; EOF counts as ``exit``."""
        self._echo(MENU)
        for line in source:
            if not self.dispatch(line):
                return
            self._echo(MENU)
        logger.info("command source exhausted, exiting")
        self._exit()

    def _start(self) -> bool:
        self.controller.start()
        return True

    def _stop(self) -> bool:
        self.controller.stop()
        return True

    def _info(self) -> bool:
        avgs = self.controller.info()
        self._echo(
            f"\nAverage temperature = {round(avgs[SensorKind.TEMPERATURE], 2)}\n"
            f"Average humidity = {round(avgs[SensorKind.HUMIDITY], 2)}\n"
            f"Average pressure = {round(avgs[SensorKind.PRESSURE], 2)}\n")
        return True

    def _statistics(self) -> bool:
        stats = self.controller.statistics()
        self._echo(f"\nConnected = {stats.connected}, "
                   f"Messages received = {stats.message_count}")
        return True

    def _exit(self) -> bool:
        self.controller.exit()
        return False
