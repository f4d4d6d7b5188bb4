"""Bridges dispatch log events to stdlib logging and an optional sink."""

from __future__ import annotations

import logging
from typing import Callable, Literal, Optional

LogLevel = Literal["debug", "info", "warn", "error"]
LogSink = Callable[[str, str], None]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class DispatchLog:
    """Writes to ``logger`` and forwards the same message to ``sink``.

    The sink is user code; anything it raises is discarded so that a broken
    sink can never change the outcome of a request.
    """

    def __init__(self, logger: logging.Logger, sink: Optional[LogSink] = None) -> None:
        self._logger = logger
        self._sink = sink

    def emit(self, level: LogLevel, message: str) -> None:
        self._logger.log(_LEVELS[level], message)
        if self._sink is None:
            return
        try:
            self._sink(level, message)
        except Exception:  # noqa: BLE001
            pass

    def debug(self, message: str) -> None:
        self.emit("debug", message)

    def info(self, message: str) -> None:
        self.emit("info", message)

    def warn(self, message: str) -> None:
        self.emit("warn", message)

    def error(self, message: str) -> None:
        self.emit("error", message)


__all__ = ["DispatchLog", "LogLevel", "LogSink"]
