"""Logging set-up that renders records as scanner log messages."""

from __future__ import annotations

import logging
import sys
import time
from typing import IO

from .message import FeroxMessage

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_PACKAGE_LOGGER = "feroxscan"

_LEVEL_NAMES = {
    "WARNING": "WARN",
    "CRITICAL": "ERROR",
}


def level_for_verbosity(verbosity: int) -> int:
    """Translate a count of -v flags into a logging level."""
    if verbosity <= 0:
        return logging.ERROR
    if verbosity == 1:
        return logging.WARNING
    if verbosity == 2:
        return logging.INFO
    if verbosity == 3:
        return logging.DEBUG
    return TRACE


class FeroxLogHandler(logging.Handler):
    """Writes each record to a stream, and optionally to a debug log file."""

    def __init__(
        self,
        stream: IO[str] | None = None,
        debug_log: str | None = None,
        json_output: bool = False,
        start: float | None = None,
    ) -> None:
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr
        self.json_output = json_output
        self.start = time.perf_counter() if start is None else start
        self._file: IO[str] | None = None
        if debug_log:
            try:
                self._file = open(debug_log, "a", encoding="utf-8")
            except OSError as exc:
                raise OSError(f"Could not open {debug_log}") from exc

    def _to_message(self, record: logging.LogRecord) -> FeroxMessage:
        return FeroxMessage(
            kind="log",
            message=record.getMessage(),
            level=_LEVEL_NAMES.get(record.levelname, record.levelname),
            time_offset=time.perf_counter() - self.start,
            module=record.name,
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = self._to_message(record)
            self.stream.write(entry.as_str())
            self.stream.flush()
            if self._file is not None:
                text = entry.as_json() if self.json_output else entry.as_str()
                self._file.write(text)
                self._file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.acquire()
        try:
            if self._file is not None:
                self._file.close()
                self._file = None
        finally:
            self.release()
        super().close()


def initialize(
    verbosity: int = 0,
    debug_log: str | None = None,
    json_output: bool = False,
    stream: IO[str] | None = None,
) -> FeroxLogHandler:
    """Attach a FeroxLogHandler to the package logger and return it."""
    logger = logging.getLogger(_PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if isinstance(existing, FeroxLogHandler):
            logger.removeHandler(existing)
            existing.close()
    handler = FeroxLogHandler(stream=stream, debug_log=debug_log, json_output=json_output)
    logger.addHandler(handler)
    logger.setLevel(level_for_verbosity(verbosity))
    logger.propagate = False
    return handler