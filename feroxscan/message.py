"""Log entries that render either as coloured text or as NDJSON."""

from __future__ import annotations

import json
from dataclasses import dataclass

_RESET = "\x1b[0m"
_DIM = "\x1b[2m"
_BLACK_FG = "\x1b[30m"

_BG = {
    "red": "\x1b[41m",
    "yellow": "\x1b[43m",
    "magenta": "\x1b[45m",
    "cyan": "\x1b[46m",
    "white": "\x1b[47m",
}

_LEVELS = {
    "ERROR": ("ERR", "red"),
    "WARN": ("WRN", "red"),
    "INFO": ("INF", "cyan"),
    "DEBUG": ("DBG", "yellow"),
    "TRACE": ("TRC", "magenta"),
    "WILDCARD": ("WLD", "cyan"),
}


def _dim(text: str) -> str:
    return f"{_DIM}{text}{_RESET}"


@dataclass
class FeroxMessage:
    """A single log entry."""

    kind: str = ""
    message: str = ""
    level: str = ""
    time_offset: float = 0.0
    module: str = ""

    def as_str(self) -> str:
        """Human readable, colourised representation ending in a newline."""
        name, colour = _LEVELS.get(self.level, ("UNK", "white"))
        badge = f"{_BG[colour]}{_BLACK_FG}{name}{_RESET}"
        offset = _dim(f"{self.time_offset:10.3f}")
        return f"{badge} {offset} {self.module} {_dim(self.message)}\n"

    def as_json(self) -> str:
        """NDJSON representation ending in a newline."""
        payload = {
            "type": self.kind,
            "message": self.message,
            "level": self.level,
            "time_offset": self.time_offset,
            "module": self.module,
        }
        try:
            text = json.dumps(payload, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Could not convert {self.level}:{self.message} to JSON") from exc
        return text + "\n"

    @classmethod
    def from_json(cls, text: str) -> FeroxMessage:
        """Build a message from its JSON representation."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return cls(
            kind=str(data.get("type", "")),
            message=str(data.get("message", "")),
            level=str(data.get("level", "")),
            time_offset=float(data.get("time_offset", 0.0)),
            module=str(data.get("module", "")),
        )