"""HTTP responses as seen by the scanner, with reporting and (de)serialisation."""

from __future__ import annotations

import enum
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from urllib.parse import parse_qsl, urljoin, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

_RESET = "\x1b[0m"
_COLOURS = {
    "blue": "\x1b[34m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
}

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp"}
_HEADER_NAME_RE = re.compile(r"^[A-Za-z0-9!#$%&'*+\-.^_`|~]+$")
_DEFAULT_URL = "http://localhost/"


class OutputLevel(enum.Enum):
    """How much the scanner prints."""

    DEFAULT = "default"
    QUIET = "quiet"
    SILENT = "silent"


def _normalize_url(url: str) -> str:
    """Return a normalised absolute url, or raise ValueError if it cannot be parsed."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME_RE.match(scheme):
        raise ValueError(f"relative URL without a base: {url!r}")
    netloc = parts.netloc
    path = parts.path
    if scheme in _SPECIAL_SCHEMES:
        if not parts.hostname:
            raise ValueError(f"empty host: {url!r}")
        # touching .port validates it
        _ = parts.port
        netloc = netloc.lower()
        if not path:
            path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def path_length_of_url(url: str) -> int:
    """Length of the last segment of the url's path, ignoring one trailing slash."""
    path = urlsplit(url).path
    if not path.startswith("/"):
        return len(path)
    segments = path[1:].split("/")
    if segments and segments[-1] == "":
        segments.pop()
    return len(segments[-1]) if segments else 0


def url_depth(url: str) -> int:
    """Number of non-empty directories in the url's path."""
    return sum(1 for segment in urlsplit(url).path.split("/") if segment)


def status_colorizer(status: str) -> str:
    """Colour a status string according to its class."""
    first = status[:1]
    colour = {
        "1": "blue",
        "2": "green",
        "3": "yellow",
        "4": "red",
        "5": "red",
    }.get(first, "white")
    if status == "WLD":
        colour = "cyan"
    return f"{_COLOURS[colour]}{status}{_RESET}"


def _count_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _create_report_string(
    status: str, lines: str, words: str, chars: str, url: str, output_level: OutputLevel
) -> str:
    if output_level is OutputLevel.SILENT:
        return f"{url}\n"
    return f"{status_colorizer(status)} {lines:>8}l {words:>8}w {chars:>8}c {url}\n"


def _status_display(status: int) -> str:
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return f"{status} <unknown status code>"


def _valid_header_value(value: str) -> bool:
    return all(ch == "\t" or (ord(ch) >= 0x20 and ord(ch) != 0x7F) for ch in value)


@dataclass
class FeroxResponse:
    """A response to a submitted request, reduced to what the scanner needs."""

    url: str = _DEFAULT_URL
    original_url: str = ""
    status: int = HTTPStatus.OK
    text: str = ""
    content_length: int = 0
    line_count: int = 0
    word_count: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    wildcard: bool = False
    output_level: OutputLevel = OutputLevel.DEFAULT

    def __post_init__(self) -> None:
        self.url = _normalize_url(self.url)
        self.status = int(self.status)
        self.headers = {str(k).lower(): str(v) for k, v in dict(self.headers).items()}

    def __str__(self) -> str:
        return (
            f"FeroxResponse {{ url: {self.url}, status: {_status_display(self.status)}, "
            f"content-length: {self.content_length} }}"
        )

    def set_url(self, url: str) -> None:
        """Replace the url; an unparsable url is logged and ignored."""
        try:
            self.url = _normalize_url(url)
        except ValueError as exc:
            logger.warning("Could not parse %s into a Url: %s", url, exc)

    def set_text(self, text: str) -> None:
        """Replace the body and recompute its length, line and word counts."""
        self.text = text
        self.content_length = len(text.encode("utf-8"))
        lines = _count_lines(text)
        self.line_count = len(lines)
        self.word_count = sum(len(line.split()) for line in lines)

    def drop_text(self) -> None:
        """Free the body text."""
        self.text = ""

    def is_file(self) -> bool:
        """Guess whether the url names a file: an extension or query parameters."""
        parts = urlsplit(self.url)
        last = parts.path.split("/")[-1]
        has_query = bool(parse_qsl(parts.query, keep_blank_values=True))
        return has_query or "." in last

    def is_directory(self) -> bool:
        """Whether the response looks like a directory suitable for recursion."""
        if 300 <= self.status < 400:
            location = self.headers.get("location")
            if location is None:
                logger.debug("expected Location header, but none was found: %s", self)
                return False
            try:
                absolute = _normalize_url(urljoin(self.url, location))
            except ValueError:
                return False
            if f"{self.url}/" == absolute:
                logger.debug("found directory suitable for recursion: %s", self.url)
                return True
        elif 200 <= self.status < 300 or self.status == HTTPStatus.FORBIDDEN:
            if self.url.endswith("/"):
                logger.debug("%s is directory suitable for recursion", self.url)
                return True
        return False

    def reached_max_depth(self, base_depth: int, max_depth: int) -> bool:
        """Whether the url is at least ``max_depth`` directories below ``base_depth``."""
        if max_depth == 0:
            return False
        return url_depth(self.url) - base_depth >= max_depth

    def as_str(self) -> str:
        """Human readable report line(s)."""
        lines = str(self.line_count)
        words = str(self.word_count)
        chars = str(self.content_length)
        status = str(self.status)

        if self.wildcard and self.output_level in (OutputLevel.DEFAULT, OutputLevel.QUIET):
            wild = status_colorizer("WLD")
            message = (
                f"{wild} {lines:>8}l {words:>8}w {chars:>8}c Got {status_colorizer(status)} "
                f"for {self.url} (url length: {path_length_of_url(self.url)})\n"
            )
            if 300 <= self.status < 400:
                location = self.headers.get("location")
                if location is not None:
                    message += (
                        f"{wild} {'-':>9} {'-':>9} {'-':>9} {self.url} "
                        f"redirects to => {location}\n"
                    )
            return message

        return _create_report_string(status, lines, words, chars, self.url, self.output_level)

    def as_json(self) -> str:
        """NDJSON representation ending in a newline."""
        payload = {
            "type": "response",
            "url": self.url,
            "original_url": self.original_url,
            "path": urlsplit(self.url).path,
            "wildcard": self.wildcard,
            "status": self.status,
            "content_length": self.content_length,
            "line_count": self.line_count,
            "word_count": self.word_count,
            "headers": dict(self.headers),
        }
        try:
            return json.dumps(payload, separators=(",", ":")) + "\n"
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Could not convert {self.url} to JSON") from exc

    @classmethod
    def from_json(cls, text: str) -> FeroxResponse:
        """Build a response from JSON; unusable fields keep their defaults."""
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise ValueError("expected a JSON object")
        response = cls()

        def as_uint(value: object) -> int | None:
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                return value
            return None

        url = data.get("url")
        if isinstance(url, str):
            response.set_url(url)
        original = data.get("original_url")
        if isinstance(original, str):
            response.original_url = original
        status = as_uint(data.get("status"))
        if status is not None and 100 <= status <= 999:
            response.status = status
        for key in ("content_length", "line_count", "word_count"):
            number = as_uint(data.get(key))
            if number is not None:
                setattr(response, key, number)
        if "headers" in data:
            headers: dict[str, str] = {}
            raw = data["headers"]
            if isinstance(raw, Mapping):
                for name, value in raw.items():
                    value_str = value if isinstance(value, str) else ""
                    name = name if _HEADER_NAME_RE.match(name) else "Unknown"
                    if not _valid_header_value(value_str):
                        value_str = "Unknown"
                    headers[name.lower()] = value_str
            response.headers = headers
        wildcard = data.get("wildcard")
        if isinstance(wildcard, bool):
            response.wildcard = wildcard
        return response