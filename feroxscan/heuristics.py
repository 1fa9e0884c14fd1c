"""Pre-scan checks: wildcard detection and target connectivity."""

from __future__ import annotations

import logging
import sys
import urllib.error
import urllib.request
import uuid
from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, field
from urllib.parse import urljoin

from .constants import DEFAULT_STATUS_CODES
from .filters import FeroxFilters, WildcardFilter
from .response import (
    FeroxResponse,
    OutputLevel,
    _normalize_url,
    path_length_of_url,
    status_colorizer,
)

logger = logging.getLogger(__name__)

#: Length of one hex-formatted UUID, used when detecting wildcard responses
UUID_LENGTH = 32

_RESET = "\x1b[0m"
_YELLOW = "\x1b[33m"
_CYAN = "\x1b[36m"


def _yellow(text: object) -> str:
    return f"{_YELLOW}{text}{_RESET}"


def _cyan(text: object) -> str:
    return f"{_CYAN}{text}{_RESET}"


def unique_string(length: int) -> str:
    """Concatenate ``length`` hyphen-less lowercase UUIDs (32 characters each)."""
    return "".join(uuid.uuid4().hex for _ in range(length))


def _format_url(target: str, word: str, slash: str | None = None) -> str:
    """Append ``word`` (and an optional trailing slash) to the target url."""
    base = _normalize_url(target)
    if not word:
        return base
    if not base.endswith("/"):
        base += "/"
    return _normalize_url(urljoin(base, word + (slash or "")))


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: D102
        return None


def _fetch(url: str, timeout: float = 7.0) -> FeroxResponse:
    """Request ``url`` without following redirects and wrap the result."""
    opener = urllib.request.build_opener(_NoRedirect())
    try:
        raw = opener.open(url, timeout=timeout)
    except urllib.error.HTTPError as err:
        raw = err
    with raw:
        body = raw.read()
        headers = {key: value for key, value in raw.headers.items()}
        status = raw.status if getattr(raw, "status", None) is not None else raw.code
        final_url = raw.geturl() or url
    declared = headers.get("Content-Length") or headers.get("content-length")
    try:
        length = int(declared) if declared is not None else 0
    except ValueError:
        length = 0
    response = FeroxResponse(url=final_url, status=status, headers=headers)
    response.set_text(body.decode("utf-8", errors="replace"))
    response.content_length = length
    return response


def _print(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


@dataclass
class HeuristicTests:
    """Checks run against targets before a scan starts."""

    request: Callable[[str], FeroxResponse] = _fetch
    filters: FeroxFilters = field(default_factory=FeroxFilters)
    status_codes: Collection[int] = DEFAULT_STATUS_CODES
    dont_filter: bool = False
    add_slash: bool = False
    output_level: OutputLevel = OutputLevel.DEFAULT
    on_report: Callable[[FeroxResponse], None] | None = None
    printer: Callable[[str], None] = _print

    def _verbose(self) -> bool:
        return self.output_level in (OutputLevel.DEFAULT, OutputLevel.QUIET)

    def _template(self, body: str, length: int) -> str:
        return (
            f"{status_colorizer('WLD')} {'-':>9} {'-':>9} {'-':>9} "
            + body.format(auto=_yellow("auto-filtering"), length=_cyan(length))
            + f"; toggle this behavior by using {_yellow('--dont-filter')}\n"
        )

    def wildcard(self, target_url: str) -> int:
        """Probe ``target_url`` for wildcard responses and add a filter if found.

        Returns how many times the caller's progress bar should be advanced.
        Raises RuntimeError when a probe is uninteresting or filtered.
        """
        if self.dont_filter:
            return 0

        first = self._make_wildcard_request(target_url, 1)
        wildcard = WildcardFilter(dont_filter=self.dont_filter)
        wc_length = first.content_length

        if wc_length == 0:
            self.filters.push(wildcard)
            return 1

        second = self._make_wildcard_request(target_url, 3)
        wc2_length = second.content_length

        if wc2_length == wc_length + UUID_LENGTH * 2:
            # requested url is reflected in the response: a custom 404
            url_len = path_length_of_url(_normalize_url(target_url))
            wildcard.dynamic = wc_length - url_len
            if self._verbose():
                self.printer(
                    self._template(
                        "Wildcard response is dynamic; {auto} ({length} + url length) responses",
                        wildcard.dynamic,
                    )
                )
        elif wc_length == wc2_length:
            wildcard.size = wc_length
            if self._verbose():
                self.printer(
                    self._template(
                        "Wildcard response is static; {auto} {length} responses",
                        wildcard.size,
                    )
                )

        self.filters.push(wildcard)
        return 2

    def _make_wildcard_request(self, target_url: str, length: int) -> FeroxResponse:
        """Request a url that should not exist; return it if the server answers anyway."""
        slash = "/" if self.add_slash else None
        nonexistent = _format_url(target_url, unique_string(length), slash)
        response = self.request(nonexistent)

        if response.status not in self.status_codes:
            raise RuntimeError("uninteresting status code")

        response.original_url = target_url
        response.wildcard = True

        if self.filters.should_filter_response(response):
            raise RuntimeError("filtered response")

        if self._verbose() and self.on_report is not None:
            self.on_report(response)

        return response

    def connectivity(self, target_urls: Iterable[str]) -> list[str]:
        """Return the targets that answered; raise ConnectionError if none did."""
        good_urls: list[str] = []

        for target_url in target_urls:
            try:
                request_url = _format_url(target_url, "")
            except ValueError as exc:
                logger.warning("%s; skipping...", exc)
                continue

            try:
                self.request(request_url)
            except (OSError, ValueError, RuntimeError) as exc:
                if self._verbose():
                    if ":SSL" in str(exc):
                        self.printer(
                            f"Could not connect to {target_url} due to SSL errors "
                            "(run with -k to ignore), skipping...\n"
                        )
                    else:
                        self.printer(f"Could not connect to {target_url}, skipping...\n")
                logger.warning("%s", exc)
                continue

            good_urls.append(target_url)

        if not good_urls:
            raise ConnectionError("Could not connect to any target provided")

        return good_urls