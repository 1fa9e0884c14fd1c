"""Link extraction from response bodies and robots.txt files."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

from .response import _SPECIAL_SCHEMES, FeroxResponse, _normalize_url

logger = logging.getLogger(__name__)

#: Expression used to find links in response bodies
LINKFINDER_REGEX = re.compile(
    r"""(?:"|')(((?:[a-zA-Z]{1,10}://|//)[^"'/]{1,}\.[a-zA-Z]{2,}[^"']{0,})"""
    r"""|((?:/|\.\./|\./)[^"'><,;| *()(%%$^/\\\[\]][^"'><,;|()]{1,})"""
    r"""|([a-zA-Z0-9_\-/]{1,}/[a-zA-Z0-9_\-/]{1,}\.(?:[a-zA-Z]{1,4}|action)(?:[\?|#][^"|']{0,}|))"""
    r"""|([a-zA-Z0-9_\-/]{1,}/[a-zA-Z0-9_\-/]{3,}(?:[\?|#][^"|']{0,}|))"""
    r"""|([a-zA-Z0-9_\-.]{1,}\.(?:php|asp|aspx|jsp|json|action|html|js|txt|xml)(?:[\?|#][^"|']{0,}|)))"""
    r"""(?:"|')"""
)

#: Expression used to pull url paths out of robots.txt
ROBOTS_TXT_REGEX = re.compile(
    r"^ *(Allow|Disallow): *(?P<url_path>[a-zA-Z0-9._/?#@!&'()+,;%=-]+?)$",
    re.MULTILINE,
)

_RELATIVE_ERROR = "relative URL without a base"


class ExtractionTarget(enum.Enum):
    """Which kind of extraction to perform."""

    RESPONSE_BODY = "response_body"
    ROBOTS_TXT = "robots_txt"


def _encode_path(path: str) -> str:
    """Make ``path`` usable as the path of a url, as setting a url's path would."""
    encoded = path.replace("?", "%3F").replace("#", "%23")
    return encoded if encoded.startswith("/") else f"/{encoded}"


@dataclass
class Extractor:
    """Finds links in a response body or in robots.txt content.

    A response is needed for body extraction; a url is needed for robots.txt extraction.
    """

    target: ExtractionTarget = ExtractionTarget.RESPONSE_BODY
    response: FeroxResponse | None = None
    url: str = ""

    def __post_init__(self) -> None:
        if not self.url and self.response is None:
            raise ValueError("Extractor requires a URL or a FeroxResponse be specified")

    def base_url(self) -> str:
        """The url against which extracted links are resolved."""
        if self.target is ExtractionTarget.RESPONSE_BODY:
            if self.response is None:
                raise ValueError("body extraction requires a FeroxResponse")
            return self.response.url
        try:
            return _normalize_url(self.url)
        except ValueError as exc:
            raise ValueError(f"Could not parse {self.url}: {exc}") from exc

    def get_sub_paths_from_path(self, path: str) -> list[str]:
        """Every sub-path of ``path``, longest first; parent folders end with a slash."""
        parts = [part for part in path.split("/") if part]
        paths = []
        for length in range(len(parts), 0, -1):
            candidate = "/".join(parts[:length])
            if length < len(parts):
                candidate += "/"
            paths.append(candidate)
        return paths

    def join_link(self, link: str) -> str:
        """Resolve ``link`` against the base url; raise ValueError if that fails."""
        base = self.base_url()
        scheme = urlsplit(base).scheme
        special = scheme in _SPECIAL_SCHEMES
        candidate = link.replace("\\", "/") if special else link
        try:
            if special and candidate.startswith("//"):
                joined = f"{scheme}://{candidate.lstrip('/')}"
            else:
                joined = urljoin(base, candidate)
            return _normalize_url(joined)
        except ValueError as exc:
            raise ValueError(f"Could not join {base} with {link}") from exc

    def _add_sub_paths(self, url_path: str, links: set[str]) -> None:
        for sub_path in self.get_sub_paths_from_path(url_path):
            links.add(self.join_link(sub_path))

    def sub_links(self, url_path: str) -> set[str]:
        """Absolute urls for every sub-path of ``url_path``."""
        links: set[str] = set()
        self._add_sub_paths(url_path, links)
        return links

    def _add_sub_paths_logged(self, url_path: str, links: set[str]) -> None:
        try:
            self._add_sub_paths(url_path, links)
        except ValueError:
            logger.warning("could not add sub-paths from %s to %s", url_path, links)

    def extract_from_body(self) -> set[str]:
        """Links found in the response body that belong to the response's host."""
        if self.response is None:
            raise ValueError("body extraction requires a FeroxResponse")

        own = urlsplit(self.response.url)
        links: set[str] = set()

        for match in LINKFINDER_REGEX.finditer(self.response.text):
            link = match.group(0).strip("'\"")
            try:
                absolute = _normalize_url(link)
            except ValueError as exc:
                if _RELATIVE_ERROR in str(exc):
                    self._add_sub_paths_logged(link, links)
                else:
                    logger.warning("Could not parse given url: %s", exc)
                continue

            parts = urlsplit(absolute)
            if parts.hostname != own.hostname:
                # not part of the original target
                continue
            self._add_sub_paths_logged(parts.path, links)

        return links

    def extract_from_robots(self, robots_text: str) -> set[str]:
        """Links named by Allow and Disallow lines of a robots.txt body."""
        base = self.base_url()
        links: set[str] = set()
        for match in ROBOTS_TXT_REGEX.finditer(robots_text):
            path = _encode_path(match.group("url_path"))
            try:
                self._add_sub_paths(path, links)
            except ValueError:
                logger.warning("could not add sub-paths from %s%s to %s", base, path, links)
        return links

    def expected_requests(self, num_links: int, num_extensions: int) -> int:
        """Number of requests the extracted links add to the scan."""
        return num_links * max(num_extensions, 1)