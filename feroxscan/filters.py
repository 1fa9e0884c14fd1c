"""Filters that decide whether a response is hidden from the user."""

from __future__ import annotations

import logging
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from .response import FeroxResponse, path_length_of_url

logger = logging.getLogger(__name__)


class FeroxFilter(ABC):
    """A rule that marks responses which should not be reported."""

    @abstractmethod
    def should_filter_response(self, response: FeroxResponse) -> bool:
        """Return True when ``response`` should be hidden."""


@dataclass
class WildcardFilter(FeroxFilter):
    """Hides wildcard responses found while probing for non-existent resources.

    ``size`` is a static response length; ``dynamic`` is a length that, added to the
    length of the requested path, gives the response length of a reflected custom 404.
    Either is None while unknown.
    """

    dont_filter: bool = False
    size: int | None = None
    dynamic: int | None = None

    def should_filter_response(self, response: FeroxResponse) -> bool:
        # --dont-filter applies to wildcard filters only
        if self.dont_filter:
            return False

        if self.size is not None and self.size == response.content_length:
            logger.debug("static wildcard: filtered out %s", response.url)
            return True

        if self.size is None and response.content_length == 0:
            logger.debug("static wildcard: filtered out %s", response.url)
            return True

        if self.dynamic is not None:
            url_len = path_length_of_url(response.url)
            if url_len + self.dynamic == response.content_length:
                logger.debug("dynamic wildcard: filtered out %s", response.url)
                return True

        return False


@dataclass
class StatusCodeFilter(FeroxFilter):
    """Hides responses with a given status code (-C|--filter-status)."""

    filter_code: int = 0

    def should_filter_response(self, response: FeroxResponse) -> bool:
        if response.status == self.filter_code:
            logger.debug(
                "filtered out %s based on --filter-status of %s",
                response.url,
                self.filter_code,
            )
            return True
        return False


@dataclass
class LinesFilter(FeroxFilter):
    """Hides responses whose body has a given number of lines (-N|--filter-lines)."""

    line_count: int = 0

    def should_filter_response(self, response: FeroxResponse) -> bool:
        return response.line_count == self.line_count


@dataclass
class WordsFilter(FeroxFilter):
    """Hides responses whose body has a given number of words (-W|--filter-words)."""

    word_count: int = 0

    def should_filter_response(self, response: FeroxResponse) -> bool:
        return response.word_count == self.word_count


@dataclass
class SizeFilter(FeroxFilter):
    """Hides responses of a given content length (-S|--filter-size)."""

    content_length: int = 0

    def should_filter_response(self, response: FeroxResponse) -> bool:
        return response.content_length == self.content_length


@dataclass
class RegexFilter(FeroxFilter):
    """Hides responses whose body matches a regular expression (-X|--filter-regex).

    Two filters are equal when their raw expressions are equal.
    """

    raw_string: str
    compiled: re.Pattern[str] = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.compiled = re.compile(self.raw_string)

    def should_filter_response(self, response: FeroxResponse) -> bool:
        return self.compiled.search(response.text) is not None


class FeroxFilters:
    """Thread-safe collection of filters without duplicates."""

    def __init__(self, filters: Iterable[FeroxFilter] = ()) -> None:
        self._lock = threading.Lock()
        self._filters: list[FeroxFilter] = []
        for item in filters:
            self.push(item)

    def __len__(self) -> int:
        with self._lock:
            return len(self._filters)

    def __iter__(self) -> Iterator[FeroxFilter]:
        with self._lock:
            return iter(list(self._filters))

    def push(self, filter: FeroxFilter) -> None:
        """Add a filter unless an equal one is already present."""
        with self._lock:
            if filter in self._filters:
                return
            self._filters.append(filter)

    def should_filter_response(
        self,
        response: FeroxResponse,
        on_wildcard_filtered: Callable[[], None] | None = None,
    ) -> bool:
        """Whether any filter hides ``response``.

        ``on_wildcard_filtered`` is called when the matching filter is a wildcard filter.
        """
        with self._lock:
            filters = list(self._filters)
        for item in filters:
            if item.should_filter_response(response):
                if isinstance(item, WildcardFilter) and on_wildcard_filtered is not None:
                    on_wildcard_filtered()
                return True
        return False


def build_filters(
    status_codes: Iterable[int] = (),
    line_counts: Iterable[int] = (),
    word_counts: Iterable[int] = (),
    sizes: Iterable[int] = (),
    regexes: Iterable[str] = (),
) -> FeroxFilters:
    """Create the collection of user-supplied filters.

    Regular expressions that do not compile are logged and skipped.
    """
    filters = FeroxFilters()
    for code in status_codes:
        filters.push(StatusCodeFilter(filter_code=code))
    for count in line_counts:
        filters.push(LinesFilter(line_count=count))
    for count in word_counts:
        filters.push(WordsFilter(word_count=count))
    for size in sizes:
        filters.push(SizeFilter(content_length=size))
    for raw in regexes:
        try:
            compiled = RegexFilter(raw_string=raw)
        except re.error as exc:
            logger.warning("%s; skipping...", exc)
            continue
        filters.push(compiled)
    return filters