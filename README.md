# feroxscan

The pieces of a recursive web content discovery scanner, usable from Python:
response modelling, response filters, link extraction from pages and
`robots.txt`, wildcard detection, log formatting, and the helpers that prepare
targets and wordlists for a scan.

The package has no third-party runtime dependencies.

## What is inside

| Module                 | Purpose |
|------------------------|---------|
| `feroxscan.constants`  | Defaults: status codes to report, default wordlist and config file name, user agents, similarity threshold, limits |
| `feroxscan.message`    | `FeroxMessage`, a log entry that renders as a coloured line or as NDJSON |
| `feroxscan.logger`     | `initialize`, `level_for_verbosity` and `FeroxLogHandler`, which route `logging` records to a stream and an optional debug log |
| `feroxscan.response`   | `FeroxResponse` and `OutputLevel`; helpers `path_length_of_url`, `url_depth`, `status_colorizer` |
| `feroxscan.filters`    | `FeroxFilter` and its implementations `WildcardFilter`, `StatusCodeFilter`, `LinesFilter`, `WordsFilter`, `SizeFilter`, `RegexFilter`; the `FeroxFilters` collection and `build_filters` |
| `feroxscan.extractor`  | `Extractor` and `ExtractionTarget`, for pulling same-host links out of bodies and `robots.txt` text |
| `feroxscan.heuristics` | `HeuristicTests` for wildcard and connectivity checks, and `unique_string` |
| `feroxscan.runner`     | Wordlist reading, denylist checks, output file naming, and building and running parallel scan commands |

## Examples

### Responses

A `FeroxResponse` counts the lines and words of its body, tells whether its
url looks like a file or a directory worth recursing into, and serialises to
and from one line of JSON:

```python
from feroxscan.response import FeroxResponse

response = FeroxResponse()              # http://localhost/, status 200
response.set_url("http://localhost/admin/")
response.set_text("hello there\nsecond line")

response.line_count, response.word_count   # (2, 4)
response.is_directory()                    # True: 2xx and the url ends in '/'
line = response.as_json()                  # NDJSON, ending in a newline
again = FeroxResponse.from_json(line)
```

A 3xx response counts as a directory when its `Location` header points at the
same url with a slash added. `is_file()` is true when the last path segment
contains a dot or the url has query parameters. `reached_max_depth(base_depth,
max_depth)` tells a recursive scanner when to stop; a `max_depth` of 0 means
no limit. An unparsable url given to `set_url` is logged and ignored.

`as_str()` gives the report line the user sees; its shape depends on
`output_level` (`OutputLevel.SILENT` prints only the url) and on whether the
response is a wildcard.

### Filters

Filters decide which responses are not shown to the user. `build_filters`
turns the usual command-line style options into a `FeroxFilters` collection;
adding an equal filter twice has no effect, and a regular expression that does
not compile is logged and skipped.

```python
from feroxscan.filters import WildcardFilter, build_filters

filters = build_filters(
    status_codes=[404],
    line_counts=[],
    word_counts=[12],
    sizes=[],
    regexes=[r"not found"],
)
filters.push(WildcardFilter())

hidden = filters.should_filter_response(response, on_wildcard_filtered=lambda: None)
```

The callback is invoked whenever a wildcard filter is the one that hid a
response, so a caller can keep its own statistics. A `WildcardFilter` with
`dont_filter=True` never hides anything.

### Link extraction

An `Extractor` finds links in a response body (only those on the same host as
the response) or in `robots.txt` text, and expands each one into all of its
parent directories: `homepage/assets/img/logo.svg` also yields
`homepage/assets/img/`, `homepage/assets/` and `homepage/`. Links are returned
as absolute urls.

```python
from feroxscan.extractor import Extractor, ExtractionTarget

extractor = Extractor(target=ExtractionTarget.ROBOTS_TXT, url="http://localhost")
links = extractor.extract_from_robots("User-agent: *\nDisallow: /private/area\n")
# {"http://localhost/private/", "http://localhost/private/area"}

body_extractor = Extractor(response=response)   # RESPONSE_BODY is the default target
found = body_extractor.extract_from_body()
```

`expected_requests(num_links, num_extensions)` gives how many requests the
extracted links add to a scan. The extractor does not fetch anything: the
caller supplies the response or the `robots.txt` text.

### Wildcard heuristics

`HeuristicTests.wildcard(target_url)` requests paths made of random
32-character identifiers (`unique_string(n)` returns `n` of them joined). When
the server answers with one of the configured status codes, a `WildcardFilter`
is added to the `filters` collection: static when both answers have the same
length, dynamic when the length grows with the requested url. It returns how
far to advance a progress counter, and raises `RuntimeError` when a probe gives
an uninteresting status or is itself filtered.

`HeuristicTests.connectivity(target_urls)` returns the targets that answered
and raises `ConnectionError` when none did.

```python
from feroxscan.heuristics import HeuristicTests

tests = HeuristicTests(filters=filters)
live = tests.connectivity(["http://localhost/"])
tests.wildcard("http://localhost/")
```

The default `request` function uses `urllib`, does not follow redirects and
takes the content length from the `Content-Length` header. Any callable that
takes a url and returns a `FeroxResponse` can be passed instead.

### Preparing a scan

```python
from feroxscan.runner import check_denylists, read_wordlist, slugify_filename

words = read_wordlist("words.txt")     # skips blank lines and lines starting with '#'
check_denylists(["http://localhost/"], regex_denylist=[r"logout"], url_denylist=[])
name = slugify_filename("http://localhost/api", "ferox", "log")
```

`check_denylists` raises `ValueError` when a denylist entry would block one of
the starting targets, since such a scan could never begin.

For scanning many targets at once, `parallel_commands(argv, targets, output)`
builds one child command line per target from an original argument list: it
drops stdin, quiet and verbosity options, removes `--parallel N`, forces
`--silent` and appends `-u <target>`. When `output` is given, a log directory
is created next to it and each child writes to its own file there.
`run_parallel(commands, limit)` runs the commands with at most `limit` at a
time and returns their exit codes in order.

### Logging

```python
import sys
from feroxscan.logger import initialize

initialize(verbosity=2, debug_log="scan-debug.log", json_output=True, stream=sys.stderr)
```

Verbosity 0 shows errors only, 1 adds warnings, 2 info, 3 debug and 4 or more
trace output. Every entry is written to the stream as a coloured line; with a
debug log it is also appended there, as NDJSON when `json_output` is set and
as text otherwise.

## What the package does not do

There is no command-line program and no scanning engine: nothing here walks a
wordlist against a target, schedules requests concurrently, recurses into
found directories, keeps scan statistics, draws progress bars, reads a
configuration file, or saves and resumes scan state. The modules above are the
parts such a program is built from, and `run_parallel` only starts the command
lines it is given.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.