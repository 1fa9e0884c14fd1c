"""Start-up helpers: wordlists, target checks and parallel child scans."""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

logger = logging.getLogger(__name__)

#: Arguments that are not passed on to child scans started by --parallel
_PARALLEL_STRIP = re.compile("--stdin|-q|--quiet|--silent|--verbosity|-v|-vv|-vvv|-vvvv")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def read_wordlist(path: str | Path) -> list[str]:
    """Words from ``path``, skipping blank lines, comments and undecodable lines."""
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise OSError(f"Could not open {path}") from exc

    words: list[str] = []
    with handle:
        for raw in handle:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                continue
            if line.endswith("\n"):
                line = line[:-1]
                if line.endswith("\r"):
                    line = line[:-1]
            if not line or line.startswith("#"):
                continue
            words.append(line)

    logger.debug("read %d words from %s", len(words), path)
    return words


def check_denylists(
    targets: Sequence[str],
    regex_denylist: Iterable[str | re.Pattern[str]] = (),
    url_denylist: Iterable[str] = (),
) -> Sequence[str]:
    """Raise ValueError if a denylist entry matches a base target; else return the targets."""
    patterns = [re.compile(p) if isinstance(p, str) else p for p in regex_denylist]
    denied_urls = list(url_denylist)

    for target in targets:
        for pattern in patterns:
            if pattern.search(target):
                raise ValueError(
                    f"The regex '{pattern.pattern}' matches {target}; the scan will never start"
                )
        for denied in denied_urls:
            if denied.rstrip("/") == target.rstrip("/"):
                raise ValueError(
                    f"The url '{denied}' matches {target}; the scan will never start"
                )
    return targets


def slugify_filename(url: str, prefix: str, suffix: str) -> str:
    """A file name derived from ``url`` that is safe to use on any file system."""
    slug = _UNSAFE_CHARS.sub("_", url.replace("://", "_"))
    name = f"{prefix}-{slug}" if prefix else slug
    return f"{name}.{suffix}" if suffix else name


def _output_directory(output: str) -> Path:
    output_path = Path(output)
    if not output_path.name:
        raise ValueError(f"Could not determine a file name from {output}")
    folder = output_path.with_name(slugify_filename(output_path.name, "", "logs"))
    try:
        folder.mkdir()
    except OSError:
        # most likely the directory exists already
        pass
    return folder


def parallel_commands(argv: Sequence[str], targets: Iterable[str], output: str = "") -> list[list[str]]:
    """Command lines for one child scan per target, derived from the original ``argv``.

    Verbosity, quiet and stdin options are dropped, ``--silent`` is forced and
    ``--parallel N`` is removed. When ``output`` is set, each child writes to its own
    file inside a directory created next to ``output``.
    """
    original = [arg for arg in argv if not _PARALLEL_STRIP.search(arg)]
    original.append("--silent")

    try:
        index = original.index("--parallel")
    except ValueError as exc:
        raise ValueError("--parallel was not found among the arguments") from exc
    if index + 1 >= len(original):
        raise ValueError("--parallel requires a value")
    del original[index : index + 2]

    out_dir = _output_directory(output) if output else None
    out_idx = None
    if out_dir is not None:
        out_idx = next(
            (i for i, arg in enumerate(original) if arg in ("--output", "-o")), None
        )
        if out_idx is None or out_idx + 1 >= len(original):
            raise ValueError("-o|--output with a value was not found among the arguments")

    commands: list[list[str]] = []
    for target in targets:
        cloned = list(original)
        if out_dir is not None and out_idx is not None:
            cloned[out_idx + 1] = str(out_dir / slugify_filename(target, "ferox", "log"))
        cloned.extend(["-u", target])
        commands.append(cloned)
    return commands


def run_parallel(commands: Iterable[Sequence[str]], limit: int) -> list[int]:
    """Run the commands with at most ``limit`` at once; return their exit codes in order."""
    if limit < 1:
        raise ValueError("limit must be at least 1")

    def _run(command: Sequence[str]) -> int:
        logger.debug("parallel exec: %s", " ".join(command))
        return subprocess.run(list(command), check=False).returncode

    with ThreadPoolExecutor(max_workers=limit) as pool:
        return list(pool.map(_run, commands))