"""
Output sinks with a success channel and an error channel.

File sinks open their target in append mode around every single write, so a
run that dies part way leaves complete, appendable files behind.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from .errors import ConfigError, DestinationConflict

logger = logging.getLogger(__name__)

ERROR_SUFFIX = ".err"


class Sink:
    def write_success(self, text: str) -> None:
        raise NotImplementedError

    def write_failure(self, text: str) -> None:
        raise NotImplementedError


class ConsoleSink(Sink):
    """Successes to stdout, failures to stderr (or the given streams)."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out
        self._err = err

    def write_success(self, text: str) -> None:
        print(text, file=self._out if self._out is not None else sys.stdout)

    def write_failure(self, text: str) -> None:
        print(text, file=self._err if self._err is not None else sys.stderr)


class FileSink(Sink):
    """Appends successes to ``path`` and failures to ``<path>.err``.

    Refuses to start when either file already exists.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.error_path = error_path_for(self.path)
        conflicts = [p for p in (self.path, self.error_path) if p.exists()]
        if conflicts:
            raise DestinationConflict(conflicts)
        parent = self.path.parent
        if not parent.is_dir():
            raise ConfigError(f"Output directory {parent} does not exist")
        logger.debug("Writing to %s (errors to %s)", self.path, self.error_path)

    def write_success(self, text: str) -> None:
        _append_line(self.path, text)

    def write_failure(self, text: str) -> None:
        _append_line(self.error_path, text)


def error_path_for(path: Path) -> Path:
    return path.with_name(path.name + ERROR_SUFFIX)


def _append_line(path: Path, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text + "\n")


def open_sink(path: str | Path | None) -> Sink:
    if path is None:
        return ConsoleSink()
    return FileSink(path)
