"""
Line sources: standard input, or a list of files read as one stream.

Both variants hand out raw lines (terminator included) exactly once and in
read order. A final line without a terminator is still produced.
"""

from __future__ import annotations

import glob
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO

from .errors import ConfigError, InputError

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


class LineSource:
    """Base for the input variants.

    ``read_line`` returns the next raw line or None once the stream is
    exhausted. Iterating a source calls it until then.
    """

    def __init__(self) -> None:
        self.lines_read = 0

    def read_line(self) -> Optional[str]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self.read_line()
        if line is None:
            raise StopIteration
        return line

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ConsoleSource(LineSource):
    """Reads from standard input, or from ``stream`` when given."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream

    def read_line(self) -> Optional[str]:
        stream = self._stream if self._stream is not None else sys.stdin
        try:
            line = stream.readline()
        except UnicodeDecodeError as e:
            raise InputError(f"not valid UTF-8 ({e.reason})", path="<stdin>") from e
        if not line:
            return None
        self.lines_read += 1
        return line


class FileSequenceSource(LineSource):
    """Reads a list of files back to front as one stream.

    The last path is opened on construction and the rest are consumed from
    the end of the list, so ``[a, b, c]`` yields all of ``c``, then ``b``,
    then ``a``. Open and read failures propagate immediately.
    """

    def __init__(self, paths: Iterable[str | Path]) -> None:
        super().__init__()
        self.remaining: list[Path] = [Path(p) for p in paths]
        self.current: TextIO | None = None
        self.current_path: Path | None = None
        if self.remaining:
            self._open(self.remaining.pop())

    def _open(self, path: Path) -> None:
        logger.debug("Opening input %s", path)
        self.current = open(path, "r", encoding="utf-8")
        self.current_path = path

    def read_line(self) -> Optional[str]:
        while self.current is not None:
            try:
                line = self.current.readline()
            except UnicodeDecodeError as e:
                raise InputError(f"not valid UTF-8 ({e.reason})", path=str(self.current_path)) from e
            if line:
                self.lines_read += 1
                return line
            self.close()
            if self.remaining:
                self._open(self.remaining.pop())
        return None

    def close(self) -> None:
        if self.current is not None:
            self.current.close()
            self.current = None


def expand_inputs(patterns: Iterable[str]) -> list[str]:
    """Expand each glob into its sorted matches.

    A glob that matches nothing is an error rather than an empty dataset.
    """
    paths: list[str] = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern))
        if not matches:
            raise ConfigError(f"{pattern} did not return any files")
        paths.extend(matches)
    return paths


def open_source(inputs: Iterable[str] | None) -> LineSource:
    """Build the source for ``inputs``: stdin when empty or ``-``, files otherwise."""
    inputs = list(inputs or [])
    if not inputs or inputs == [STDIN_MARKER]:
        return ConsoleSource()
    if STDIN_MARKER in inputs:
        raise ConfigError("'-' (stdin) cannot be combined with input files")
    paths = expand_inputs(inputs)
    logger.info("Reading %d input file(s)", len(paths))
    return FileSequenceSource(paths)
