"""
Exceptions raised by grokparse.

Setup problems (configuration, pattern compilation, output destinations)
abort a run before any line is read. SerializationError is the only one the
pipeline recovers from per record. I/O failures are plain OSError.
"""

from __future__ import annotations

from pathlib import Path


class GrokParseError(Exception):
    """Base exception for all grokparse errors."""

    pass


class ConfigError(GrokParseError):
    """Raised for invalid options, pattern directories or alias files."""

    pass


class CompileError(GrokParseError):
    """
    Raised when a grok template cannot be turned into a regular expression.

    Attributes:
        template: The template being compiled
        fragment: The fragment name involved, when known
        message: Detailed error message
    """

    def __init__(self, message: str, template: str, fragment: str | None = None):
        self.message = message
        self.template = template
        self.fragment = fragment
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.fragment:
            return f"{self.message}: %{{{self.fragment}}} (in {self.template!r})"
        return f"{self.message} (in {self.template!r})"


class DestinationConflict(GrokParseError):
    """
    Raised when an output file or its error sibling already exists.

    Attributes:
        paths: Every conflicting path, data file first
    """

    def __init__(self, paths: list[Path]):
        self.paths = list(paths)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if len(self.paths) > 1:
            joined = " or ".join(str(p) for p in self.paths)
            return f"Could not log to {joined}. Both files already exist."
        return f"Could not log to {self.paths[0]}, file already exists"


class InputError(GrokParseError):
    """Raised when an input file cannot be decoded as text."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class SerializationError(GrokParseError):
    """Raised when a matched record cannot be rendered in the output format."""

    pass
