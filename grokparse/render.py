"""
Rendering of records, failures and end-of-run stats as JSON or CSV lines.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable

from .errors import SerializationError
from .types import Failed, FieldMap, Stats

CSV_SEPARATOR = ", "


class OutputFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class Renderer:
    """Base for the output formats.

    ``render_record`` and ``render_stats`` return the lines for the success
    channel; ``render_failure`` returns the single line for the error
    channel.
    """

    def render_record(self, fields: FieldMap) -> list[str]:
        raise NotImplementedError

    def render_stats(self, stats: Stats) -> list[str]:
        raise NotImplementedError

    def render_failure(self, outcome: Failed) -> str:
        return f'{outcome.reason} against data: "{outcome.raw_line}"'


class JsonRenderer(Renderer):
    """One compact JSON object per line."""

    def render_record(self, fields: FieldMap) -> list[str]:
        return [_dumps(fields)]

    def render_stats(self, stats: Stats) -> list[str]:
        return [_dumps(stats.as_dict())]


class CsvRenderer(Renderer):
    """Quoted, comma-space separated rows under a header taken from the first record.

    The header is written once. Rows always follow their own sorted keys, so
    a record whose field set differs from the first one does not line up
    with the header.
    """

    def __init__(self) -> None:
        self.columns: list[str] = []
        self.header_written = False

    def render_record(self, fields: FieldMap) -> list[str]:
        lines: list[str] = []
        if not self.header_written:
            self.columns = sorted(fields)
            self.header_written = True
            lines.append(_csv_row(self.columns))
        lines.append(_csv_row(fields.values()))
        return lines

    def render_stats(self, stats: Stats) -> list[str]:
        counts = stats.as_dict()
        return [_csv_row(counts), CSV_SEPARATOR.join(str(v) for v in counts.values())]


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _csv_row(values: Iterable[str]) -> str:
    return CSV_SEPARATOR.join(_quote(v) for v in values)


def _dumps(obj: Any) -> str:
    try:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Could not serialize record as JSON: {e}") from e


def make_renderer(fmt: OutputFormat | str) -> Renderer:
    fmt = OutputFormat(fmt)
    if fmt is OutputFormat.CSV:
        return CsvRenderer()
    return JsonRenderer()
